import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Response, status
from fastapi.concurrency import run_in_threadpool

from ...core.errors import BadRequest
from ...schemas.auth import (
    AuthRequest,
    MessageResponse,
    SessionAction,
    SessionResponse,
    TokenResponse,
    UserLogin,
    UserRegister,
)
from ...services.auth_service import AuthService
from ...services.session_service import SessionService
from ..deps import (
    get_auth_service,
    get_bearer_token,
    get_session_service,
    service_guard,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

LOGIN_FAILED = "Login failed. Please try again."
REGISTRATION_FAILED = "Registration failed. Please try again."
SESSION_FAILED = "Session validation failed"


async def _login(
    login_data: UserLogin,
    auth_service: AuthService,
    session_service: SessionService,
) -> TokenResponse:
    with service_guard(LOGIN_FAILED):
        user = await run_in_threadpool(
            auth_service.authenticate, login_data.email, login_data.password
        )
        token = session_service.issue_token(user)

    logger.info(f"Login successful for {user.id}")
    return TokenResponse(token=token, user=user, message="Login successful")


async def _register(
    user_data: UserRegister,
    auth_service: AuthService,
    session_service: SessionService,
) -> TokenResponse:
    with service_guard(REGISTRATION_FAILED):
        user = await run_in_threadpool(auth_service.register, user_data)
        token = session_service.issue_token(user)

    return TokenResponse(token=token, user=user, message="Account created successfully")


@router.options("", include_in_schema=False)
@router.options("/login", include_in_schema=False)
@router.options("/register", include_in_schema=False)
@router.options("/session", include_in_schema=False)
async def preflight():
    """Answer CORS preflight requests."""
    return {}


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: Optional[UserLogin] = Body(default=None),
    auth_service: AuthService = Depends(get_auth_service),
    session_service: SessionService = Depends(get_session_service),
):
    """Authenticate with email and password and return a bearer token."""
    return await _login(login_data or UserLogin(), auth_service, session_service)


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    user_data: Optional[UserRegister] = Body(default=None),
    auth_service: AuthService = Depends(get_auth_service),
    session_service: SessionService = Depends(get_session_service),
):
    """Create a staff account and sign it in."""
    return await _register(user_data or UserRegister(), auth_service, session_service)


@router.post("", response_model=TokenResponse)
async def auth_action(
    response: Response,
    payload: Optional[AuthRequest] = Body(default=None),
    auth_service: AuthService = Depends(get_auth_service),
    session_service: SessionService = Depends(get_session_service),
):
    """Combined endpoint: ``action`` selects login or register."""
    payload = payload or AuthRequest()
    if payload.action == "login":
        return await _login(
            UserLogin(email=payload.email, password=payload.password),
            auth_service,
            session_service,
        )
    if payload.action == "register":
        response.status_code = status.HTTP_201_CREATED
        return await _register(payload, auth_service, session_service)
    raise BadRequest("Invalid action")


@router.get("/session", response_model=SessionResponse)
async def get_session(
    token: str = Depends(get_bearer_token),
    session_service: SessionService = Depends(get_session_service),
):
    """Return the account behind the presented bearer token."""
    with service_guard(SESSION_FAILED):
        user = await run_in_threadpool(session_service.resolve, token)
    return SessionResponse(user=user)


@router.post("/session", response_model=None)
async def session_action(
    payload: Optional[SessionAction] = Body(default=None),
    token: str = Depends(get_bearer_token),
    session_service: SessionService = Depends(get_session_service),
):
    """Log out (acknowledgement only) or refresh the bearer token."""
    action = payload.action if payload else None

    if action == "logout":
        with service_guard(SESSION_FAILED):
            await run_in_threadpool(session_service.logout, token)
        return MessageResponse(message="Logged out successfully")

    if action == "refresh":
        with service_guard(SESSION_FAILED):
            new_token, user = await run_in_threadpool(session_service.refresh, token)
        return TokenResponse(
            token=new_token, user=user, message="Token refreshed successfully"
        )

    # Still require a valid session before reporting a bad action
    with service_guard(SESSION_FAILED):
        await run_in_threadpool(session_service.resolve, token)
    raise BadRequest("Invalid request")
