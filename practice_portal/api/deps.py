import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import Header, HTTPException, Request, status

from ..core.errors import AuthError, ServiceError, Unauthenticated
from ..core.security import PasswordHasher
from ..services.auth_service import AuthService
from ..services.session_service import SessionService
from ..store.base import CredentialStore

logger = logging.getLogger(__name__)


def get_store(request: Request) -> CredentialStore:
    return request.app.state.store


def get_hasher(request: Request) -> PasswordHasher:
    return request.app.state.hasher


def get_auth_service(request: Request) -> AuthService:
    return AuthService(request.app.state.store, request.app.state.hasher)


def get_session_service(request: Request) -> SessionService:
    return SessionService(request.app.state.store, request.app.state.tokens)


async def get_bearer_token(
    authorization: Optional[str] = Header(default=None),
) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise Unauthenticated()

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthenticated()

    return token.strip()


def require_demo_seeding(request: Request) -> None:
    if not request.app.state.settings.DEMO_SEED_ENABLED:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)


@contextmanager
def service_guard(failure_message: str) -> Iterator[None]:
    """
    Let expected auth failures through and turn anything else into a
    generic ServiceError, logging the real cause server-side.
    """
    try:
        yield
    except AuthError:
        raise
    except Exception as exc:
        logger.exception(f"{failure_message} ({type(exc).__name__})")
        raise ServiceError(failure_message) from exc
