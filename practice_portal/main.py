import logging
import time
from datetime import timedelta
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.v1.auth import router as auth_router
from .api.v1.demo import router as demo_router
from .core.config import Settings, get_settings
from .core.errors import AuthError, ValidationError
from .core.security import PasswordHasher, TokenService
from .services.seed_service import seed_accounts
from .store import CredentialStore, build_credential_store

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}

HTTP_ERROR_MESSAGES = {
    status.HTTP_404_NOT_FOUND: "The requested resource was not found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "Method not allowed",
}


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[CredentialStore] = None,
) -> FastAPI:
    """Build the application. Raises if the configuration is unusable."""
    settings = settings or get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.VERSION,
        description="Staff authentication and session API for the IWIL practice portal",
        openapi_url="/api/v1/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = settings
    app.state.hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
    app.state.tokens = TokenService(
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        lifetime=timedelta(days=settings.TOKEN_EXPIRE_DAYS),
    )
    app.state.store = store if store is not None else build_credential_store(settings)

    if settings.ALLOWED_HOSTS != ["*"]:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)

    # Request logging, timing and CORS headers on every response
    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        for name, value in CORS_HEADERS.items():
            response.headers.setdefault(name, value)

        logger.info(
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.4f}s"
        )
        return response

    # Exception handlers
    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        content = {"message": exc.message}
        if isinstance(exc, ValidationError) and exc.fields:
            content["fields"] = exc.fields
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Invalid request body"},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = HTTP_ERROR_MESSAGES.get(exc.status_code, str(exc.detail))
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        logger.error(f"Internal server error: {exc!r}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "An unexpected error occurred"},
            headers=CORS_HEADERS,
        )

    # Include routers
    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(demo_router, prefix="/api/v1")

    @app.on_event("startup")
    async def startup_event():
        """Prepare the credential store on startup."""
        logger.info(f"Starting {settings.APP_NAME}...")
        store = app.state.store
        logger.info(f"Using {store.backend} credential store")

        try:
            store.ensure_schema()
        except Exception as e:
            logger.error(f"Failed to prepare credential store: {e}")
            raise

        if store.backend == "memory" and settings.SEED_DEMO_ACCOUNTS:
            seed_accounts(store, app.state.hasher)

        logger.info("Application startup complete")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info(f"Shutting down {settings.APP_NAME}...")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": time.time(),
            "version": settings.VERSION,
            "store": app.state.store.backend,
        }

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "message": f"Welcome to the {settings.APP_NAME} API",
            "version": settings.VERSION,
            "docs": "/docs",
            "health": "/health",
        }

    @app.get("/api/v1/info")
    async def api_info():
        """API information endpoint."""
        return {
            "name": settings.APP_NAME,
            "version": settings.VERSION,
            "endpoints": {
                "login": "/api/v1/auth/login",
                "register": "/api/v1/auth/register",
                "session": "/api/v1/auth/session",
                "docs": "/docs",
                "openapi": "/api/v1/openapi.json",
            },
        }

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "practice_portal.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=get_settings().DEBUG,
        log_level="info",
    )
