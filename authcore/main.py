from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .database import Database
from .models import *  # noqa: F401,F403
from .auth import router as auth_router
from .core.deps import build_email_sender
from .core.logging import get_logger, setup_logging
from .core.settings import Settings
from .domain.errors import InternalError
from .domain.interfaces import EmailSenderProtocol
from .services.passwords import PasswordManager

logger = get_logger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


def create_app(
    settings: Optional[Settings] = None,
    *,
    email_sender: Optional[EmailSenderProtocol] = None,
    password_manager: Optional[PasswordManager] = None,
) -> FastAPI:
    settings = settings or Settings()
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Auth API", version="1.0.0")
    app.state.settings = settings
    app.state.database = Database(settings.DATABASE_URL)
    app.state.email_sender = email_sender or build_email_sender(settings)
    app.state.password_manager = password_manager or PasswordManager()

    @app.on_event("startup")
    def on_startup():
        # Refuses to start outside dev without a real signing secret.
        settings.validate_for_runtime()
        if settings.uses_insecure_secret:
            logger.warning(
                "AUTH_SECRET_KEY is using the insecure development fallback. "
                "Never run like this outside ENV=dev."
            )
        app.state.database.create_all()

    @app.on_event("shutdown")
    def on_shutdown():
        app.state.database.dispose()

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(part) for part in first.get("loc", ())[1:]) or "body"
            message = f"Invalid value for {field}: {first.get('msg', 'invalid')}"
        else:
            message = "Invalid request"
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": message})

    @app.exception_handler(InternalError)
    async def internal_error_handler(request: Request, exc: InternalError):
        logger.error("Internal failure on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
        return JSONResponse(status_code=exc.status_code, content={"message": GENERIC_ERROR_MESSAGE})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": GENERIC_ERROR_MESSAGE},
        )

    app.include_router(auth_router)
    return app


# Backward-compatible module-level app
app = create_app()
