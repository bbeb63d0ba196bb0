from .main import create_app, app
from .auth import router as auth_router
from .services.account_service import AccountService
from .core.settings import Settings

__all__ = [
    "create_app",
    "app",
    "auth_router",
    "AccountService",
    "Settings",
]
