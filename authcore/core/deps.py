from __future__ import annotations
from typing import Generator, Optional
from fastapi import BackgroundTasks, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .settings import Settings
from ..database import Database
from ..domain.interfaces import AccountStoreProtocol, EmailSenderProtocol, MailDispatcher
from ..domain.repositories import AccountRepository
from ..infrastructure.delivery import BackgroundMailDispatcher
from ..infrastructure.mailer import SmtpMailer
from ..services.account_service import AccountService
from ..services.otp import OtpEngine
from ..services.passwords import PasswordManager
from ..services.sessions import SessionIssuer

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_db(database: Database = Depends(get_database)) -> Generator[Session, None, None]:
    yield from database.sessions()


def get_account_store(db: Session = Depends(get_db)) -> AccountStoreProtocol:
    return AccountRepository(db)


def get_password_manager(request: Request) -> PasswordManager:
    return request.app.state.password_manager


def get_email_sender(request: Request) -> EmailSenderProtocol:
    return request.app.state.email_sender


def get_mail_dispatcher(
    background_tasks: BackgroundTasks,
    sender: EmailSenderProtocol = Depends(get_email_sender),
    cfg: Settings = Depends(get_settings),
) -> MailDispatcher:
    return BackgroundMailDispatcher(
        background_tasks,
        sender,
        max_attempts=cfg.EMAIL_MAX_ATTEMPTS,
        base_delay=cfg.EMAIL_RETRY_BASE_DELAY,
    )


def get_session_issuer(cfg: Settings = Depends(get_settings)) -> SessionIssuer:
    return SessionIssuer(
        secret=cfg.AUTH_SECRET_KEY,
        algorithm=cfg.AUTH_ALGORITHM,
        ttl=cfg.session_expire_delta,
        issuer=cfg.AUTH_ISSUER,
    )


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    if credentials is None:
        return None
    return credentials.credentials


def get_account_service(
    store: AccountStoreProtocol = Depends(get_account_store),
    passwords: PasswordManager = Depends(get_password_manager),
    sessions: SessionIssuer = Depends(get_session_issuer),
    dispatch_mail: MailDispatcher = Depends(get_mail_dispatcher),
    cfg: Settings = Depends(get_settings),
) -> AccountService:
    return AccountService(
        store=store,
        passwords=passwords,
        otp=OtpEngine(store, ttl=cfg.otp_expire_delta),
        sessions=sessions,
        dispatch_mail=dispatch_mail,
        settings=cfg,
    )


def build_email_sender(cfg: Settings) -> EmailSenderProtocol:
    return SmtpMailer(cfg)
