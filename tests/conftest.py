from datetime import datetime, timedelta
from typing import Dict, Generator, List, Tuple

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from authcore.core.settings import Settings
from authcore.database import Database
from authcore.domain.interfaces import OutgoingEmail
from authcore.domain.repositories import AccountRepository
from authcore.main import create_app
from authcore.models import Account
from authcore.schemas import RegisterRequest
from authcore.services.account_service import AccountService
from authcore.services.otp import OtpEngine
from authcore.services.passwords import PasswordManager
from authcore.services.sessions import SessionIssuer

TEST_SECRET = "test-secret-key-that-is-long-enough-0123456789"

# bcrypt's minimum cost keeps the suite fast; production uses BCRYPT_ROUNDS.
FAST_ROUNDS = 4


class FakeClock:
    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingSender:
    """Email sender that records messages and can be told to fail."""

    def __init__(self, failures: int = 0):
        self.failures = failures
        self.calls = 0
        self.sent: List[Tuple[str, str, str]] = []

    def send(self, to: str, subject: str, html_body: str) -> None:
        self.calls += 1
        if self.failures > 0:
            self.failures -= 1
            raise ConnectionError("smtp unavailable")
        self.sent.append((to, subject, html_body))


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        ENV="dev",
        AUTH_SECRET_KEY=TEST_SECRET,
        DATABASE_URL="sqlite:///:memory:",
        EMAIL_MAX_ATTEMPTS=3,
        EMAIL_RETRY_BASE_DELAY=0.0,
        LOG_LEVEL="WARNING",
        _env_file=None,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def passwords() -> PasswordManager:
    return PasswordManager(rounds=FAST_ROUNDS)


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    database = Database("sqlite:///:memory:")
    database.create_all()
    session = database.session()
    try:
        yield session
    finally:
        session.close()
        database.dispose()


@pytest.fixture()
def store(db_session: Session) -> AccountRepository:
    return AccountRepository(db_session)


@pytest.fixture()
def otp_engine(store: AccountRepository, clock: FakeClock) -> OtpEngine:
    return OtpEngine(store, ttl=timedelta(minutes=10), clock=clock)


@pytest.fixture()
def sessions() -> SessionIssuer:
    return SessionIssuer(secret=TEST_SECRET)


@pytest.fixture()
def outbox() -> List[OutgoingEmail]:
    return []


@pytest.fixture()
def service(
    store: AccountRepository,
    passwords: PasswordManager,
    otp_engine: OtpEngine,
    sessions: SessionIssuer,
    outbox: List[OutgoingEmail],
    settings: Settings,
) -> AccountService:
    return AccountService(
        store=store,
        passwords=passwords,
        otp=otp_engine,
        sessions=sessions,
        dispatch_mail=outbox.append,
        settings=settings,
    )


@pytest.fixture()
def register_request():
    def _build(**overrides) -> RegisterRequest:
        data: Dict[str, object] = {
            "name": "An Nguyen",
            "email": "a@x.com",
            "password": "Passw0rd",
            "confirm_password": "Passw0rd",
            "phone": "0123456789",
            "agreed_to_terms": True,
        }
        data.update(overrides)
        return RegisterRequest(**data)

    return _build


@pytest.fixture()
def make_account(store: AccountRepository, passwords: PasswordManager):
    def _make(email: str = "a@x.com", phone: str = "0123456789", password: str = "Passw0rd", verified: bool = False) -> Account:
        account = store.create(
            name="Test User",
            email=email,
            phone=phone,
            hashed_password=passwords.hash(password),
            agreed_to_terms=True,
        )
        if verified:
            account.email_verified = True
            store.save(account)
        return account

    return _make


@pytest.fixture()
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture()
def app(settings: Settings, sender: RecordingSender, passwords: PasswordManager):
    return create_app(settings, email_sender=sender, password_manager=passwords)


@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def app_db(app) -> Generator[Session, None, None]:
    session = app.state.database.session()
    try:
        yield session
    finally:
        session.close()
