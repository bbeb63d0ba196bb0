from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, String

from .database import Base
from .domain.verification import Pending, Unverified, VerificationState, Verified


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class Account(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(32), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=Role.USER.value)
    image = Column(String(512), nullable=True)
    gender = Column(String(32), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    agreed_to_terms = Column(Boolean, nullable=False, default=False)
    email_verified = Column(Boolean, nullable=False, default=False)

    # Pending OTP slot; all three set together or all null.
    otp_code = Column(String(6), nullable=True)
    otp_issued_at = Column(DateTime, nullable=True)
    otp_expires_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    @property
    def verification(self) -> VerificationState:
        if self.email_verified:
            return Verified()
        if self.otp_code and self.otp_expires_at is not None:
            return Pending(
                code=self.otp_code,
                issued_at=self.otp_issued_at or self.otp_expires_at,
                expires_at=self.otp_expires_at,
            )
        return Unverified()

    def apply_verification(self, state: VerificationState) -> None:
        if isinstance(state, Pending):
            if self.email_verified:
                raise ValueError("cannot issue a code for a verified account")
            self.otp_code = state.code
            self.otp_issued_at = state.issued_at
            self.otp_expires_at = state.expires_at
            return
        if isinstance(state, Unverified) and self.email_verified:
            raise ValueError("email verification cannot be reverted")
        self.otp_code = None
        self.otp_issued_at = None
        self.otp_expires_at = None
        if isinstance(state, Verified):
            self.email_verified = True
