from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from .. import models, schemas
from ..core.logging import get_logger
from ..core.settings import Settings
from ..domain.errors import (
    AuthenticationError,
    ConflictError,
    DuplicateAccount,
    NotFoundError,
    OtpAlreadyVerified,
    ValidationError,
)
from ..domain.interfaces import AccountStoreProtocol, MailDispatcher
from ..domain.results import Result
from ..infrastructure.mailer import verification_email
from ..validators import has_forbidden_characters, is_valid_email, is_valid_phone, missing, normalize_email
from .otp import OtpEngine
from .passwords import PasswordManager
from .sessions import SessionIssuer

logger = get_logger(__name__)


@dataclass(frozen=True)
class SignInResult:
    account: models.Account
    token: str


@dataclass
class AccountService:
    store: AccountStoreProtocol
    passwords: PasswordManager
    otp: OtpEngine
    sessions: SessionIssuer
    dispatch_mail: MailDispatcher
    settings: Settings

    # Registration
    def register(self, payload: schemas.RegisterRequest) -> Result[models.Account]:
        if missing(payload.name, payload.email, payload.password, payload.confirm_password, payload.phone):
            return Result.failure(ValidationError("missing_fields", "Please fill in all fields"))
        email = normalize_email(payload.email)
        phone = payload.phone.strip()
        if not is_valid_email(email):
            return Result.failure(ValidationError("invalid_email", "Invalid email address"))
        if payload.password != payload.confirm_password:
            return Result.failure(ValidationError("password_mismatch", "Passwords do not match"))
        if payload.agreed_to_terms is not True:
            return Result.failure(
                ValidationError("terms_not_accepted", "You must agree to the Terms & Privacy Policy")
            )
        if not is_valid_phone(phone):
            return Result.failure(ValidationError("invalid_phone", "Invalid phone number (10-11 digits)"))
        rejected = self._check_password(payload.password)
        if rejected:
            return Result.failure(rejected)

        # Advisory only; the store's unique constraints decide races.
        if self.store.find_by_email(email):
            return Result.failure(ConflictError("email_taken", "Email address is already registered"))
        if self.store.find_by_phone(phone):
            return Result.failure(ConflictError("phone_taken", "Phone number is already registered"))

        try:
            account = self.store.create(
                name=payload.name.strip(),
                email=email,
                phone=phone,
                hashed_password=self.passwords.hash(payload.password),
                agreed_to_terms=True,
            )
        except DuplicateAccount as exc:
            return Result.failure(self._conflict_for(exc.field))
        logger.info("Account created account_id=%s", account.id)

        pending = self.otp.issue(account)
        self._send_verification(account.email, pending.code)
        return Result.success(account)

    # Verification
    def verify_otp(self, email: Optional[str], code: Optional[str]) -> Result[models.Account]:
        if missing(email, code):
            return Result.failure(ValidationError("missing_fields", "Please provide both email and verification code"))
        account = self.store.find_by_email(normalize_email(email))
        if not account:
            return Result.failure(ValidationError("unknown_email", "Email is not registered"))
        result = self.otp.validate(account, code)
        if not result.ok:
            return Result.failure(result.error)
        return Result.success(account)

    def resend_otp(self, email: Optional[str]) -> Result[models.Account]:
        if missing(email):
            return Result.failure(ValidationError("missing_fields", "Please provide an email address"))
        account = self.store.find_by_email(normalize_email(email))
        if not account:
            return Result.failure(ValidationError("unknown_email", "Email is not registered"))
        if account.email_verified:
            return Result.failure(OtpAlreadyVerified())
        pending = self.otp.issue(account)
        self._send_verification(account.email, pending.code)
        return Result.success(account)

    # Sessions
    def sign_in(self, email: Optional[str], password: Optional[str]) -> Result[SignInResult]:
        if missing(email, password):
            return Result.failure(ValidationError("missing_fields", "Please enter both email and password"))
        account = self.store.find_by_email(normalize_email(email))
        if not account:
            logger.info("Sign-in rejected reason=unknown_email")
            return Result.failure(self._invalid_credentials())
        if not account.email_verified:
            logger.info("Sign-in rejected reason=account_not_verified account_id=%s", account.id)
            return Result.failure(
                AuthenticationError(
                    "account_not_verified",
                    "Account is not activated yet. Please check your email to verify your account.",
                )
            )
        if not self.passwords.verify(password, account.hashed_password):
            logger.info("Sign-in rejected reason=invalid_credentials account_id=%s", account.id)
            return Result.failure(self._invalid_credentials())
        token = self.sessions.issue(account)
        return Result.success(SignInResult(account=account, token=token))

    # Password rotation
    def change_password(self, token: Optional[str], payload: schemas.ChangePasswordRequest) -> Result[models.Account]:
        if not token:
            return Result.failure(
                AuthenticationError("missing_token", "Please sign in to change your password", status_code=401)
            )
        claims = self.sessions.verify(token)
        if claims is None:
            return Result.failure(
                AuthenticationError("invalid_token", "Token is invalid or has expired", status_code=401)
            )

        current, new, confirm = payload.current_password, payload.new_password, payload.confirm_new_password
        if missing(current, new, confirm):
            return Result.failure(ValidationError("missing_fields", "Please fill in all fields"))
        rejected = self._check_password(new, label="New password")
        if rejected:
            return Result.failure(rejected)
        if new != confirm:
            return Result.failure(ValidationError("password_mismatch", "Password confirmation does not match"))
        if new == current:
            return Result.failure(
                ValidationError("password_unchanged", "New password must differ from the current password")
            )

        account = self.store.find_by_id(claims.subject_id)
        if not account:
            return Result.failure(NotFoundError())
        if not self.passwords.verify(current, account.hashed_password):
            return Result.failure(AuthenticationError("wrong_password", "Current password is incorrect"))

        account.hashed_password = self.passwords.hash(new)
        self.store.save(account)
        logger.info("Password changed account_id=%s", account.id)
        return Result.success(account)

    # Helpers
    def _check_password(self, password: str, label: str = "Password") -> Optional[ValidationError]:
        minimum = int(self.settings.AUTH_PASSWORD_MIN_LENGTH)
        if len(password) < minimum:
            return ValidationError("password_too_short", f"{label} must be at least {minimum} characters long")
        if has_forbidden_characters(password):
            return ValidationError("invalid_password", f"{label} contains invalid characters")
        return None

    @staticmethod
    def _invalid_credentials() -> AuthenticationError:
        return AuthenticationError("invalid_credentials", "Incorrect email or password")

    @staticmethod
    def _conflict_for(field: str) -> ConflictError:
        if field == "phone":
            return ConflictError("phone_taken", "Phone number is already registered")
        return ConflictError("email_taken", "Email address is already registered")

    def _send_verification(self, email: str, code: str) -> None:
        message = verification_email(
            email,
            code,
            app_name=self.settings.APP_NAME,
            ttl_minutes=int(self.settings.AUTH_OTP_EXP_MINUTES),
        )
        try:
            self.dispatch_mail(message)
        except Exception:
            # Delivery is best-effort; the account change already happened.
            logger.exception("Could not queue verification email for %s", email)
