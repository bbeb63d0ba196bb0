from __future__ import annotations

from typing import Optional


class AuthError(Exception):
    """Base class for every user-facing failure of an account operation.

    Carries a stable machine-readable ``code``, a human-readable ``message``
    and the HTTP status the boundary should answer with.
    """

    status_code: int = 400
    default_code: str = "auth_error"
    default_message: str = "Request could not be processed"

    def __init__(self, code: Optional[str] = None, message: Optional[str] = None, *, status_code: Optional[int] = None):
        self.code = code or self.default_code
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(AuthError):
    """Raised or returned when input is missing or malformed."""

    default_code = "invalid_input"
    default_message = "Invalid input"


class ConflictError(AuthError):
    """The email or phone number is already registered."""

    default_code = "conflict"
    default_message = "Account already exists"


class AuthenticationError(AuthError):
    """Bad credentials, unverified account, or an invalid bearer token."""

    default_code = "authentication_failed"
    default_message = "Authentication failed"


class NotFoundError(AuthError):
    """The account referenced by an authenticated request no longer exists."""

    status_code = 404
    default_code = "account_not_found"
    default_message = "Account not found"


class OtpError(AuthError):
    default_code = "otp_error"
    default_message = "Verification code could not be checked"


class OtpAlreadyVerified(OtpError):
    default_code = "already_verified"
    default_message = "Email has already been verified"


class OtpNotPending(OtpError):
    default_code = "no_pending_otp"
    default_message = "No verification code found. Please request a new code."


class OtpCodeMismatch(OtpError):
    default_code = "code_mismatch"
    default_message = "Verification code is incorrect"


class OtpExpired(OtpError):
    default_code = "expired"
    default_message = "Verification code has expired. Please request a new code."


class InternalError(AuthError):
    """Store or crypto failure. Always raised, never returned as a result."""

    status_code = 500
    default_code = "internal_error"
    default_message = "An unexpected error occurred"


class CryptoFailure(InternalError):
    default_code = "crypto_failure"


class CorruptCredential(InternalError):
    default_code = "corrupt_credential"


class StoreFailure(InternalError):
    default_code = "store_failure"


class DuplicateAccount(Exception):
    """Raised by the credential store when a uniqueness constraint rejects a write."""

    def __init__(self, field: str, detail: str = ""):
        self.field = field
        super().__init__(detail or f"duplicate {field}")
