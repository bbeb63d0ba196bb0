from __future__ import annotations

import secrets
from datetime import datetime, timedelta
from typing import Callable

from .. import models
from ..core.logging import get_logger
from ..domain.errors import OtpAlreadyVerified, OtpCodeMismatch, OtpExpired, OtpNotPending
from ..domain.interfaces import AccountStoreProtocol
from ..domain.results import Result
from ..domain.verification import Pending, Unverified, Verified

logger = get_logger(__name__)

OTP_MIN = 100000
OTP_MAX = 999999
DEFAULT_OTP_TTL = timedelta(minutes=10)


class OtpEngine:
    """Single-slot email verification codes.

    Each account holds at most one pending code; issuing a new one replaces
    the previous one.
    """

    def __init__(
        self,
        store: AccountStoreProtocol,
        ttl: timedelta = DEFAULT_OTP_TTL,
        clock: Callable[[], datetime] = models.utcnow,
    ):
        self.store = store
        self.ttl = ttl
        self.clock = clock

    @staticmethod
    def generate() -> str:
        return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))

    def issue(self, account: models.Account) -> Pending:
        now = self.clock()
        pending = Pending(code=self.generate(), issued_at=now, expires_at=now + self.ttl)
        account.apply_verification(pending)
        self.store.save(account)
        logger.info("Issued verification code for account_id=%s expires_at=%s", account.id, pending.expires_at)
        return pending

    def validate(self, account: models.Account, code: str) -> Result[Verified]:
        state = account.verification
        if isinstance(state, Verified):
            return Result.failure(OtpAlreadyVerified())
        if not isinstance(state, Pending):
            return Result.failure(OtpNotPending())
        if code != state.code:
            return Result.failure(OtpCodeMismatch())
        if state.is_expired(self.clock()):
            account.apply_verification(Unverified())
            self.store.save(account)
            logger.info("Cleared expired verification code for account_id=%s", account.id)
            return Result.failure(OtpExpired())

        verified = Verified()
        account.apply_verification(verified)
        self.store.save(account)
        logger.info("Email verified for account_id=%s", account.id)
        return Result.success(verified)
