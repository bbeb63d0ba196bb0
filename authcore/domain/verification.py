from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Union


@dataclass(frozen=True)
class Unverified:
    """Email not verified and no code outstanding."""


@dataclass(frozen=True)
class Pending:
    code: str
    issued_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


@dataclass(frozen=True)
class Verified:
    """Email verified. Terminal."""


VerificationState = Union[Unverified, Pending, Verified]
