from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from uuid import uuid4

from jose import JWTError, jwt

from .. import models

DEFAULT_SESSION_TTL = timedelta(days=30)


@dataclass(frozen=True)
class TokenClaims:
    subject_id: int
    email: str
    role: str


def _aware_utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionIssuer:
    """Mints and checks signed bearer tokens. Validity is signature plus expiry only."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = DEFAULT_SESSION_TTL,
        issuer: Optional[str] = None,
        clock: Callable[[], datetime] = _aware_utcnow,
    ):
        if not secret:
            raise ValueError("a signing secret is required")
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = ttl
        self.issuer = issuer
        self.clock = clock

    @property
    def expires_in(self) -> int:
        return int(self.ttl.total_seconds())

    def issue(self, account: models.Account) -> str:
        now = self.clock()
        claims = {
            "sub": str(account.id),
            "email": account.email,
            "role": account.role,
            "iat": int(now.timestamp()),
            "exp": int((now + self.ttl).timestamp()),
            "jti": str(uuid4()),
        }
        if self.issuer:
            claims["iss"] = self.issuer
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Optional[TokenClaims]:
        if not token:
            return None
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require_exp": True, "verify_iss": bool(self.issuer)},
            )
        except JWTError:
            return None

        sub = payload.get("sub")
        email = payload.get("email")
        role = payload.get("role")
        if not sub or not email or not role:
            return None
        try:
            subject_id = int(sub)
        except (TypeError, ValueError):
            return None
        return TokenClaims(subject_id=subject_id, email=email, role=role)
