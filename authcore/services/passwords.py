from __future__ import annotations

from passlib.context import CryptContext
from passlib.exc import PasswordValueError, UnknownHashError

from ..domain.errors import CorruptCredential, CryptoFailure

BCRYPT_ROUNDS = 12


class PasswordManager:
    """One-way hashing and constant-time comparison of account passwords."""

    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self.context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, plaintext: str) -> str:
        try:
            return self.context.hash(plaintext)
        except (TypeError, ValueError) as exc:
            raise CryptoFailure(message="Password hashing failed") from exc

    def verify(self, plaintext: str, hashed: str) -> bool:
        # passlib compares digests in constant time; a mismatch is just False.
        try:
            return self.context.verify(plaintext, hashed)
        except PasswordValueError:
            # The supplied secret can never have been hashed, so it cannot match.
            return False
        except (UnknownHashError, TypeError, ValueError) as exc:
            raise CorruptCredential(message="Stored password hash is unreadable") from exc
