from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from .. import models


class AccountStoreProtocol(Protocol):
    def find_by_email(self, email: str) -> Optional[models.Account]:
        ...

    def find_by_phone(self, phone: str) -> Optional[models.Account]:
        ...

    def find_by_id(self, account_id: int) -> Optional[models.Account]:
        ...

    def create(
        self,
        *,
        name: str,
        email: str,
        phone: str,
        hashed_password: str,
        agreed_to_terms: bool,
        role: models.Role = models.Role.USER,
    ) -> models.Account:
        """Persist a new account. Raises DuplicateAccount on a uniqueness violation."""
        ...

    def save(self, account: models.Account) -> None:
        ...


class EmailSenderProtocol(Protocol):
    def send(self, to: str, subject: str, html_body: str) -> None:
        ...


@dataclass(frozen=True)
class OutgoingEmail:
    to: str
    subject: str
    html_body: str


# Hands a message to whatever delivers it later; must not block on the transport.
MailDispatcher = Callable[[OutgoingEmail], None]
