from __future__ import annotations
import re
from typing import Optional
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models
from ..core.logging import get_logger
from .errors import DuplicateAccount, StoreFailure

logger = get_logger(__name__)

# Postgres/MySQL name the unique index; SQLite names the column.
_PHONE_CONSTRAINT = re.compile(r"""ix_accounts_phone["'`]|constraint failed: accounts\.phone\b""", re.IGNORECASE)


def duplicate_field(detail: str) -> str:
    """Name the unique column a driver's integrity error points at."""
    return "phone" if _PHONE_CONSTRAINT.search(detail) else "email"


class AccountRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> Optional[models.Account]:
        return self._first(models.Account.email == email)

    def find_by_phone(self, phone: str) -> Optional[models.Account]:
        return self._first(models.Account.phone == phone)

    def find_by_id(self, account_id: int) -> Optional[models.Account]:
        return self._first(models.Account.id == account_id)

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
        account = models.Account(
            name=name,
            email=email,
            phone=phone,
            hashed_password=hashed_password,
            agreed_to_terms=agreed_to_terms,
            role=role.value,
            email_verified=False,
        )
        self.db.add(account)
        self._commit()
        self.db.refresh(account)
        return account

    def save(self, account: models.Account) -> None:
        self.db.add(account)
        self._commit()

    def _first(self, criterion) -> Optional[models.Account]:
        try:
            return self.db.query(models.Account).filter(criterion).first()
        except SQLAlchemyError as exc:
            raise StoreFailure(message="Account lookup failed") from exc

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            detail = str(exc.orig)
            raise DuplicateAccount(duplicate_field(detail), detail) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Account write failed: %s", exc)
            raise StoreFailure(message="Account write failed") from exc
