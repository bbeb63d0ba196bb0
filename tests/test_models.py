from datetime import datetime, timedelta

import pytest

from authcore.domain.errors import DuplicateAccount
from authcore.domain.repositories import duplicate_field
from authcore.domain.verification import Pending, Unverified, Verified
from authcore.models import Account, Role

NOW = datetime(2024, 1, 1, 12, 0, 0)


def _account(**kwargs) -> Account:
    return Account(email="a@x.com", role=Role.USER.value, email_verified=False, **kwargs)


def test_new_account_is_unverified():
    assert isinstance(_account().verification, Unverified)


def test_pending_round_trips_through_columns():
    account = _account()
    pending = Pending(code="123456", issued_at=NOW, expires_at=NOW + timedelta(minutes=10))

    account.apply_verification(pending)

    assert account.otp_code == "123456"
    assert account.verification == pending


def test_verified_clears_otp_slot():
    account = _account()
    account.apply_verification(Pending(code="123456", issued_at=NOW, expires_at=NOW))
    account.apply_verification(Verified())

    assert account.email_verified is True
    assert account.otp_code is None
    assert account.otp_issued_at is None
    assert account.otp_expires_at is None
    assert isinstance(account.verification, Verified)


def test_verification_is_not_reversible():
    account = _account()
    account.apply_verification(Verified())

    with pytest.raises(ValueError):
        account.apply_verification(Unverified())
    with pytest.raises(ValueError):
        account.apply_verification(Pending(code="123456", issued_at=NOW, expires_at=NOW))
    assert account.email_verified is True


def test_pending_expiry_is_strictly_after_deadline():
    pending = Pending(code="123456", issued_at=NOW, expires_at=NOW + timedelta(minutes=10))
    assert not pending.is_expired(pending.expires_at)
    assert pending.is_expired(pending.expires_at + timedelta(microseconds=1))


def test_store_enforces_unique_phone(store, make_account):
    make_account()
    with pytest.raises(DuplicateAccount) as excinfo:
        make_account(email="b@x.com")
    assert excinfo.value.field == "phone"


def test_store_lookup_by_each_key(store, make_account):
    account = make_account()
    assert store.find_by_email("a@x.com").id == account.id
    assert store.find_by_phone("0123456789").id == account.id
    assert store.find_by_id(account.id).email == "a@x.com"
    assert store.find_by_id(account.id + 1) is None


@pytest.mark.parametrize(
    "detail, field",
    [
        ("UNIQUE constraint failed: accounts.phone", "phone"),
        ("UNIQUE constraint failed: accounts.email", "email"),
        (
            'duplicate key value violates unique constraint "ix_accounts_email"\n'
            "DETAIL:  Key (email)=(phone@x.com) already exists.",
            "email",
        ),
        (
            'duplicate key value violates unique constraint "ix_accounts_email"\n'
            "DETAIL:  Key (email)=(accounts.phone@x.com) already exists.",
            "email",
        ),
        (
            'duplicate key value violates unique constraint "ix_accounts_phone"\n'
            "DETAIL:  Key (phone)=(0123456789) already exists.",
            "phone",
        ),
        ("(1062, \"Duplicate entry 'phone@x.com' for key 'accounts.ix_accounts_email'\")", "email"),
        ("(1062, \"Duplicate entry '0123456789' for key 'accounts.ix_accounts_phone'\")", "phone"),
    ],
)
def test_duplicate_field_reads_constraint_not_value(detail, field):
    assert duplicate_field(detail) == field
