"""Tests for the SQLAlchemy user repository."""

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from app.core.exceptions import DomainError, DomainErrorKind, EmailAlreadyExists, ResourceKind
from app.domain.models.user import UserRole
from app.domain.repositories.user_repository import NewUser

pytestmark = pytest.mark.unit


def _new_user(email="b@example.com", code="c" * 32, **overrides) -> NewUser:
    fields = dict(
        fullname="User B",
        email=email,
        password_hash="$2b$04$" + "x" * 53,
        role=UserRole.MEMBER,
        is_active=True,
        email_verification_code=code,
        email_verification_expires_at=datetime.now(timezone.utc) + timedelta(hours=24),
    )
    fields.update(overrides)
    return NewUser(**fields)


def test_insert_assigns_identity_and_timestamps(user_repo):
    user = user_repo.insert(_new_user())

    assert isinstance(user.id, uuid.UUID)
    assert user.created_at is not None
    assert user.updated_at is not None
    assert user.is_email_verified is False


def test_insert_duplicate_email_raises_conflict(user_repo):
    user_repo.insert(_new_user())
    with pytest.raises(EmailAlreadyExists):
        user_repo.insert(_new_user(code="d" * 32))


def test_email_lookup_is_case_sensitive_as_stored(user_repo):
    user_repo.insert(_new_user(email="Case@example.com"))
    assert user_repo.find_by_email("Case@example.com") is not None
    assert user_repo.find_by_email("case@example.com") is None


def test_find_by_id_and_code(user_repo):
    user = user_repo.insert(_new_user())
    assert user_repo.find_by_id(user.id) is user
    assert user_repo.find_by_verification_code("c" * 32) is user
    assert user_repo.find_by_id(uuid.uuid4()) is None


def test_update_verification_state_clears_code(user_repo):
    user = user_repo.update_verification_state(user_repo.insert(_new_user()))

    assert user.is_email_verified is True
    assert user.email_verification_code is None
    assert user.email_verification_expires_at is None
    assert user_repo.find_by_verification_code("c" * 32) is None


def test_update_verification_code(user_repo):
    user = user_repo.insert(_new_user())
    expires = datetime(2030, 1, 1, tzinfo=timezone.utc)

    user = user_repo.update_verification_code(user, "n" * 32, expires)

    assert user.email_verification_code == "n" * 32
    assert user_repo.find_by_verification_code("c" * 32) is None


def test_toggle_active_flips_flag(user_repo):
    user = user_repo.insert(_new_user())
    assert user_repo.toggle_active(user.id).is_active is False
    assert user_repo.toggle_active(user.id).is_active is True


def test_toggle_active_unknown_user(user_repo):
    missing = uuid.uuid4()
    with pytest.raises(DomainError) as exc_info:
        user_repo.toggle_active(missing)

    error = exc_info.value
    assert error.kind is DomainErrorKind.NOT_FOUND
    assert error.resource is ResourceKind.USER
    assert str(missing) in error.message


def test_list_all_returns_every_user(user_repo):
    user_repo.insert(_new_user(email="one@example.com", code="1" * 32))
    user_repo.insert(_new_user(email="two@example.com", code="2" * 32))
    assert {u.email for u in user_repo.list_all()} == {"one@example.com", "two@example.com"}


def test_driver_errors_become_infrastructure_errors(user_repo):
    with patch.object(user_repo.db, "query", side_effect=OperationalError("SELECT", {}, Exception("down"))):
        with pytest.raises(DomainError) as exc_info:
            user_repo.find_by_email("b@example.com")

    assert exc_info.value.kind is DomainErrorKind.INFRASTRUCTURE
    assert "down" not in exc_info.value.message
