"""Tests for session token issuance and validation."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from app.application.services.token_service import TokenService
from app.config import Settings
from app.core.exceptions import ConfigurationError, InvalidToken, TokenExpired
from app.domain.models.user import User, UserRole

pytestmark = pytest.mark.unit


@pytest.fixture
def user() -> User:
    return User(id=uuid.uuid4(), fullname="Ada", email="ada@example.com", role=UserRole.TREASURER)


def _tamper(token: str) -> str:
    header, payload, signature = token.split(".")
    index = len(payload) // 2
    replacement = "A" if payload[index] != "A" else "B"
    payload = payload[:index] + replacement + payload[index + 1:]
    return ".".join([header, payload, signature])


class TestGenerateToken:
    def test_claims_round_trip(self, token_service, user):
        claims = token_service.validate_token(token_service.generate_token(user))

        assert claims.user_id == str(user.id)
        assert claims.email == "ada@example.com"
        assert claims.role is UserRole.TREASURER
        assert claims.exp - claims.iat == timedelta(hours=24)

    def test_token_is_hs256_jwt(self, token_service, user):
        token = token_service.generate_token(user)
        assert jwt.get_unverified_header(token)["alg"] == "HS256"

    def test_missing_secret_is_configuration_error(self, user):
        service = TokenService(Settings(SECRET_KEY=""))
        with pytest.raises(ConfigurationError):
            service.generate_token(user)
        with pytest.raises(ConfigurationError):
            service.validate_token("a.b.c")


class TestValidateToken:
    def test_accepts_token_inside_validity_window(self, token_service, user):
        issued = datetime.now(timezone.utc) - timedelta(hours=23)
        claims = token_service.validate_token(token_service.generate_token(user, now=issued))
        assert claims.email == user.email

    def test_rejects_expired_token(self, token_service, user):
        issued = datetime.now(timezone.utc) - timedelta(hours=25)
        token = token_service.generate_token(user, now=issued)
        with pytest.raises(TokenExpired):
            token_service.validate_token(token)

    def test_rejects_tampered_token(self, token_service, user):
        token = token_service.generate_token(user)
        with pytest.raises(InvalidToken):
            token_service.validate_token(_tamper(token))

    def test_rejects_token_signed_with_other_secret(self, user):
        foreign = TokenService(Settings(SECRET_KEY="someone-else")).generate_token(user)
        with pytest.raises(InvalidToken):
            TokenService(Settings(SECRET_KEY="test-secret")).validate_token(foreign)

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_rejects_malformed_token(self, token_service, token):
        with pytest.raises(InvalidToken):
            token_service.validate_token(token)

    def test_rejects_token_without_role(self, token_service):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "abc", "iat": int(now.timestamp()), "exp": int((now + timedelta(hours=1)).timestamp())},
            "test-secret",
            algorithm="HS256",
        )
        with pytest.raises(InvalidToken):
            token_service.validate_token(token)
