"""Token service: signed, expiring session tokens (JWT via python-jose).

Validation is stateless: a token stays valid until it expires even if the
account is deactivated or demoted meanwhile. Routes that need current state
re-load the user (see `get_current_user`).
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel, ValidationError

from app.config import Settings
from app.core.exceptions import ConfigurationError, InvalidToken, TokenExpired
from app.domain.models.user import User, UserRole

logger = structlog.get_logger(__name__)


class Claims(BaseModel):
    """Decoded token payload."""
    sub: str
    email: str
    role: UserRole
    iat: datetime
    exp: datetime

    @property
    def user_id(self) -> str:
        return self.sub


class TokenService:
    def __init__(self, settings: Settings):
        self.secret_key = settings.SECRET_KEY
        self.algorithm = settings.JWT_ALGORITHM
        self.lifetime = timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)

    def _require_secret(self) -> str:
        if not self.secret_key:
            logger.error("Token signing secret is not configured")
            raise ConfigurationError("SECRET_KEY is not set")
        return self.secret_key

    def generate_token(self, user: User, now: Optional[datetime] = None) -> str:
        secret = self._require_secret()
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "role": UserRole(user.role).value,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.lifetime).timestamp()),
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def validate_token(self, token: str) -> Claims:
        secret = self._require_secret()
        try:
            payload = jwt.decode(token, secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise TokenExpired()
        except JWTError:
            raise InvalidToken()

        try:
            return Claims.model_validate(payload)
        except ValidationError:
            logger.warning("Token carried an unexpected claim set", claims=sorted(payload))
            raise InvalidToken()
