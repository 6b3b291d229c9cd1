"""Password hashing and verification code generation."""

import secrets
import string

from passlib.context import CryptContext

VERIFICATION_CODE_ALPHABET = string.ascii_letters + string.digits
MIN_VERIFICATION_CODE_LENGTH = 32


class PasswordHasher:
    """bcrypt through passlib, with a configurable work factor."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        """Check a password; malformed or unknown hashes fail closed."""
        if not password_hash:
            return False
        try:
            return self._context.verify(password, password_hash)
        except (ValueError, TypeError):
            return False

    def dummy_verify(self) -> bool:
        """Spend a verify's worth of work for a caller with no stored hash."""
        return self._context.dummy_verify()


def generate_verification_code(length: int = MIN_VERIFICATION_CODE_LENGTH) -> str:
    if length < MIN_VERIFICATION_CODE_LENGTH:
        raise ValueError(
            f"verification codes must be at least {MIN_VERIFICATION_CODE_LENGTH} characters"
        )
    return "".join(secrets.choice(VERIFICATION_CODE_ALPHABET) for _ in range(length))
