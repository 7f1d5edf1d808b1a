"""Password hashing and JWT creation/verification for authentication."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from insurance_api.core.config import Settings

# bcrypt only looks at the first 72 bytes of a password.
BCRYPT_MAX_BYTES = 72


def _password_bytes(plain_password: str) -> bytes:
    return plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]


class PasswordHasher:
    """Salted bcrypt hashing with a fixed work factor."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, plain_password: str) -> str:
        """Hash a plain-text password for storage. Do not store plain passwords."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_password_bytes(plain_password), salt).decode("utf-8")

    def verify(self, plain_password: str, hashed: str) -> bool:
        """
        Verify a plain password against a stored hash.

        Returns False on mismatch. A malformed stored hash raises ValueError.
        """
        return bcrypt.checkpw(_password_bytes(plain_password), hashed.encode("utf-8"))


class TokenError(Exception):
    """Base class for token verification failures."""


class InvalidSignature(TokenError):
    """Token was not signed with the current key."""


class Expired(TokenError):
    """Token is past its expiry."""


class Malformed(TokenError):
    """Token cannot be parsed or lacks a subject."""


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    issued_at: datetime
    expires_at: datetime


class TokenService:
    """Issues and verifies signed, time-limited bearer tokens carrying a user id."""

    def __init__(self, settings: Settings) -> None:
        self._secret = settings.JWT_SECRET.get_secret_value()
        self._algorithm = settings.JWT_ALGORITHM
        self.ttl = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)

    def issue(self, user_id: str) -> str:
        """Create a JWT access token with sub (user id), iat and exp."""
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            "sub": str(user_id),
            "iat": now,
            "exp": now + self.ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Decode and validate a JWT.
        Raises Expired, InvalidSignature or Malformed (all TokenError).
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "iat", "exp"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise Expired("Token has expired") from exc
        except jwt.InvalidSignatureError as exc:
            raise InvalidSignature("Token signature is invalid") from exc
        except jwt.PyJWTError as exc:
            raise Malformed(str(exc)) from exc

        sub = payload.get("sub")
        if not isinstance(sub, str) or not sub:
            raise Malformed("Token has no subject")
        return TokenClaims(
            user_id=sub,
            issued_at=datetime.fromtimestamp(payload["iat"], UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
        )
