"""Bearer tokens and password-reset tickets."""
import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from jose import JWTError, jwt
from pydantic import ValidationError as SchemaValidationError

from ..models.user import User
from ..schemas.auth import TokenPayload
from .exceptions import InvalidTokenError

RESET_TOKEN_BYTES = 32


class TokenIssuer:
    """Signs and verifies access tokens.

    Tokens carry the user's ``token_version`` at signing time. Verification
    here only covers signature, expiry and shape; comparing the embedded
    version with the stored one is done by the caller after loading the
    user.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 24 * 60):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    @property
    def expires_in(self) -> int:
        """Token lifetime in seconds."""
        return self.expire_minutes * 60

    def issue(self, user: User, expires_delta: Optional[timedelta] = None) -> str:
        """Create JWT access token for user."""
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta if expires_delta is not None else timedelta(minutes=self.expire_minutes))

        to_encode = {
            "sub": str(user.id),
            "email": user.email,
            "role": user.role,
            "token_version": user.token_version,
            "type": "access",
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenPayload:
        """Verify and decode JWT token."""
        if not token:
            raise InvalidTokenError("Token missing")
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise InvalidTokenError(str(e)) from e

        if payload.get("type") != "access":
            raise InvalidTokenError("Unexpected token type")

        try:
            return TokenPayload.model_validate(payload)
        except SchemaValidationError as e:
            raise InvalidTokenError("Malformed token claims") from e


def hash_reset_token(raw_token: str) -> str:
    """SHA-256 hex digest, the form a reset token is stored in."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def generate_reset_token() -> Tuple[str, str]:
    """Return ``(raw_token, hashed_token)``; only the hash may be persisted."""
    raw_token = secrets.token_hex(RESET_TOKEN_BYTES)
    return raw_token, hash_reset_token(raw_token)
