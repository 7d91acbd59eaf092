"""Password hashing."""
import secrets
from functools import cached_property

import bcrypt

# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Salted bcrypt hashing with a configurable cost factor."""

    def __init__(self, rounds: int = 10):
        self.rounds = rounds

    @cached_property
    def dummy_hash(self) -> str:
        """Hash of a random secret at the configured cost, for unknown accounts."""
        return self.hash(secrets.token_hex(16))

    def hash(self, password: str) -> str:
        """Hash password using bcrypt."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """Verify password against hash.

        A mismatch, an empty hash or an input bcrypt refuses are all a
        plain ``False``.
        """
        if not plain_password or not hashed_password:
            return False
        try:
            return bcrypt.checkpw(
                plain_password.encode("utf-8"),
                hashed_password.encode("utf-8")
            )
        except ValueError:
            return False

    def burn(self, plain_password: str) -> None:
        """Spend the same bcrypt work as a real check when there is no account."""
        self.verify(plain_password, self.dummy_hash)
