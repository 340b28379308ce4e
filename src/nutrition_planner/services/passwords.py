"""Password hashing and verification."""

from dataclasses import dataclass

import bcrypt


@dataclass
class PasswordHasher:
    """bcrypt hasher with automatic salting and a configurable work factor."""

    rounds: int = 12

    def hash(self, password: str) -> str:
        """Hash a plain-text password."""
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time comparison against a bcrypt hash."""
        try:
            return bcrypt.checkpw(password.encode(), password_hash.encode())
        except (ValueError, TypeError):
            return False
