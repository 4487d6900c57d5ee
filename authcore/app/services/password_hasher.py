"""Bcrypt password hashing."""

import bcrypt

# bcrypt only looks at the first 72 bytes
_MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_MAX_PASSWORD_BYTES]


class PasswordHasher:
    """Slow, salted one-way hashing with a configurable cost factor."""

    def __init__(self, rounds: int = 10):
        self.rounds = rounds
        self._dummy_hash: bytes | None = None

    def hash(self, password: str) -> str:
        return bcrypt.hashpw(_encode(password), bcrypt.gensalt(self.rounds)).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
        except ValueError:
            return False

    def burn(self, password: str) -> None:
        """
        Spend the same time as a real verification.

        Called when the identifier is unknown so response timing does not
        reveal whether the account exists.
        """
        if self._dummy_hash is None:
            self._dummy_hash = bcrypt.hashpw(b"dummy_password", bcrypt.gensalt(self.rounds))
        bcrypt.checkpw(_encode(password), self._dummy_hash)
