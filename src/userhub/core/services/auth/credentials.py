"""Password hashing."""

import bcrypt

# bcrypt only considers the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


class CredentialHasher:
    """Hashes and verifies passwords with bcrypt."""

    def __init__(self, rounds: int = 12) -> None:
        if rounds < 4 or rounds > 20:
            raise ValueError("bcrypt rounds must be between 4 and 20")
        self._rounds = rounds

    @staticmethod
    def _encode(plain: str) -> bytes:
        return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]

    def hash(self, plain: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(self._encode(plain), salt).decode("ascii")

    def verify(self, hashed: str, plain: str) -> bool:
        try:
            return bcrypt.checkpw(self._encode(plain), hashed.encode("ascii"))
        except ValueError:
            # Malformed stored hash
            return False
