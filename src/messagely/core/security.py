import asyncio
import logging

import bcrypt

from .errors import ValidationError


class PasswordHasher:
    """
    One-way salted hashing of passwords with bcrypt.
    The work factor is fixed per process; every hash carries its own salt and
    cost, so hashes produced under an older work factor stay verifiable.
    """
    __slots__ = ("work_factor", "_dummy_hash", "_logger")

    def __init__(self, work_factor: int = 12, logger: logging.Logger | None = None):
        self.work_factor = work_factor
        self._dummy_hash: bytes | None = None
        self._logger = logger or logging.getLogger(__name__)

    @staticmethod
    def _encode(password: str) -> bytes:
        if not isinstance(password, str) or not password:
            raise ValidationError("Password required")
        # bcrypt only looks at the first 72 bytes
        return password.encode("utf-8")[:72]

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.work_factor)
        return bcrypt.hashpw(self._encode(password), salt).decode("utf-8")

    def verify(self, password: str, hashed_password: str) -> bool:
        """
        Check a plaintext password against a stored hash.
        Args:
            password: Plaintext password
            hashed_password: Stored bcrypt hash
        Returns: bool: True if the password matches
        Raises:
            ValidationError: If either value is malformed
        """
        try:
            return bcrypt.checkpw(self._encode(password), hashed_password.encode("utf-8"))
        except (ValueError, AttributeError) as e:
            self._logger.warning("Stored password hash is malformed: %s", e)
            raise ValidationError("Malformed password hash", cause=e) from e

    def verify_dummy(self, password: str) -> bool:
        """
        Spend the same bcrypt time as a real check, for usernames that do not exist.
        """
        if self._dummy_hash is None:
            self._dummy_hash = bcrypt.hashpw(b"dummy-password", bcrypt.gensalt(rounds=self.work_factor))
        bcrypt.checkpw(self._encode(password), self._dummy_hash)
        return False

    async def hash_async(self, password: str) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.hash, password)

    async def verify_async(self, password: str, hashed_password: str) -> bool:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.verify, password, hashed_password)

    async def verify_dummy_async(self, password: str) -> bool:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.verify_dummy, password)
