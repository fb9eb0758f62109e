"""Password hasher adapter backed by argon2, with bcrypt verification for legacy hashes."""

import argon2
import bcrypt

from rolegate.core.config import PasswordHashingConfig
from rolegate.core.logging import get_logger
from rolegate.modules.identity.domain.interfaces.services.password_hasher import (
    IPasswordHasher,
)

logger = get_logger(__name__)

_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


class PasswordHasherAdapter(IPasswordHasher):
    """
    Hashes new passwords with argon2id.

    Hashes imported from a bcrypt-based store still verify; ``needs_rehash``
    reports them so the store can upgrade them on the next successful check.
    """

    def __init__(self, config: PasswordHashingConfig | None = None):
        self.config = config or PasswordHashingConfig()
        self._argon2_hasher = argon2.PasswordHasher(
            time_cost=self.config.time_cost,
            memory_cost=self.config.memory_cost,
            parallelism=self.config.parallelism,
            hash_len=self.config.hash_len,
            salt_len=self.config.salt_len,
        )

    async def hash_password(self, password: str) -> str:
        return self._argon2_hasher.hash(password)

    async def verify_password(self, password: str, password_hash: str) -> bool:
        if not password_hash:
            return False

        if password_hash.startswith(_BCRYPT_PREFIXES):
            try:
                return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
            except ValueError:
                logger.warning("Malformed bcrypt hash encountered")
                return False

        try:
            return self._argon2_hasher.verify(password_hash, password)
        except argon2.exceptions.VerifyMismatchError:
            return False
        except (argon2.exceptions.VerificationError, argon2.exceptions.InvalidHashError):
            logger.warning("Malformed argon2 hash encountered")
            return False

    def needs_rehash(self, password_hash: str) -> bool:
        if password_hash.startswith(_BCRYPT_PREFIXES):
            return True
        try:
            return self._argon2_hasher.check_needs_rehash(password_hash)
        except argon2.exceptions.InvalidHashError:
            return True
