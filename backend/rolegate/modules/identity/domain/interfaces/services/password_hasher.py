"""Password Hasher Interface

Hashing primitive consumed by the identity store. Hash strings are opaque to
callers and self-describing (algorithm and parameters are encoded inside).
"""

from abc import ABC, abstractmethod


class IPasswordHasher(ABC):
    """Port for password hashing."""

    @abstractmethod
    async def hash_password(self, password: str) -> str:
        """
        Hash a plaintext password.

        Args:
            password: Plaintext password

        Returns:
            Encoded hash string
        """

    @abstractmethod
    async def verify_password(self, password: str, password_hash: str) -> bool:
        """
        Verify a plaintext password against a stored hash.

        Returns:
            True when the password matches; False on mismatch or malformed hash
        """

    @abstractmethod
    def needs_rehash(self, password_hash: str) -> bool:
        """Check whether a stored hash uses outdated algorithm or parameters."""
