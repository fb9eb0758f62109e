"""
Tests for the argon2 password hasher adapter.
"""

import bcrypt
import pytest

from rolegate.core.config import PasswordHashingConfig
from rolegate.modules.identity.infrastructure.adapters import PasswordHasherAdapter


@pytest.fixture
def hasher():
    return PasswordHasherAdapter(PasswordHashingConfig(time_cost=1, memory_cost=8192))


@pytest.mark.unit
class TestPasswordHasherAdapter:
    """Test hashing and verification."""

    async def test_hash_and_verify(self, hasher):
        password_hash = await hasher.hash_password("Secret123!")

        assert password_hash.startswith("$argon2id$")
        assert await hasher.verify_password("Secret123!", password_hash)
        assert not await hasher.verify_password("Wrong123!", password_hash)

    async def test_hashes_are_salted(self, hasher):
        assert await hasher.hash_password("Secret123!") != await hasher.hash_password(
            "Secret123!"
        )

    async def test_malformed_hash_does_not_verify(self, hasher):
        assert not await hasher.verify_password("Secret123!", "not-a-hash")
        assert not await hasher.verify_password("Secret123!", "")

    async def test_legacy_bcrypt_hash(self, hasher):
        legacy = bcrypt.hashpw(b"Secret123!", bcrypt.gensalt(rounds=4)).decode()

        assert await hasher.verify_password("Secret123!", legacy)
        assert not await hasher.verify_password("Wrong123!", legacy)
        assert hasher.needs_rehash(legacy)

    async def test_rehash_when_parameters_change(self, hasher):
        password_hash = await hasher.hash_password("Secret123!")
        stronger = PasswordHasherAdapter(PasswordHashingConfig(time_cost=2, memory_cost=8192))

        assert not hasher.needs_rehash(password_hash)
        assert stronger.needs_rehash(password_hash)
