from .password_hasher_adapter import PasswordHasherAdapter

__all__ = ["PasswordHasherAdapter"]
