from .identity_mapper import IdentityMapper, as_utc

__all__ = ["IdentityMapper", "as_utc"]
