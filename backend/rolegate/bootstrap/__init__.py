"""Application bootstrap."""

from .identity_bootstrap import IdentityContainer, IdentitySeeder, initialize_identity

__all__ = ["IdentityContainer", "IdentitySeeder", "initialize_identity"]
