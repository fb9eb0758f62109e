from .identity_store import IdentityClaim, IdentityError, IdentityResult, IIdentityStore
from .sql_identity_store import IdentityErrors, SqlIdentityStore, validate_password

__all__ = [
    "IIdentityStore",
    "IdentityClaim",
    "IdentityError",
    "IdentityErrors",
    "IdentityResult",
    "SqlIdentityStore",
    "validate_password",
]
