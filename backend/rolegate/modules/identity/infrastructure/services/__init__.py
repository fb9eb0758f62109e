from .claims import Claim, ClaimsPrincipal, ClaimTypes
from .current_principal_resolver import CurrentPrincipalResolver, LookupState
from .identity_authorization_provider import (
    IdentityAuthorizationProvider,
    IdentityServiceErrors,
)

__all__ = [
    "Claim",
    "ClaimTypes",
    "ClaimsPrincipal",
    "CurrentPrincipalResolver",
    "IdentityAuthorizationProvider",
    "IdentityServiceErrors",
    "LookupState",
]
