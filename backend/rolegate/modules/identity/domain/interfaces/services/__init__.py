from .authorization_service import IAuthorizationService
from .current_principal import ICurrentPrincipal
from .password_hasher import IPasswordHasher
from .permission_management_service import IPermissionManagementService
from .role_management_service import IRoleManagementService
from .user_service import IUserService

__all__ = [
    "IAuthorizationService",
    "ICurrentPrincipal",
    "IPasswordHasher",
    "IPermissionManagementService",
    "IRoleManagementService",
    "IUserService",
]
