from .role_permission import RolePermission
from .user_role import UserRole

__all__ = ["RolePermission", "UserRole"]
