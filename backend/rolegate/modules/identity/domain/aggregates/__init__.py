from .permission import Permission
from .role import Role
from .user_account import UserAccount

__all__ = ["Permission", "Role", "UserAccount"]
