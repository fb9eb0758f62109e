from .permission_repository import SQLPermissionRepository

__all__ = ["SQLPermissionRepository"]
