from .permission_repository import IPermissionRepository

__all__ = ["IPermissionRepository"]
