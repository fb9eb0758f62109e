"""
Identity domain error catalog.

Error codes are stable strings of the form ``Area.Reason``; callers branch on
``code`` or ``type`` and never on the description text.
"""

from rolegate.core.domain.result import DomainError


class UserAccountErrors:
    """Errors raised by the user account aggregate."""

    @staticmethod
    def role_required() -> DomainError:
        return DomainError.validation("UserAccount.RoleRequired", "A role is required.")

    @staticmethod
    def role_already_assigned(role_name: str) -> DomainError:
        return DomainError.conflict(
            "UserAccount.RoleAlreadyAssigned",
            f"The user already has the role '{role_name}'.",
        )

    @staticmethod
    def role_not_assigned(role_name: str) -> DomainError:
        return DomainError.not_found(
            "UserAccount.RoleNotAssigned",
            f"The user does not have the role '{role_name}'.",
        )

    @staticmethod
    def invalid_status_transition(current: str, target: str) -> DomainError:
        return DomainError.failure(
            "UserAccount.InvalidStatusTransition",
            f"Cannot change status from {current} to {target}.",
        )


class RoleErrors:
    """Errors raised by the role aggregate."""

    SYSTEM_DEFINED_CODE = "Role.SystemDefined"

    @staticmethod
    def system_defined() -> DomainError:
        return DomainError.failure(
            RoleErrors.SYSTEM_DEFINED_CODE, "System-defined roles cannot be modified."
        )

    @staticmethod
    def name_required() -> DomainError:
        return DomainError.validation("Role.NameRequired", "Role name is required.")

    @staticmethod
    def name_too_long(max_length: int) -> DomainError:
        return DomainError.validation(
            "Role.NameTooLong", f"Role name cannot exceed {max_length} characters."
        )

    @staticmethod
    def description_required() -> DomainError:
        return DomainError.validation(
            "Role.DescriptionRequired", "Role description is required."
        )

    @staticmethod
    def permission_required() -> DomainError:
        return DomainError.validation(
            "Role.PermissionRequired", "A permission is required."
        )

    @staticmethod
    def permission_already_granted(permission_name: str) -> DomainError:
        return DomainError.conflict(
            "Role.PermissionAlreadyGranted",
            f"The role already has the permission '{permission_name}'.",
        )

    @staticmethod
    def permission_not_granted(permission_name: str) -> DomainError:
        return DomainError.not_found(
            "Role.PermissionNotGranted",
            f"The role does not have the permission '{permission_name}'.",
        )


class PermissionErrors:
    """Errors raised by the permission aggregate."""

    SYSTEM_DEFINED_CODE = "Permission.SystemDefined"

    @staticmethod
    def system_defined() -> DomainError:
        return DomainError.failure(
            PermissionErrors.SYSTEM_DEFINED_CODE,
            "System-defined permissions cannot be modified.",
        )

    @staticmethod
    def description_required() -> DomainError:
        return DomainError.validation(
            "Permission.DescriptionRequired", "Permission description is required."
        )

    @staticmethod
    def resource_required() -> DomainError:
        return DomainError.validation(
            "Permission.ResourceRequired", "A resource name is required."
        )
