"""
Identity Domain Enumerations

Account status and permission classification used across the identity domain.
"""

from enum import Enum, IntEnum


class UserStatus(Enum):
    """User account status enumeration."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"
    LOCKED = "Locked"
    PENDING_ACTIVATION = "PendingActivation"

    def get_display_name(self) -> str:
        """Get human-readable display name."""
        display_names = {
            UserStatus.ACTIVE: "Active",
            UserStatus.INACTIVE: "Inactive",
            UserStatus.LOCKED: "Locked",
            UserStatus.PENDING_ACTIVATION: "Pending Activation",
        }
        return display_names[self]

    @property
    def is_active(self) -> bool:
        """Check if status allows user activity."""
        return self == UserStatus.ACTIVE

    @classmethod
    def from_string(cls, value: str) -> "UserStatus":
        """Parse a status by value or member name, case-insensitively."""
        normalized = value.strip().replace("_", "").lower()
        for status in cls:
            if status.value.lower() == normalized or status.name.replace("_", "").lower() == normalized:
                return status
        raise ValueError(f"Invalid user status: {value}")


class PermissionType(IntEnum):
    """Kind of operation a permission allows."""

    CREATE = 1
    READ = 2
    UPDATE = 3
    DELETE = 4
    EXECUTE = 5
    MANAGE = 6
    FULL_CONTROL = 7

    def get_display_name(self) -> str:
        return self.name.replace("_", " ").title()

    @property
    def action_name(self) -> str:
        """Action segment used for standard permission names, e.g. ``Create``."""
        return self.name.replace("_", " ").title().replace(" ", "")
