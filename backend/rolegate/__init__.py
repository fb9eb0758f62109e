"""rolegate - role and permission management over an external identity store."""

__version__ = "0.1.0"
