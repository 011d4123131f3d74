"""Exceptions raised at the reconciler boundary."""
from typing import Optional


class SecretMemoError(Exception):
    """Base class for secretmemo errors."""
    pass


class SecretHashingError(SecretMemoError):
    """A secret could not be hashed, so no digest may be persisted."""

    def __init__(self, attribute: str, resource: Optional[str] = None):
        self.attribute = attribute
        self.resource = resource
        where = f"'{resource}.{attribute}'" if resource else f"'{attribute}'"
        super().__init__(f"Failed to hash secret attribute {where}; change forced, digest not stored")


class StateError(SecretMemoError):
    """State file could not be read or written."""
    pass
