"""Domain models for secret change detection."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Failure kinds reported by the hashing layer."""
    HASHING_FAILED = "hashing_failed"
    MALFORMED_DIGEST = "malformed_digest"


@dataclass(frozen=True)
class HashResult:
    """Outcome of hashing a secret value."""
    digest: str
    error: Optional[ErrorKind] = None


@dataclass(frozen=True)
class VerifyResult:
    """Outcome of checking a candidate against a stored digest."""
    matches: bool
    error: Optional[ErrorKind] = None


@dataclass(frozen=True)
class ChangeDecision:
    """Result of evaluating one secret-bearing attribute."""
    is_changed: bool
    new_digest: str
    error: Optional[ErrorKind] = None
    previous_digest: str = ""

    @property
    def should_persist(self) -> bool:
        """True when new_digest is valid and differs from the stored one."""
        if self.error is not None or not self.new_digest:
            return False
        return self.new_digest != self.previous_digest


@dataclass(frozen=True)
class AttributeSchema:
    """Schema definition for the companion attribute that carries a digest."""
    type: str
    computed: bool
    sensitive: bool
    description: str
    default: Optional[str] = None
