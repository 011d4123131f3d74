"""Reconciler hooks for write-only secret attributes.

For every secret-bearing attribute ``X`` the hosting schema declares a
companion attribute ``X_hash`` (see ``memo_schema``) that carries the digest
between reconciliation passes. ``suppress_secret_diff`` is called during
planning to decide whether ``X`` really changed, and ``flatten_secret`` is
called after an apply to store the digest of the value just written.

Secret values and digests are never logged here, only attribute names and
decisions.
"""
import logging
from typing import Any, Mapping, MutableMapping, Optional, Tuple

from ..domains.change_gate import ChangeGate
from ..domains.config_loader import build_memo
from ..domains.errors import SecretHashingError
from ..domains.models import AttributeSchema, ChangeDecision, ErrorKind

logger = logging.getLogger(__name__)

HASH_SUFFIX = "_hash"


def _gate(gate: Optional[ChangeGate]) -> ChangeGate:
    # Configuration is loaded per call, never cached at module level
    if gate is not None:
        return gate
    return ChangeGate(build_memo())


def hash_key(attribute: str) -> str:
    """Name of the state attribute holding the digest for attribute."""
    return attribute + HASH_SUFFIX


def memo_schema(attribute: str) -> Tuple[str, AttributeSchema]:
    """Companion schema entry used to house the digest of attribute in state."""
    schema = AttributeSchema(
        type="string",
        computed=True,
        sensitive=True,
        default=None,
        description=f"A hashed digest of the attribute '{attribute}'"
    )
    return hash_key(attribute), schema


def _stored_digest(state: Mapping[str, Any], attribute: str) -> str:
    value = state.get(hash_key(attribute))
    return value if isinstance(value, str) else ""


def suppress_case_difference(key: str, old: str, new: str, state: Optional[Mapping[str, Any]] = None) -> bool:
    """Suppress a diff when old and new differ only by case."""
    return (old or "").lower() == (new or "").lower()


def suppress_secret_diff(key: str, old: str, new: str, state: Mapping[str, Any],
                         gate: Optional[ChangeGate] = None,
                         log: Optional[logging.Logger] = None) -> bool:
    """
    Diff-suppression hook for a write-only secret attribute.

    Args:
        key: Attribute name
        old: Value the reconciler has for the attribute (unused; secrets are not stored)
        new: Declared plaintext value
        state: Current resource state holding the companion digest attribute
        gate: ChangeGate to use (built from configuration if not provided)
        log: Logger to report decisions to (module logger if not provided)

    Returns:
        True only when the declared value matches the stored digest. Any
        hashing failure forces the change through.
    """
    log = log or logger
    decision = _gate(gate).evaluate(new if new is not None else "", _stored_digest(state, key))

    if decision.error is ErrorKind.HASHING_FAILED:
        log.warning(f"Change forced for '{key}': secret could not be hashed")
        return False

    log.debug(f"Secret attribute '{key}' changed: {decision.is_changed}")
    return not decision.is_changed


def flatten_secret(state: MutableMapping[str, Any], attribute: str, has_change: bool,
                   gate: Optional[ChangeGate] = None,
                   log: Optional[logging.Logger] = None) -> Optional[ChangeDecision]:
    """
    Store the digest of an applied secret value into state.

    Args:
        state: Resource state; must hold the declared value under attribute
        attribute: Secret-bearing attribute name
        has_change: Whether the reconciler saw a change on attribute
        gate: ChangeGate to use (built from configuration if not provided)
        log: Logger to report decisions to (module logger if not provided)

    Returns:
        The ChangeDecision, or None when the attribute had no change

    Raises:
        SecretHashingError: If the value could not be hashed. The stored
            digest is left untouched.
    """
    log = log or logger
    if not has_change:
        log.debug(f"Secret attribute '{attribute}' didn't get updated")
        return None

    candidate = state.get(attribute)
    decision = _gate(gate).evaluate(candidate if candidate is not None else "",
                                    _stored_digest(state, attribute))

    if decision.error is ErrorKind.HASHING_FAILED:
        log.error(f"Failed to hash secret attribute '{attribute}', digest not stored")
        raise SecretHashingError(attribute)

    if decision.should_persist:
        state[hash_key(attribute)] = decision.new_digest
        log.info(f"Secret attribute '{attribute}' updated, digest stored in '{hash_key(attribute)}'")
    return decision
