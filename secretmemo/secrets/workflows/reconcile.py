"""Workflow reconciling one secret attribute against a local state file."""
import logging
from typing import Optional

from ..domains.change_gate import ChangeGate
from ..domains.config_loader import build_memo
from ..domains.errors import SecretHashingError
from ..domains.models import ChangeDecision, ErrorKind
from ..domains.state_store import StateStore
from .diff_suppression import hash_key

logger = logging.getLogger(__name__)


def reconcile_secret(store: StateStore, resource: str, attribute: str, candidate: str,
                     gate: Optional[ChangeGate] = None,
                     log: Optional[logging.Logger] = None) -> ChangeDecision:
    """
    Evaluate a declared secret for a resource and record its digest.

    Args:
        store: State file holding the resource's attributes
        resource: Resource name
        attribute: Secret-bearing attribute name
        candidate: Declared plaintext value
        gate: ChangeGate to use (built from configuration if not provided)
        log: Logger to report decisions to (module logger if not provided)

    Returns:
        ChangeDecision for the attribute

    Raises:
        SecretHashingError: If the value could not be hashed; state is not written
        StateError: If the state file can't be read or written
        ConfigError: If no gate is given and the configuration is invalid
    """
    log = log or logger
    gate = gate or ChangeGate(build_memo())
    attributes = store.get_resource(resource)
    digest_key = hash_key(attribute)

    stored = attributes.get(digest_key)
    decision = gate.evaluate(candidate, stored if isinstance(stored, str) else "")

    if decision.error is ErrorKind.HASHING_FAILED:
        log.error(f"Failed to hash '{resource}.{attribute}', state left unchanged")
        raise SecretHashingError(attribute, resource=resource)

    if decision.should_persist:
        attributes[digest_key] = decision.new_digest
        store.put_resource(resource, attributes)
        log.info(f"'{resource}.{attribute}' changed, digest stored in '{digest_key}'")
    else:
        log.info(f"'{resource}.{attribute}' unchanged")

    return decision
