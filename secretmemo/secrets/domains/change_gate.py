"""Change decision for one secret-bearing attribute."""
from typing import Optional

from .models import ChangeDecision, ErrorKind
from .secret_memo import SecretMemo


class ChangeGate:
    """Decides whether a write-only secret changed since its digest was stored.

    Any failure resolves toward "changed": re-applying an unchanged secret is
    cheap, silently skipping a rotation is not.
    """

    def __init__(self, memo: Optional[SecretMemo] = None):
        self._memo = memo or SecretMemo()

    @property
    def memo(self) -> SecretMemo:
        return self._memo

    def evaluate(self, candidate_value: str, stored_digest: str) -> ChangeDecision:
        """
        Compare a candidate secret against the digest recorded in state.

        Args:
            candidate_value: Plaintext from the declared configuration
            stored_digest: Digest from persisted state, empty if never set

        Returns:
            ChangeDecision. On ErrorKind.HASHING_FAILED, is_changed is True and
            new_digest is left equal to stored_digest so nothing is persisted.
        """
        stored_digest = stored_digest or ""

        if stored_digest:
            verified = self._memo.verify(candidate_value, stored_digest)
            if verified.error is ErrorKind.HASHING_FAILED:
                return self._failed(stored_digest)
            if verified.error is None and verified.matches:
                return ChangeDecision(
                    is_changed=False,
                    new_digest=stored_digest,
                    previous_digest=stored_digest
                )
            # Mismatch, or a malformed digest treated as no prior record

        hashed = self._memo.hash(candidate_value)
        if hashed.error is not None:
            return self._failed(stored_digest)
        return ChangeDecision(
            is_changed=True,
            new_digest=hashed.digest,
            previous_digest=stored_digest
        )

    @staticmethod
    def _failed(stored_digest: str) -> ChangeDecision:
        return ChangeDecision(
            is_changed=True,
            new_digest=stored_digest,
            error=ErrorKind.HASHING_FAILED,
            previous_digest=stored_digest
        )
