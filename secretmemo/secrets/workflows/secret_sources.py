"""Workflow for sourcing candidate secret values with caching and fallback."""
import os
import logging
from typing import Optional
from ..domains.gcp_client import GCPSecretClient

logger = logging.getLogger(__name__)

# Module-level cache: {source:secret_name -> value}, per-process only
_secret_cache: dict[str, str] = {}


def get_secret(secret_name: str, project_id: Optional[str] = None, quiet: bool = False) -> Optional[str]:
    """
    Fetch a candidate secret value from the environment or GCP Secret Manager.

    Args:
        secret_name: Name of the secret to fetch
        project_id: GCP project ID (auto-detected if not provided)
        quiet: If True, suppress fallback warnings to stderr

    Returns:
        Secret value as string, or None if not found

    Behavior:
        - Checks environment variables FIRST (no GCP client needed locally)
        - Caches values in memory (per-process only)
        - Auto-detects project_id from GCP_PROJECT env var or config file
        - Falls back to GCP Secret Manager if env var not set
    """
    env_value = os.getenv(secret_name)
    if env_value is not None:
        _secret_cache[f"env:{secret_name}"] = env_value
        return env_value

    client = GCPSecretClient()

    if not project_id:
        project_id = client.get_project_id() or "unknown"

    cache_key = f"{project_id}:{secret_name}"
    if cache_key in _secret_cache:
        return _secret_cache[cache_key]

    secret_value = client.fetch_secret(secret_name, project_id, quiet=quiet)
    if secret_value is not None:
        _secret_cache[cache_key] = secret_value
        return secret_value

    if not quiet:
        logger.warning(f"Secret {secret_name} not found in environment or GCP project {project_id}")
    return None


def clear_cache() -> None:
    _secret_cache.clear()
