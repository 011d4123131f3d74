"""Input validation for CLI arguments."""
import re
import sys

from secretmemo.secrets.workflows.diff_suppression import HASH_SUFFIX


def validate_secret_name(name: str) -> None:
    """
    Validate secret name matches GCP Secret Manager / env var requirements.

    Allowed characters: [a-zA-Z0-9_-]

    Args:
        name: Secret name to validate

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not name:
        print("Error: Secret name cannot be empty", file=sys.stderr)
        print("\nSecret names must match: [a-zA-Z0-9_-]", file=sys.stderr)
        sys.exit(2)

    if not re.match(r'^[a-zA-Z0-9_-]+$', name):
        print(f"Error: Invalid secret name '{name}'", file=sys.stderr)
        print("\nAllowed characters: letters, numbers, underscores (_), hyphens (-)", file=sys.stderr)
        print("Not allowed: dots (.), spaces, special characters (@, $, !, etc.)", file=sys.stderr)
        sys.exit(2)


def validate_attribute_name(name: str) -> None:
    """
    Validate a secret-bearing attribute name.

    Attribute names are lowercase identifiers and must not themselves be
    digest companions (ending in '_hash').

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not re.match(r'^[a-z_][a-z0-9_]*$', name or ""):
        print(f"Error: Invalid attribute name '{name}'", file=sys.stderr)
        print("\nAttribute names must match: [a-z_][a-z0-9_]*", file=sys.stderr)
        sys.exit(2)

    if name.endswith(HASH_SUFFIX):
        print(f"Error: Attribute '{name}' is a digest companion, not a secret attribute", file=sys.stderr)
        sys.exit(2)


def validate_resource_name(name: str) -> None:
    if not name or not name.strip():
        print("Error: Resource name cannot be empty", file=sys.stderr)
        sys.exit(2)
