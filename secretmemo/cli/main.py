"""CLI entrypoint for secretmemo."""
import os
import sys
import argparse
import logging
from pathlib import Path

from .validators import validate_attribute_name, validate_resource_name, validate_secret_name

VERSION = "0.1.0"

# Configure logging to stderr
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    stream=sys.stderr
)
logger = logging.getLogger(__name__)


def _read_value(args) -> str:
    """Read a secret value from the named env var, or from stdin."""
    if args.from_env:
        value = os.getenv(args.from_env)
        if value is None:
            print(f"Error: Environment variable '{args.from_env}' is not set", file=sys.stderr)
            sys.exit(2)
        return value
    # Drop one line terminator only; further trailing newlines are part of the secret
    value = sys.stdin.read()
    if value.endswith("\n"):
        value = value[:-1]
        if value.endswith("\r"):
            value = value[:-1]
    return value


def cmd_version(args):
    """Show version information."""
    print(f"secretmemo {VERSION}")


def cmd_config_set_path(args):
    """Set config file path preference."""
    from secretmemo.secrets.domains.preferences import set_preference

    config_path = Path(args.path).resolve()

    if not config_path.exists():
        print(f"Error: Config file does not exist: {config_path}", file=sys.stderr)
        sys.exit(1)

    if not config_path.is_file():
        print(f"Error: Path is not a file: {config_path}", file=sys.stderr)
        sys.exit(1)

    set_preference("config_path", str(config_path))
    print(f"Config path set to: {config_path}")


def cmd_config_show(args):
    """Show current config file path and effective hashing settings."""
    from secretmemo.secrets.domains.preferences import get_preference
    from secretmemo.secrets.domains.config_loader import default_config_path, load_config

    config_path_pref = get_preference("config_path")

    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            print(f"Config path: {config_path}")
        else:
            print(f"Config path (from preference, but file not found): {config_path}")
        print("Source: preference")
    else:
        default_config = default_config_path()
        print(f"Config path: {default_config}")
        if default_config.exists():
            print("Source: default")
        else:
            print("Source: default (file not found, using built-in settings)")

    config = load_config()
    print(f"Hashing iterations: {config['hashing']['iterations']}")
    print(f"Max input bytes: {config['hashing']['max_input_bytes']}")


def cmd_config_clear(args):
    """Clear config path preference."""
    from secretmemo.secrets.domains.preferences import clear_preference
    from secretmemo.secrets.domains.config_loader import default_config_path

    clear_preference("config_path")
    print(f"Config path preference cleared. Will use default: {default_config_path()}")


def cmd_secrets_hash(args):
    """Print a digest of a secret value."""
    from secretmemo.secrets.domains.config_loader import build_memo

    result = build_memo().hash(_read_value(args))
    if result.error is not None:
        print("Error: Secret value could not be hashed", file=sys.stderr)
        sys.exit(1)
    print(result.digest)


def cmd_secrets_check(args):
    """Check a secret value against a digest."""
    from secretmemo.secrets.domains.config_loader import build_memo
    from secretmemo.secrets.domains.models import ErrorKind

    result = build_memo().verify(_read_value(args), args.digest)
    if result.error is ErrorKind.MALFORMED_DIGEST:
        print("Error: Digest is not a recognized encoding", file=sys.stderr)
        sys.exit(2)
    if result.error is not None:
        print("Error: Secret value could not be hashed", file=sys.stderr)
        sys.exit(1)

    if result.matches:
        if not args.quiet:
            print("match")
        sys.exit(0)
    if not args.quiet:
        print("mismatch")
    sys.exit(1)


def cmd_state_apply(args):
    """Reconcile one secret attribute of a resource against the state file."""
    from secretmemo.secrets.domains.change_gate import ChangeGate
    from secretmemo.secrets.domains.config_loader import build_memo
    from secretmemo.secrets.domains.state_store import StateStore
    from secretmemo.secrets.workflows.reconcile import reconcile_secret
    from secretmemo.secrets.workflows.secret_sources import get_secret

    validate_resource_name(args.resource)
    validate_attribute_name(args.attribute)
    validate_secret_name(args.secret_name)

    candidate = get_secret(args.secret_name, args.project_id, quiet=args.quiet)
    if candidate is None:
        print(f"Error: Secret '{args.secret_name}' not found in GCP or env", file=sys.stderr)
        sys.exit(1)

    gate = ChangeGate(build_memo())
    decision = reconcile_secret(StateStore(args.state), args.resource, args.attribute, candidate, gate=gate)
    print("changed" if decision.is_changed else "unchanged")


def main():
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors (hashing failure, state file errors, secret not found, etc.)
        2 - Usage errors (invalid arguments, malformed digest, etc.)
    """
    parser = argparse.ArgumentParser(
        prog="secretmemo",
        description="secretmemo CLI - detect write-only secret changes without storing plaintext",
        epilog="""
Exit codes:
  0 - Success
  1 - Runtime error (hashing failure, state file error, secret not found, etc.)
  2 - Usage error (invalid arguments, malformed digest, etc.)

Environment variables:
  SECRETMEMO_ITERATIONS - PBKDF2 iteration count (overrides config file)
  GCP_PROJECT           - GCP project ID (overrides config file)

Configuration:
  Default location: ~/.config/secretmemo/config.yml
  Custom path: Set with 'secretmemo config set-path <path>'
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "version",
        help="Show version information",
        description="Display the current version of secretmemo"
    )

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Manage secretmemo configuration"
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    config_set_path_parser = config_subparsers.add_parser(
        "set-path",
        help="Set config file path",
        description="""
Set the configuration file path preference.

This stores the absolute path to your config file in:
~/.config/secretmemo/preferences.json
        """
    )
    config_set_path_parser.add_argument("path", help="Path to config file")

    config_subparsers.add_parser(
        "show",
        help="Show current config path and hashing settings",
        description="Display the configuration file path, its source, and effective hashing settings"
    )

    config_subparsers.add_parser(
        "clear",
        help="Clear config path preference",
        description="Remove the config path preference; the default location will be used"
    )

    # secrets command
    secrets_parser = subparsers.add_parser(
        "secrets",
        help="Secret hashing operations",
        description="Hash secret values and check them against stored digests"
    )
    secrets_subparsers = secrets_parser.add_subparsers(dest="secrets_command")

    hash_parser = secrets_subparsers.add_parser(
        "hash",
        help="Print a salted digest of a secret value",
        description="""
Read a secret value from stdin (or --from-env) and print its salted digest.

Hashing the same value twice prints two different digests; both verify.
        """
    )
    hash_parser.add_argument(
        "--from-env",
        metavar="VAR",
        help="Read the value from this environment variable instead of stdin"
    )

    check_parser = secrets_subparsers.add_parser(
        "check",
        help="Check a secret value against a digest",
        description="""
Read a secret value from stdin (or --from-env) and check it against DIGEST.

Exit codes:
  0 - Value matches the digest
  1 - Value does not match
  2 - Digest is not a recognized encoding
        """
    )
    check_parser.add_argument("digest", help="Previously stored digest")
    check_parser.add_argument(
        "--from-env",
        metavar="VAR",
        help="Read the value from this environment variable instead of stdin"
    )
    check_parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Report the result through the exit code only"
    )

    # state command
    state_parser = subparsers.add_parser(
        "state",
        help="Local state reconciliation",
        description="Reconcile secret attributes against a local JSON state file"
    )
    state_subparsers = state_parser.add_subparsers(dest="state_command")

    apply_parser = state_subparsers.add_parser(
        "apply",
        help="Reconcile one secret attribute",
        description="""
Fetch the declared value of a secret (environment first, then GCP Secret Manager),
compare it with the digest stored for RESOURCE.ATTRIBUTE in the state file, and
store a fresh digest under ATTRIBUTE_hash when it changed.

Prints 'changed' or 'unchanged'. The secret value itself is never written.
        """
    )
    apply_parser.add_argument("--state", required=True, help="Path to the JSON state file")
    apply_parser.add_argument("--resource", required=True, help="Resource name")
    apply_parser.add_argument("--attribute", required=True, help="Secret-bearing attribute name")
    apply_parser.add_argument("--secret-name", required=True, help="Environment variable or GCP secret holding the value")
    apply_parser.add_argument(
        "--project-id",
        help="GCP project ID (auto-detected from GCP_PROJECT env var or config file if not provided)"
    )
    apply_parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress source fallback warnings"
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(2)

    try:
        if args.command == "version":
            cmd_version(args)
        elif args.command == "config":
            if args.config_command == "set-path":
                cmd_config_set_path(args)
            elif args.config_command == "show":
                cmd_config_show(args)
            elif args.config_command == "clear":
                cmd_config_clear(args)
            else:
                config_parser.print_help()
                sys.exit(2)
        elif args.command == "secrets":
            if args.secrets_command == "hash":
                cmd_secrets_hash(args)
            elif args.secrets_command == "check":
                cmd_secrets_check(args)
            else:
                secrets_parser.print_help()
                sys.exit(2)
        elif args.command == "state":
            if args.state_command == "apply":
                cmd_state_apply(args)
            else:
                state_parser.print_help()
                sys.exit(2)
        else:
            parser.print_help()
            sys.exit(2)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
