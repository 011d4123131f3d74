"""Configuration loader for secretmemo."""
import os
import logging
from pathlib import Path
from typing import Dict, Any, Optional
import yaml

from .preferences import get_preference
from .secret_memo import (
    DEFAULT_ITERATIONS,
    DEFAULT_MAX_INPUT_BYTES,
    MAX_ITERATIONS,
    SecretMemo,
)

logger = logging.getLogger(__name__)

MIN_CONFIGURED_ITERATIONS = 1000
ITERATIONS_ENV = "SECRETMEMO_ITERATIONS"


class ConfigError(Exception):
    """Configuration error exception."""
    pass


def default_config_path() -> Path:
    return Path.home() / ".config" / "secretmemo" / "config.yml"


def _get_config_path() -> Optional[str]:
    """
    Get config file path using XDG Base Directory standard.

    Priority order:
    1. User preference (stored in ~/.config/secretmemo/preferences.json)
    2. Default location: ~/.config/secretmemo/config.yml

    Returns:
        Absolute path to config file, or None if neither location has one
        (built-in defaults apply)
    """
    config_path_pref = get_preference("config_path")
    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            logger.info(f"Using config from preference: {config_path}")
            return str(config_path)
        else:
            logger.warning(f"Config path from preference doesn't exist: {config_path}")

    default_config = default_config_path()
    if default_config.exists():
        logger.info(f"Using default config location: {default_config}")
        return str(default_config)

    logger.debug("No config file found, using built-in defaults")
    return None


def _default_config() -> Dict[str, Any]:
    return {
        "hashing": {
            "iterations": DEFAULT_ITERATIONS,
            "max_input_bytes": DEFAULT_MAX_INPUT_BYTES,
        },
        "gcp": {},
    }


def _require_int(value: Any, name: str, minimum: int, maximum: Optional[int] = None) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"'{name}' must be an integer, got: {value!r}")
    if value < minimum:
        raise ConfigError(f"'{name}' must be at least {minimum}, got: {value}")
    if maximum is not None and value > maximum:
        raise ConfigError(f"'{name}' must be at most {maximum}, got: {value}")
    return value


def load_config() -> Dict[str, Any]:
    """
    Load and validate configuration from YAML file.

    Returns:
        Dict containing configuration with keys:
        - hashing: dict with iterations and max_input_bytes
        - gcp: dict with optional project_id

    Raises:
        ConfigError: If the config file is unreadable or holds invalid values
    """
    config = _default_config()

    # Get config path dynamically each time (not cached at module level)
    config_path = _get_config_path()

    if config_path is not None:
        try:
            with open(config_path, 'r') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}")
        except OSError as e:
            raise ConfigError(f"Failed to read config file at {config_path}: {e}")

        if not loaded:
            raise ConfigError(f"Config file at {config_path} is empty")
        if not isinstance(loaded, dict):
            raise ConfigError(f"Config file at {config_path} must contain a mapping")

        for section in ("hashing", "gcp"):
            if section not in loaded:
                continue
            if not isinstance(loaded[section], dict):
                raise ConfigError(f"'{section}' section in config at {config_path} must be a mapping")
            config[section].update(loaded[section])

    env_iterations = os.getenv(ITERATIONS_ENV)
    if env_iterations:
        try:
            config["hashing"]["iterations"] = int(env_iterations)
        except ValueError:
            raise ConfigError(f"{ITERATIONS_ENV} must be an integer, got: {env_iterations!r}")
        logger.debug(f"Using iterations from {ITERATIONS_ENV}")

    hashing = config["hashing"]
    _require_int(hashing["iterations"], "hashing.iterations", MIN_CONFIGURED_ITERATIONS, MAX_ITERATIONS)
    _require_int(hashing["max_input_bytes"], "hashing.max_input_bytes", 1)

    project_id = config["gcp"].get("project_id")
    if project_id is not None and not isinstance(project_id, str):
        raise ConfigError("'gcp.project_id' must be a string")

    if config_path is not None:
        logger.info(f"Configuration loaded successfully from {config_path}")
    logger.debug(f"Using hashing iterations: {hashing['iterations']}")

    return config


def build_memo(config: Optional[Dict[str, Any]] = None) -> SecretMemo:
    """Create a SecretMemo from configuration (loaded if not given)."""
    if config is None:
        config = load_config()
    hashing = config["hashing"]
    return SecretMemo(
        iterations=hashing["iterations"],
        max_input_bytes=hashing["max_input_bytes"]
    )
