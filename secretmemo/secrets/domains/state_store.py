"""JSON state file holding resource attributes between reconciliation passes.

Layout: ``{"<resource>": {"<attribute>": "<value>", ...}, ...}``. Secret
attributes themselves are never written, only their ``<attribute>_hash``
companions.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Union

from .errors import StateError

logger = logging.getLogger(__name__)


class StateStore:
    """Loads and saves resource state from a JSON file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Dict[str, Dict[str, Any]]:
        """
        Read all resources from the state file.

        Returns:
            Mapping of resource name to attributes, empty if the file doesn't exist

        Raises:
            StateError: If the file can't be read or isn't a JSON object of objects
        """
        if not self.path.exists():
            logger.debug(f"State file {self.path} not found, starting empty")
            return {}

        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StateError(f"Failed to parse state file {self.path}: {e}")
        except OSError as e:
            raise StateError(f"Failed to read state file {self.path}: {e}")

        if not isinstance(data, dict) or not all(isinstance(v, dict) for v in data.values()):
            raise StateError(f"State file {self.path} must map resource names to objects")
        return data

    def save(self, resources: Dict[str, Dict[str, Any]]) -> None:
        """
        Write all resources to the state file.

        The data goes to a temporary file in the same directory which then
        replaces the state file, so a failed write leaves the old state intact.

        Raises:
            StateError: If the file can't be written
        """
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                'w',
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False
            ) as f:
                tmp_name = f.name
                json.dump(resources, f, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except OSError as e:
            raise StateError(f"Failed to write state file {self.path}: {e}")
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
        logger.debug(f"State saved to {self.path}")

    def get_resource(self, name: str) -> Dict[str, Any]:
        return dict(self.load().get(name, {}))

    def put_resource(self, name: str, attributes: Dict[str, Any]) -> None:
        resources = self.load()
        resources[name] = attributes
        self.save(resources)
