"""Persisted key/value state shared between migration runs."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

# Submissions with an id at or below this value were imported by an earlier run.
LAST_IMPORTED_SID = "last_imported_sid"
# How many submissions are deleted per chunk.
MAX_DELETE_ITEMS = "max_delete_items"
DEFAULT_MAX_DELETE_ITEMS = 500


class StateStore:
    """
    Small JSON-file key/value store.

    Every write rewrites the whole file; the store only ever holds a
    handful of keys.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        """
        Initialize the store.

        Args:
            path: JSON file to persist to; None keeps state in memory only
        """
        self.path = Path(path) if path else None
        self._data: Dict[str, Any] = {}
        self._load()

    def _load(self) -> None:
        if not self.path or not self.path.exists():
            return
        with open(self.path) as f:
            self._data = json.load(f)
        logger.debug(f"Loaded state from {self.path}")

    def _save(self) -> None:
        if not self.path:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w') as f:
            json.dump(self._data, f, indent=2, sort_keys=True)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value, or default when the key is not set."""
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set and persist a value."""
        self._data[key] = value
        self._save()

    def delete(self, key: str) -> None:
        """Remove a key."""
        if self._data.pop(key, None) is not None:
            self._save()

    def first_sid(self) -> int:
        """Submission id above which submissions still need importing."""
        return int(self.get(LAST_IMPORTED_SID, 0) or 0)

    def max_delete_items(self) -> int:
        """Chunk size for submission deletion."""
        return int(self.get(MAX_DELETE_ITEMS, DEFAULT_MAX_DELETE_ITEMS))

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)
