"""
JSON file persistence shared by the progress, usage and study data stores.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Dict, Optional, Tuple

from study_service.errors import SaveFailedError, StoreUnavailableError

logger = logging.getLogger(__name__)


class JsonFileStore:
    """
    A JSON object on disk keyed by account id.

    ``update`` runs load, mutate and save while holding the store lock, so a
    read-modify-write for one account is a single atomic step within this
    process. Saves go through a temp file and ``os.replace``; a save either
    lands completely or raises SaveFailedError.
    """

    def __init__(self, path: Path, lock: Optional[RLock] = None):
        self.path = Path(path)
        self.lock = lock or RLock()

    def load(self) -> Dict[str, Any]:
        """Load the whole document; a missing file is an empty store."""
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading {self.path}: {e}")
            raise StoreUnavailableError(f"Could not read {self.path.name}") from e
        if not isinstance(data, dict):
            raise StoreUnavailableError(f"Unexpected content in {self.path.name}")
        return data

    def save(self, data: Dict[str, Any]) -> None:
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as e:
            logger.error(f"Error saving {self.path}: {e}")
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise SaveFailedError(f"Could not save {self.path.name}") from e

    def get(self, key: str) -> Any:
        return self.load().get(key)

    def update(self, key: str, mutate: Callable[[Any], Any]) -> Tuple[Any, Any]:
        """
        Apply ``mutate`` to the record under ``key`` and persist the result.

        Args:
            key: Account id
            mutate: Receives the current record (or None) and returns the new one

        Returns:
            Tuple of (old_record, new_record)
        """
        with self.lock:
            data = self.load()
            old = data.get(key)
            new = mutate(old)
            data[key] = new
            self.save(data)
            return old, new
