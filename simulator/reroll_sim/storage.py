"""Local session persistence — one JSON blob per key, plus a results history."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from .config import get_data_dir
from .data import STORAGE_KEY
from .state import EconomyState

logger = logging.getLogger(__name__)

RESULTS_KEY = "TA_HISTORY_V1"


class SessionStore:
    """Key-value blob store backed by a directory of JSON files."""

    def __init__(self, directory: Optional[Path] = None):
        self.directory = Path(directory) if directory else get_data_dir()

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def save(self, state: EconomyState, key: str = STORAGE_KEY) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        with open(path, "w") as f:
            json.dump(state.to_dict(), f)
        return path

    def load(self, key: str = STORAGE_KEY) -> Optional[EconomyState]:
        """Saved state for ``key``, or None if nothing readable is stored."""
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path) as f:
                return EconomyState.from_dict(json.load(f))
        except (json.JSONDecodeError, ValueError, KeyError) as e:
            logger.warning("Ignoring unreadable session %s: %s", path, e)
            return None

    def delete(self, key: str = STORAGE_KEY) -> bool:
        path = self._path(key)
        if not path.exists():
            return False
        path.unlink()
        return True

    # --- Results history ---

    def load_results(self) -> list[dict]:
        path = self._path(RESULTS_KEY)
        if not path.exists():
            return []
        try:
            with open(path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring unreadable results history %s: %s", path, e)
            return []
        return data if isinstance(data, list) else []

    def append_result(self, payload: dict) -> int:
        """Append a finished-session payload. Returns the history length."""
        results = self.load_results()
        results.append(payload)
        self.directory.mkdir(parents=True, exist_ok=True)
        with open(self._path(RESULTS_KEY), "w") as f:
            json.dump(results, f)
        return len(results)
