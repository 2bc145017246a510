"""Browsing-session scoped key/value cache for the client."""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class SessionStorage:
    """String key/value store that lives as long as one browsing session.

    Values are kept in memory, or in a JSON file when ``path`` is given (or
    ``JOBBOARD_SESSION_FILE`` is set) so a restarted client in the same
    browsing session can pick them up. :meth:`clear` ends the browsing
    session and removes the file.
    """

    def __init__(self, path: Optional[str] = None) -> None:
        path = path or os.getenv("JOBBOARD_SESSION_FILE")
        self.path = Path(path) if path else None
        self._items: Dict[str, str] = {}
        self._lock = threading.Lock()
        if self.path is not None:
            self._items = self._read_file()

    def _read_file(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable session file %s", self.path, exc_info=True)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(key): str(value) for key, value in data.items()}

    def _write_file(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._items, indent=2), encoding="utf8")

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = value
            self._write_file()

    def remove_item(self, key: str) -> None:
        with self._lock:
            if self._items.pop(key, None) is not None:
                self._write_file()

    def clear(self) -> None:
        with self._lock:
            self._items.clear()
            if self.path is not None and self.path.exists():
                self.path.unlink()
