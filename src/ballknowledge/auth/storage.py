"""
Durable client-side key/value storage.

Plays the role a browser's localStorage plays for a web client: the session
store mirrors the raw credential here so a session survives a restart.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional, Protocol

from ballknowledge.utils.logging_utils import get_logger
from ballknowledge.utils.paths import PathLike, get_credential_store_path

logger = get_logger(__name__)


class CredentialStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryCredentialStorage:
    """Storage that lives only as long as the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileCredentialStorage:
    """
    JSON-file backed storage.

    The whole file is rewritten on every change; it holds a handful of keys
    at most. An unreadable or corrupt file is treated as empty.
    """

    def __init__(self, path: Optional[PathLike] = None):
        self.path = Path(path) if path is not None else get_credential_store_path()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s: not a JSON object", self.path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _save(self, items: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(items), encoding="utf-8")
        tmp_path.replace(self.path)

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._save(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key not in items:
            return
        del items[key]
        self._save(items)
