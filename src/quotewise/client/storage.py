"""Durable key/value storage for session state."""

import json
from pathlib import Path
from typing import Protocol

import structlog


logger = structlog.get_logger()


class SessionStorage(Protocol):
    """String key/value store, the equivalent of browser local storage."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, *keys: str) -> None: ...


class MemorySessionStorage:
    """Process-local storage. Nothing survives a restart."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)

    def as_dict(self) -> dict[str, str]:
        return dict(self._data)


class FileSessionStorage:
    """Storage persisted as a JSON object in a single file.

    The whole file is rewritten on every change, so a batch of removals
    lands in one write.

    Args:
        path: Location of the JSON file; created on first write
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("session_storage_unreadable", path=str(self.path), error=str(exc))
            return {}
        return {str(k): str(v) for k, v in data.items()} if isinstance(data, dict) else {}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, *keys: str) -> None:
        data = self._load()
        for key in keys:
            data.pop(key, None)
        self._save(data)
