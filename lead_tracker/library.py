"""Saved workspace references, keyed by user."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Protocol, Union

from .config import ConfigurationError
from .models import LibraryItem

LOGGER = logging.getLogger(__name__)


class LibraryRepository(Protocol):
    """Storage interface for the per-user list of saved sheets."""

    def list(self, user_id: str) -> List[LibraryItem]:  # pragma: no cover - runtime protocol
        """Return the user's saved sheets, newest first."""

    def upsert(self, item: LibraryItem) -> LibraryItem:  # pragma: no cover - runtime protocol
        """Insert ``item`` or update the entry with the same user and URL."""

    def delete(self, item_id: str) -> None:  # pragma: no cover - runtime protocol
        """Remove the entry with ``item_id`` if present."""


class InMemoryLibrary:
    """Library kept in a plain dictionary for the lifetime of the process."""

    def __init__(self) -> None:
        self._items: Dict[str, LibraryItem] = {}

    def list(self, user_id: str) -> List[LibraryItem]:
        items = [item for item in self._items.values() if item.user_id == user_id]
        return sorted(items, key=lambda item: item.created_at, reverse=True)

    def upsert(self, item: LibraryItem) -> LibraryItem:
        for existing in self._items.values():
            if existing.user_id == item.user_id and item.url and existing.url == item.url:
                existing.name = item.name
                existing.sync_url = item.sync_url or existing.sync_url
                return existing
        self._items[item.id] = item
        return item

    def delete(self, item_id: str) -> None:
        self._items.pop(item_id, None)


class JsonLibrary(InMemoryLibrary):
    """Library persisted as a JSON document on disk."""

    def __init__(self, path: Union[str, Path]) -> None:
        super().__init__()
        self.path = Path(path).expanduser()
        if self.path.exists():
            try:
                data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
            except json.JSONDecodeError as exc:
                raise ConfigurationError(f"Library file '{self.path}' is not valid JSON: {exc}") from exc
            for raw in data.get("items", []):
                item = LibraryItem.from_dict(raw)
                self._items[item.id] = item
            LOGGER.debug("Loaded %s library items from %s", len(self._items), self.path)

    def upsert(self, item: LibraryItem) -> LibraryItem:
        stored = super().upsert(item)
        self._save()
        return stored

    def delete(self, item_id: str) -> None:
        super().delete(item_id)
        self._save()

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"items": [item.as_dict() for item in self._items.values()]}
        self.path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


__all__ = ["LibraryRepository", "InMemoryLibrary", "JsonLibrary"]
