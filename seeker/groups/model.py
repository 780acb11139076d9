"""Group datatype: a named, persisted collection of path references."""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path

from ..paths import normalize_path


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def unique_paths(paths: Iterable[Path | str]) -> tuple[Path, ...]:
    """Normalize ``paths`` and drop repeats, keeping first-seen order."""
    return tuple(dict.fromkeys(normalize_path(path) for path in paths))


def _parse_timestamp(value: object) -> datetime:
    if not isinstance(value, str):
        raise ValueError(f"timestamp must be a string, got {type(value).__name__}")
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Group:
    """User-defined collection of files/directories shown inside one directory.

    ``items`` may point anywhere on disk; ``parent_directory`` only decides
    which directory listing the group appears in and never changes.
    """

    id: uuid.UUID
    name: str
    items: tuple[Path, ...]
    parent_directory: Path
    created_at: datetime
    modified_at: datetime

    @classmethod
    def new(
        cls,
        name: str,
        items: Iterable[Path | str],
        parent_directory: Path | str,
        now: datetime,
    ) -> Group:
        return cls(
            id=uuid.uuid4(),
            name=name,
            items=unique_paths(items),
            parent_directory=normalize_path(parent_directory),
            created_at=now,
            modified_at=now,
        )

    def with_items_added(self, paths: Iterable[Path | str], now: datetime) -> Group:
        return replace(self, items=unique_paths((*self.items, *paths)), modified_at=now)

    def with_items_removed(self, paths: Iterable[Path | str], now: datetime) -> Group:
        dropped = set(unique_paths(paths))
        return replace(self, items=tuple(item for item in self.items if item not in dropped), modified_at=now)

    def renamed(self, name: str, now: datetime) -> Group:
        return replace(self, name=name, modified_at=now)

    def to_json(self) -> dict[str, object]:
        return {
            "id": str(self.id),
            "name": self.name,
            "items": [str(item) for item in self.items],
            "parent_directory": str(self.parent_directory),
            "created_at": self.created_at.isoformat(),
            "modified_at": self.modified_at.isoformat(),
        }

    @classmethod
    def from_json(cls, raw: object) -> Group:
        """Decode one persisted group record. Raises ``ValueError`` on bad shape."""
        if not isinstance(raw, dict):
            raise ValueError("group record must be an object")
        name = raw.get("name")
        parent = raw.get("parent_directory")
        items = raw.get("items")
        if not isinstance(name, str):
            raise ValueError("group name must be a string")
        if not isinstance(parent, str) or not parent:
            raise ValueError("group parent_directory must be a non-empty string")
        if not isinstance(items, list) or not all(isinstance(item, str) and item for item in items):
            raise ValueError("group items must be a list of non-empty strings")
        return cls(
            id=uuid.UUID(str(raw.get("id"))),
            name=name,
            items=unique_paths(items),
            parent_directory=normalize_path(parent),
            created_at=_parse_timestamp(raw.get("created_at")),
            modified_at=_parse_timestamp(raw.get("modified_at")),
        )


__all__ = ["Group", "unique_paths", "utc_now"]
