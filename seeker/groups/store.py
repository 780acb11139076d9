"""In-memory group collection with whole-document JSON persistence.

Every mutation rewrites the full collection and then notifies subscribers
(sidebar, open directory views). Validation is lazy: callers validate a group
right before displaying it.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path

from ..errors import ValidationPruned
from ..paths import normalize_path
from ..storage import JsonDocumentStore
from .model import Group, utc_now

logger = logging.getLogger(__name__)

GROUPS_FILENAME = "groups.json"


@dataclass(frozen=True)
class GroupChange:
    """Notification payload sent to store subscribers."""

    kind: str  # created | updated | deleted | pruned
    group: Group


GroupObserver = Callable[[GroupChange], None]


def _path_exists(path: Path) -> bool:
    return path.exists() or path.is_symlink()


class GroupStore:
    """CRUD over groups, keyed by group id."""

    def __init__(
        self,
        document: JsonDocumentStore,
        exists: Callable[[Path], bool] = _path_exists,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._document = document
        self._exists = exists
        self._clock = clock
        self._lock = threading.RLock()
        self._groups: list[Group] = []
        self._observers: list[GroupObserver] = []
        self._load()

    def _load(self) -> None:
        raw = self._document.load(default=[])
        if not isinstance(raw, list):
            logger.warning("ignoring malformed groups document %s", self._document.path)
            return
        groups: list[Group] = []
        seen: set[uuid.UUID] = set()
        for record in raw:
            try:
                group = Group.from_json(record)
            except (TypeError, ValueError) as exc:
                logger.warning("skipping malformed group record: %s", exc)
                continue
            if group.id in seen:
                continue
            seen.add(group.id)
            groups.append(group)
        self._groups = groups
        logger.debug("loaded %d group(s) from %s", len(groups), self._document.path)

    def _persist(self) -> None:
        self._document.save([group.to_json() for group in self._groups])

    def _notify(self, kind: str, group: Group) -> None:
        change = GroupChange(kind=kind, group=group)
        for observer in list(self._observers):
            try:
                observer(change)
            except Exception:
                logger.exception("group observer failed on %s", kind)

    def subscribe(self, observer: GroupObserver) -> Callable[[], None]:
        """Register ``observer`` for change notifications; returns an unsubscriber."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def create(self, name: str, items: Iterable[Path | str], parent_directory: Path | str) -> Group:
        name = name.strip()
        if not name:
            raise ValueError("group name must not be empty")
        group = Group.new(name, items, parent_directory, now=self._clock())
        with self._lock:
            self._groups.append(group)
            self._persist()
        logger.info("created group %r with %d item(s) in %s", group.name, len(group.items), group.parent_directory)
        self._notify("created", group)
        return group

    def delete(self, group: Group) -> None:
        """Remove the group with ``group.id``. Files on disk are never touched."""
        with self._lock:
            before = len(self._groups)
            self._groups = [existing for existing in self._groups if existing.id != group.id]
            if len(self._groups) == before:
                return
            self._persist()
        logger.info("deleted group %r", group.name)
        self._notify("deleted", group)

    def update(self, group: Group) -> None:
        """Replace the stored group with the same id; unknown ids are ignored."""
        self._replace(group, "updated")

    def _replace(self, group: Group, kind: str) -> bool:
        with self._lock:
            for idx, existing in enumerate(self._groups):
                if existing.id == group.id:
                    self._groups[idx] = group
                    self._persist()
                    break
            else:
                return False
        self._notify(kind, group)
        return True

    def get(self, group_id: uuid.UUID) -> Group | None:
        with self._lock:
            return next((group for group in self._groups if group.id == group_id), None)

    def all_groups(self) -> list[Group]:
        with self._lock:
            return list(self._groups)

    def groups_in_directory(self, directory: Path | str) -> list[Group]:
        """Return groups whose parent is exactly ``directory`` (no inheritance)."""
        target = normalize_path(directory)
        with self._lock:
            return [group for group in self._groups if group.parent_directory == target]

    def orphaned_groups(self) -> list[Group]:
        """Return groups whose parent directory no longer exists."""
        with self._lock:
            groups = list(self._groups)
        return [group for group in groups if not self._exists(group.parent_directory)]

    def add_items(self, group: Group, paths: Iterable[Path | str]) -> Group | None:
        current = self.get(group.id)
        if current is None:
            return None
        updated = current.with_items_added(paths, self._clock())
        self.update(updated)
        return updated

    def remove_items(self, group: Group, paths: Iterable[Path | str]) -> Group | None:
        current = self.get(group.id)
        if current is None:
            return None
        updated = current.with_items_removed(paths, self._clock())
        self.update(updated)
        return updated

    def rename(self, group: Group, name: str) -> Group | None:
        name = name.strip()
        current = self.get(group.id)
        if current is None or not name:
            return None
        updated = current.renamed(name, self._clock())
        self.update(updated)
        return updated

    def prune(self, group: Group) -> tuple[Group, ValidationPruned | None]:
        """Compute the pruned form of ``group`` without saving or notifying.

        Works from the stored copy when the id is known, so a stale argument
        never hides a newer rename or item change. Safe on worker threads.
        """
        current = self.get(group.id) or group
        kept = tuple(item for item in current.items if self._exists(item))
        if len(kept) == len(current.items):
            return current, None

        removed = tuple(item for item in current.items if item not in kept)
        pruned = replace(current, items=kept, modified_at=self._clock())
        notice = ValidationPruned(
            f"group {current.name!r} dropped {len(removed)} missing item(s)",
            current.parent_directory,
            removed=removed,
        )
        return pruned, notice

    def check(self, group: Group) -> tuple[Group, ValidationPruned | None]:
        """Prune missing items, persist the result and notify observers.

        An already-valid group is returned as-is (same ``modified_at``).
        Call from the control thread; observers run on the calling thread.
        """
        pruned, notice = self.prune(group)
        if notice is not None:
            logger.info("%s", notice)
            self._replace(pruned, "pruned")
        return pruned, notice

    def validate(self, group: Group) -> Group:
        return self.check(group)[0]


__all__ = ["GROUPS_FILENAME", "GroupChange", "GroupObserver", "GroupStore"]
