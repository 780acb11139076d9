"""Navigation primitives: location entries and back/forward history.

This module has no UI concerns and does not track the current location;
callers pass it in when traversing.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from .groups import Group
from .paths import display_name, normalize_path

RECENT_HISTORY_LIMIT = 5


@dataclass(frozen=True)
class AtDirectory:
    """A real directory location."""

    path: Path

    @classmethod
    def of(cls, path: Path | str) -> AtDirectory:
        return cls(normalize_path(path))

    @property
    def display_name(self) -> str:
        return display_name(self.path)


@dataclass(frozen=True, eq=False)
class AtGroup:
    """A group viewed in the context of its parent directory.

    Identity is the group id plus the parent directory, so a renamed or
    pruned group still matches its earlier history entries.
    """

    group: Group
    parent_directory: Path

    @property
    def key(self) -> tuple[object, Path]:
        return (self.group.id, self.parent_directory)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AtGroup):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(("group", *self.key))

    @property
    def display_name(self) -> str:
        return self.group.name


NavigationEntry = AtDirectory | AtGroup


class NavigationHistory:
    """Back/forward stacks over visited locations.

    ``back`` holds the most recent entry last; ``forward`` holds the next
    entry to revisit first.
    """

    def __init__(self) -> None:
        self.back: list[NavigationEntry] = []
        self.forward: list[NavigationEntry] = []
        self._traversing = False

    @property
    def traversing(self) -> bool:
        return self._traversing

    @contextmanager
    def traversal(self) -> Iterator[None]:
        """Suppress ``push`` while navigating to a back/forward target."""
        previous = self._traversing
        self._traversing = True
        try:
            yield
        finally:
            self._traversing = previous

    def push(self, current: NavigationEntry) -> bool:
        """Record ``current`` before leaving it and clear forward history.

        Returns ``False`` when skipped during a traversal.
        """
        if self._traversing:
            return False
        self.back.append(current)
        self.forward.clear()
        return True

    def go_back(self, current: NavigationEntry) -> NavigationEntry | None:
        """Pop the previous location; ``current`` moves to the front of forward."""
        if not self.back:
            return None
        target = self.back.pop()
        self.forward.insert(0, current)
        return target

    def go_forward(self, current: NavigationEntry) -> NavigationEntry | None:
        """Pop the next location; ``current`` is appended to back."""
        if not self.forward:
            return None
        target = self.forward.pop(0)
        self.back.append(current)
        return target

    def jump_to(self, index: int, current: NavigationEntry | None = None) -> NavigationEntry | None:
        """Jump directly to ``back[index]``.

        Entries after ``index`` (then ``current``, when given) move to the
        front of forward in the order they will be revisited.
        """
        if index < 0 or index >= len(self.back):
            return None
        target = self.back[index]
        skipped = self.back[index + 1 :]
        if current is not None:
            skipped.append(current)
        self.forward[:0] = skipped
        del self.back[index:]
        return target

    def recent(self, limit: int = RECENT_HISTORY_LIMIT) -> list[tuple[int, NavigationEntry]]:
        """Return up to ``limit`` newest back entries with their back indices."""
        start = max(0, len(self.back) - max(0, limit))
        return [(idx, self.back[idx]) for idx in range(len(self.back) - 1, start - 1, -1)]

    @property
    def can_go_back(self) -> bool:
        return bool(self.back)

    @property
    def can_go_forward(self) -> bool:
        return bool(self.forward)

    def clear(self) -> None:
        self.back.clear()
        self.forward.clear()


__all__ = [
    "RECENT_HISTORY_LIMIT",
    "AtDirectory",
    "AtGroup",
    "NavigationEntry",
    "NavigationHistory",
]
