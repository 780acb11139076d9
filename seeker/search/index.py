"""Indexing collaborator: name search over scoped roots, streamed in batches."""

from __future__ import annotations

import enum
import logging
import os
import unicodedata
from collections.abc import Iterable, Iterator, Mapping, Sequence
from pathlib import Path
from typing import Protocol

from ..listing import is_package
from ..paths import normalize_path

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 200
DEFAULT_MAX_DIRECTORIES = 50_000


class IndexScope(enum.Enum):
    LOCAL = "local"
    NETWORK = "network"
    USER_HOME = "user-home"


class Indexer(Protocol):
    def search(self, query: str, scopes: Sequence[IndexScope]) -> Iterator[list[Path]]:
        """Yield batches of matching paths as they are found."""
        ...


def fold_name(text: str) -> str:
    """Case- and diacritic-insensitive comparison form of ``text``."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def _distinct_roots(roots: Iterable[Path]) -> list[Path]:
    """Drop duplicate roots and roots nested inside another root."""
    ordered = sorted(dict.fromkeys(normalize_path(root) for root in roots), key=lambda path: len(path.parts))
    kept: list[Path] = []
    for root in ordered:
        if any(root.is_relative_to(parent) for parent in kept):
            continue
        kept.append(root)
    return kept


class WalkIndexer:
    """``Indexer`` that walks the roots mapped to each scope on demand."""

    def __init__(
        self,
        scope_roots: Mapping[IndexScope, Sequence[Path]],
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_directories: int = DEFAULT_MAX_DIRECTORIES,
        show_hidden: bool = False,
    ) -> None:
        self._scope_roots = {scope: list(roots) for scope, roots in scope_roots.items()}
        self.batch_size = max(1, batch_size)
        self.max_directories = max(1, max_directories)
        self.show_hidden = show_hidden

    def roots_for(self, scopes: Sequence[IndexScope]) -> list[Path]:
        roots: list[Path] = []
        for scope in scopes:
            roots.extend(self._scope_roots.get(scope, ()))
        return _distinct_roots(roots)

    def search(self, query: str, scopes: Sequence[IndexScope]) -> Iterator[list[Path]]:
        needle = fold_name(query.strip())
        if not needle:
            return
        batch: list[Path] = []
        visited = 0
        for root in self.roots_for(scopes):
            for dirpath, dirnames, filenames in os.walk(root):
                visited += 1
                if visited > self.max_directories:
                    logger.info("index walk stopped after %d directories", self.max_directories)
                    if batch:
                        yield batch
                    return
                base = Path(dirpath)
                if not self.show_hidden:
                    dirnames[:] = [name for name in dirnames if not name.startswith(".")]
                    filenames = [name for name in filenames if not name.startswith(".")]
                dirnames.sort(key=str.lower)
                names = sorted([*dirnames, *filenames], key=str.lower)
                dirnames[:] = [name for name in dirnames if not is_package(base / name)]
                for name in names:
                    if needle in fold_name(name):
                        batch.append(base / name)
                        if len(batch) >= self.batch_size:
                            yield batch
                            batch = []
        if batch:
            yield batch


__all__ = [
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_MAX_DIRECTORIES",
    "IndexScope",
    "Indexer",
    "WalkIndexer",
    "fold_name",
]
