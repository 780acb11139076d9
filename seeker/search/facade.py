"""One search surface over "current folder" filtering and global indexing.

Global results arrive in partial batches. They are de-duplicated, capped,
and swapped in as a whole tuple so the displayed set is never half-updated.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from ..access import PathScopeResolver
from ..config import DEFAULT_SEARCH_RESULT_LIMIT
from ..listing import DirectoryItem, ListingEngine
from ..paths import normalize_path
from ..worker import LatestRequestWorker, WorkerJob
from .index import IndexScope, Indexer

logger = logging.getLogger(__name__)

GLOBAL_SCOPES = (IndexScope.LOCAL, IndexScope.NETWORK, IndexScope.USER_HOME)


class SearchMode(enum.Enum):
    CURRENT_FOLDER = "current-folder"
    GLOBAL = "global"


class ResultAccumulator:
    """De-duplicating, capped collection of global-search paths."""

    def __init__(self, limit: int) -> None:
        self.limit = max(1, limit)
        self._seen: set[Path] = set()
        self._paths: list[Path] = []

    @property
    def full(self) -> bool:
        return len(self._paths) >= self.limit

    @property
    def paths(self) -> tuple[Path, ...]:
        return tuple(self._paths)

    def add(self, batch: Iterable[Path]) -> list[Path]:
        """Add unseen paths up to the cap; returns the ones accepted."""
        accepted: list[Path] = []
        for raw in batch:
            if self.full:
                break
            path = normalize_path(raw)
            if path in self._seen:
                continue
            self._seen.add(path)
            self._paths.append(path)
            accepted.append(path)
        return accepted


class SearchFacade:
    """Dispatches a query to the listing filter or the global indexer."""

    def __init__(
        self,
        resolver: PathScopeResolver,
        listing: ListingEngine,
        indexer: Indexer,
        home: Path,
        result_limit: int = DEFAULT_SEARCH_RESULT_LIMIT,
    ) -> None:
        self._resolver = resolver
        self._listing = listing
        self._indexer = indexer
        self.home = normalize_path(home)
        self.result_limit = max(1, result_limit)
        self._worker = LatestRequestWorker(self._run_job, name="seeker-search")
        self._query = ""
        self._mode = SearchMode.CURRENT_FOLDER
        self._results: tuple[DirectoryItem, ...] = ()
        self._accumulator: ResultAccumulator | None = None

    @property
    def query(self) -> str:
        return self._query

    @property
    def mode(self) -> SearchMode:
        return self._mode

    @property
    def results(self) -> tuple[DirectoryItem, ...]:
        return self._results

    def has_global_scope(self) -> bool:
        """True when the user's home root has a live access grant."""
        return self._resolver.has_access(self.home) is not None

    def _global_batches(self, query: str) -> Iterable[list[Path]]:
        if not self.has_global_scope():
            logger.info("global search unavailable: no access grant for %s", self.home)
            return ()
        return self._indexer.search(query, GLOBAL_SCOPES)

    def search(self, query: str, mode: SearchMode) -> list[DirectoryItem]:
        """Run a search to completion on the calling thread."""
        query = query.strip()
        if not query:
            return []
        if mode is SearchMode.CURRENT_FOLDER:
            return self._listing.filter(query)

        accumulator = ResultAccumulator(self.result_limit)
        try:
            for batch in self._global_batches(query):
                accumulator.add(batch)
                if accumulator.full:
                    break
        except Exception:
            logger.exception("global search for %r failed", query)
            return []
        return list(self._listing.entries_for(list(accumulator.paths)))

    def _run_job(self, job: WorkerJob) -> None:
        query = job.request
        # Batches past the limit are never described or queued.
        accumulator = ResultAccumulator(self.result_limit)
        batches: Iterator[list[Path]] = iter(())
        try:
            batches = iter(self._global_batches(query))
            for batch in batches:
                if job.cancelled:
                    return
                accepted = accumulator.add(batch)
                if accepted:
                    job.emit(self._listing.entries_for(accepted))
                if accumulator.full:
                    logger.debug("global search for %r reached %d results", query, accumulator.limit)
                    return
        except Exception:
            logger.exception("global search for %r failed", query)
        finally:
            close = getattr(batches, "close", None)
            if close is not None:
                close()

    def start(self, query: str, mode: SearchMode) -> int:
        """Begin a search; global results are applied via ``apply_pending``.

        Returns the search generation. An empty query clears results.
        """
        self._query = query.strip()
        self._mode = mode
        self._accumulator = None
        if not self._query:
            return self.clear()
        if mode is SearchMode.CURRENT_FOLDER:
            generation = self._worker.cancel()
            self._listing.set_query(self._query)
            self._results = tuple(self._listing.visible_items())
            return generation

        self._accumulator = ResultAccumulator(self.result_limit)
        self._results = ()
        return self._worker.schedule(self._query)

    def apply_pending(self) -> bool:
        """Merge finished global batches for the current search; True if changed."""
        results = self._worker.drain_current()
        if self._mode is not SearchMode.GLOBAL or self._accumulator is None:
            return False
        merged = list(self._results)
        changed = False
        for result in results:
            entries = {normalize_path(entry.path): entry for entry in result.payload}
            for path in self._accumulator.add(entries):
                merged.append(entries[path])
                changed = True
            if self._accumulator.full:
                self._worker.cancel()
                break
        if changed:
            self._results = tuple(merged)
        return changed

    def clear(self) -> int:
        """Cancel any running search and drop results."""
        self._query = ""
        self._accumulator = None
        self._results = ()
        self._listing.set_query("")
        return self._worker.cancel()


__all__ = ["GLOBAL_SCOPES", "ResultAccumulator", "SearchFacade", "SearchMode"]
