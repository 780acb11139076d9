"""Background worker for directory enumeration and global search.

Each ``schedule`` call bumps a monotonically increasing generation. Results
carry the generation of the request that produced them, and consumers apply
only results whose generation still equals ``latest_generation``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from queue import Empty, Queue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkerResult:
    """One payload emitted by a background job."""

    generation: int
    payload: object


class WorkerJob:
    """Handle passed to the job function: the request plus emit/cancel hooks."""

    def __init__(self, worker: LatestRequestWorker, generation: int, request: object) -> None:
        self._worker = worker
        self.generation = generation
        self.request = request

    @property
    def cancelled(self) -> bool:
        """True once a newer request was scheduled or ``cancel`` was called."""
        return self._worker.latest_generation != self.generation

    def emit(self, payload: object) -> None:
        self._worker._results.put(WorkerResult(generation=self.generation, payload=payload))


class LatestRequestWorker:
    """Single-threaded latest-request-wins background worker."""

    def __init__(self, run: Callable[[WorkerJob], None], name: str) -> None:
        self._run = run
        self._name = name
        self._lock = threading.Lock()
        self._pending: WorkerJob | None = None
        self._running = False
        self._generation = 0
        self._results: Queue[WorkerResult] = Queue()

    @property
    def latest_generation(self) -> int:
        with self._lock:
            return self._generation

    @property
    def busy(self) -> bool:
        """True while a job is pending or running."""
        with self._lock:
            return self._running

    def _worker(self) -> None:
        while True:
            with self._lock:
                job = self._pending
                self._pending = None
                if job is None:
                    self._running = False
                    return

            if job.cancelled:
                continue
            try:
                self._run(job)
            except Exception:
                logger.exception("%s job %d failed", self._name, job.generation)

    def schedule(self, request: object) -> int:
        """Queue/replace pending work and return its generation."""
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._pending = WorkerJob(self, generation, request)
            if self._running:
                return generation
            self._running = True

        worker = threading.Thread(target=self._worker, name=self._name, daemon=True)
        worker.start()
        return generation

    def cancel(self) -> int:
        """Invalidate pending and in-flight work; returns the new generation."""
        with self._lock:
            self._generation += 1
            self._pending = None
            return self._generation

    def drain_results(self) -> list[WorkerResult]:
        """Drain all completed results, stale ones included."""
        out: list[WorkerResult] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except Empty:
                break
        return out

    def drain_current(self) -> list[WorkerResult]:
        """Drain results and keep only those from the latest generation."""
        latest = self.latest_generation
        return [result for result in self.drain_results() if result.generation == latest]


__all__ = ["LatestRequestWorker", "WorkerJob", "WorkerResult"]
