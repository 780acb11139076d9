"""Durable JSON persistence for grants and groups.

``JsonDocumentStore`` reads/writes one JSON document atomically.
``KeyValueStore`` keeps a flat string map in such a document and caches it
in memory behind a lock so lookups are cheap from any thread.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path

logger = logging.getLogger(__name__)


class JsonDocumentStore:
    """One JSON document on disk, replaced wholesale on every save."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self, default: object = None) -> object:
        """Return the decoded document, or ``default`` when missing/malformed."""
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return default
        except OSError as exc:
            logger.warning("failed to read %s: %s", self.path, exc)
            return default
        try:
            return json.loads(text)
        except ValueError as exc:
            logger.warning("failed to decode %s: %s", self.path, exc)
            return default

    def save(self, document: object) -> bool:
        """Write ``document`` via temp file + rename. Returns success."""
        try:
            payload = json.dumps(document, indent=2, sort_keys=False) + "\n"
        except (TypeError, ValueError) as exc:
            logger.error("refusing to write unserializable document to %s: %s", self.path, exc)
            return False

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                dir=self.path.parent,
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            logger.warning("failed to save %s: %s", self.path, exc)
            return False
        return True


class KeyValueStore:
    """String-to-string map persisted as a single JSON object."""

    def __init__(self, document: JsonDocumentStore) -> None:
        self._document = document
        self._lock = threading.Lock()
        self._values: dict[str, str] | None = None

    def _loaded(self) -> dict[str, str]:
        if self._values is None:
            raw = self._document.load(default={})
            values: dict[str, str] = {}
            if isinstance(raw, dict):
                for key, value in raw.items():
                    if isinstance(key, str) and isinstance(value, str):
                        values[key] = value
            else:
                logger.warning("ignoring non-object key-value document %s", self._document.path)
            self._values = values
        return self._values

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._loaded().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            values = self._loaded()
            values[key] = value
            self._document.save(dict(values))

    def delete(self, key: str) -> bool:
        with self._lock:
            values = self._loaded()
            if key not in values:
                return False
            del values[key]
            self._document.save(dict(values))
            return True

    def items(self, prefix: str = "") -> list[tuple[str, str]]:
        """Return a snapshot of ``(key, value)`` pairs whose key has ``prefix``."""
        with self._lock:
            return sorted((key, value) for key, value in self._loaded().items() if key.startswith(prefix))


__all__ = ["JsonDocumentStore", "KeyValueStore"]
