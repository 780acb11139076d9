"""Resolve requested paths against persisted access grants.

Grants are stored in a key-value document keyed ``"bookmark." + root``.
Resolution walks from the requested path up to ``/`` and uses the first
ancestor holding a live grant, which is always the most specific one.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from ..errors import AccessDenied, StaleGrant
from ..paths import ancestors_inclusive, normalize_path
from ..storage import KeyValueStore
from .grants import AccessGrant, GrantTokens, ResolvedPath
from .picker import DirectoryPicker

logger = logging.getLogger(__name__)

GRANT_KEY_PREFIX = "bookmark."


def grant_key(root: Path) -> str:
    return GRANT_KEY_PREFIX + str(normalize_path(root))


class PathScopeResolver:
    """Owns access grants and derives readable paths from them."""

    def __init__(
        self,
        store: KeyValueStore,
        picker: DirectoryPicker | None = None,
        tokens: GrantTokens | None = None,
    ) -> None:
        self._store = store
        self._picker = picker
        self._tokens = tokens if tokens is not None else GrantTokens()
        self._active_lock = threading.Lock()
        self._active_roots: set[Path] = set()

    def has_access(self, path: Path | str) -> ResolvedPath | None:
        """Return a readable path for ``path`` without prompting, or ``None``.

        Stale or corrupted grants are skipped as if absent and the walk
        continues with the next ancestor.
        """
        target = normalize_path(path)
        for probe in ancestors_inclusive(target):
            token = self._store.get(grant_key(probe))
            if token is None:
                continue
            try:
                root = self._tokens.open(token)
            except StaleGrant as exc:
                logger.info("skipping stale grant for %s: %s", probe, exc)
                continue

            self._begin_access(root)
            if probe == target:
                return ResolvedPath(path=root, grant_root=root)
            remainder = target.relative_to(probe)
            return ResolvedPath(path=root.joinpath(remainder), grant_root=root)

        logger.debug("no grant covers %s", target)
        return None

    def ensure_access(self, path: Path | str) -> ResolvedPath | None:
        """Non-interactive access check; callers fall back to ``request_access``."""
        resolved = self.has_access(path)
        if resolved is None:
            logger.debug("ensure_access(%s): needs an explicit grant", path)
        return resolved

    def request_access(self, path: Path | str) -> ResolvedPath | None:
        """Prompt for a root via the picker, store its grant, then resolve ``path``.

        Returns ``None`` when no picker is configured or the user cancels.
        """
        target = normalize_path(path)
        if self._picker is None:
            logger.warning("request_access(%s): no directory picker configured", target)
            return None
        picked = self._picker.pick_directory(target)
        if picked is None:
            logger.info("access request for %s cancelled", target)
            return None
        self.grant(picked)
        return self.has_access(target)

    def grant(self, root: Path | str) -> AccessGrant | None:
        """Store a grant for ``root`` unless a live one already exists.

        A stale grant for the same root is replaced; a live one is kept as-is.
        Returns the grant now in effect, or ``None`` if ``root`` is unreadable.
        """
        root = normalize_path(root)
        key = grant_key(root)
        existing = self._store.get(key)
        if existing is not None:
            try:
                self._tokens.open(existing)
            except StaleGrant as exc:
                logger.info("replacing stale grant for %s: %s", root, exc)
            else:
                logger.debug("grant for %s already exists", root)
                return AccessGrant(root=root, token=existing)

        try:
            token = self._tokens.issue(root)
        except AccessDenied as exc:
            logger.warning("%s", exc)
            return None
        self._store.set(key, token)
        logger.info("granted access to %s", root)
        return AccessGrant(root=root, token=token)

    def grants(self) -> list[AccessGrant]:
        """Return every stored grant, live or stale, ordered by root."""
        out: list[AccessGrant] = []
        for key, token in self._store.items(GRANT_KEY_PREFIX):
            out.append(AccessGrant(root=Path(key[len(GRANT_KEY_PREFIX):]), token=token))
        return out

    def _begin_access(self, root: Path) -> None:
        with self._active_lock:
            if root in self._active_roots:
                return
            self._active_roots.add(root)
        logger.debug("began access to %s", root)

    def active_roots(self) -> frozenset[Path]:
        with self._active_lock:
            return frozenset(self._active_roots)

    def end_access(self) -> None:
        """Relinquish every root whose access began in this process."""
        with self._active_lock:
            released = len(self._active_roots)
            self._active_roots.clear()
        if released:
            logger.debug("ended access to %d root(s)", released)


__all__ = ["GRANT_KEY_PREFIX", "PathScopeResolver", "grant_key"]
