"""Access-grant datatypes and the opaque token codec.

A token seals the granted root path together with the directory's device and
inode numbers. Opening a token re-checks that fingerprint, so a root that was
deleted or replaced by a different directory reads as stale.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
import os
from dataclasses import dataclass
from pathlib import Path

from ..errors import AccessDenied, StaleGrant
from ..paths import normalize_path

TOKEN_VERSION = 1
_CHECKSUM_CHARS = 32


@dataclass(frozen=True)
class AccessGrant:
    """Persisted permission to read the subtree below ``root``."""

    root: Path
    token: str


@dataclass(frozen=True)
class ResolvedPath:
    """A path proven readable because it sits under ``grant_root``."""

    path: Path
    grant_root: Path

    def __fspath__(self) -> str:
        return os.fspath(self.path)

    def __str__(self) -> str:
        return str(self.path)


def _checksum(payload: bytes) -> str:
    return hashlib.sha256(payload).hexdigest()[:_CHECKSUM_CHARS]


class GrantTokens:
    """Issue and open opaque access tokens for directory roots."""

    def issue(self, root: Path) -> str:
        """Return a new token for ``root``.

        Raises ``AccessDenied`` when ``root`` is not a readable directory.
        """
        root = normalize_path(root)
        try:
            stat = root.stat()
        except OSError as exc:
            raise AccessDenied(f"cannot grant access to {root}: {exc}", root) from exc
        if not root.is_dir():
            raise AccessDenied(f"cannot grant access to non-directory {root}", root)

        payload = json.dumps(
            {"v": TOKEN_VERSION, "path": str(root), "dev": stat.st_dev, "ino": stat.st_ino},
            sort_keys=True,
            separators=(",", ":"),
        ).encode("utf-8")
        encoded = base64.urlsafe_b64encode(payload).decode("ascii").rstrip("=")
        return f"{encoded}.{_checksum(payload)}"

    def open(self, token: str) -> Path:
        """Validate ``token`` and return the root it grants.

        Raises ``StaleGrant`` for corrupted tokens and for roots that vanished
        or no longer carry the fingerprint recorded at grant time.
        """
        encoded, sep, checksum = token.partition(".")
        if not sep or not encoded:
            raise StaleGrant("malformed access token")
        try:
            payload = base64.urlsafe_b64decode(encoded + "=" * (-len(encoded) % 4))
        except (binascii.Error, ValueError) as exc:
            raise StaleGrant(f"undecodable access token: {exc}") from exc
        if _checksum(payload) != checksum:
            raise StaleGrant("access token checksum mismatch")
        try:
            data = json.loads(payload)
        except ValueError as exc:
            raise StaleGrant(f"undecodable access token payload: {exc}") from exc
        if not isinstance(data, dict) or data.get("v") != TOKEN_VERSION:
            raise StaleGrant("unsupported access token version")

        raw_path = data.get("path")
        if not isinstance(raw_path, str) or not raw_path:
            raise StaleGrant("access token has no root path")
        root = Path(raw_path)
        try:
            stat = root.stat()
        except OSError as exc:
            raise StaleGrant(f"granted root is gone: {root}", root) from exc
        if not root.is_dir():
            raise StaleGrant(f"granted root is no longer a directory: {root}", root)
        if stat.st_dev != data.get("dev") or stat.st_ino != data.get("ino"):
            raise StaleGrant(f"granted root was replaced: {root}", root)
        return root


__all__ = ["AccessGrant", "ResolvedPath", "GrantTokens", "TOKEN_VERSION"]
