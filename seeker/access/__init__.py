"""Sandboxed-access resolution: grants, tokens and the directory picker.

This package contains non-UI access primitives:
- grant/resolved-path datatypes and the opaque token codec
- the resolver that walks ancestors to re-derive access for descendants
- picker collaborators used to obtain a first grant
"""

from __future__ import annotations

from .grants import AccessGrant, GrantTokens, ResolvedPath
from .picker import DirectoryPicker, PromptPicker
from .resolver import GRANT_KEY_PREFIX, PathScopeResolver, grant_key

__all__ = [
    "AccessGrant",
    "GrantTokens",
    "ResolvedPath",
    "DirectoryPicker",
    "PromptPicker",
    "GRANT_KEY_PREFIX",
    "PathScopeResolver",
    "grant_key",
]
