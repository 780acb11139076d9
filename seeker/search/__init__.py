"""Search package exports.

Combines the indexing collaborator and the two-mode search facade in one
import surface.
"""

from __future__ import annotations

from .facade import GLOBAL_SCOPES, ResultAccumulator, SearchFacade, SearchMode
from .index import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_MAX_DIRECTORIES,
    IndexScope,
    Indexer,
    WalkIndexer,
    fold_name,
)

__all__ = [
    "GLOBAL_SCOPES",
    "ResultAccumulator",
    "SearchFacade",
    "SearchMode",
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_MAX_DIRECTORIES",
    "IndexScope",
    "Indexer",
    "WalkIndexer",
    "fold_name",
]
