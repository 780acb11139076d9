"""Startup wiring: construct each service once and hand out references."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from . import config
from .access import DirectoryPicker, PathScopeResolver
from .groups import GROUPS_FILENAME, GroupStore
from .listing import FileSystem, ListingEngine, LocalFileSystem
from .search import IndexScope, Indexer, SearchFacade, WalkIndexer
from .session import BrowserSession
from .sidebar import Sidebar
from .storage import JsonDocumentStore, KeyValueStore

logger = logging.getLogger(__name__)

GRANTS_FILENAME = "grants.json"


@dataclass
class Services:
    resolver: PathScopeResolver
    groups: GroupStore
    listing: ListingEngine
    search: SearchFacade
    session: BrowserSession
    sidebar: Sidebar

    def close(self) -> None:
        self.listing.cancel()
        self.search.clear()
        self.sidebar.close()
        self.resolver.end_access()


def build_services(
    data_dir: Path | None = None,
    picker: DirectoryPicker | None = None,
    home: Path | None = None,
    filesystem: FileSystem | None = None,
    indexer: Indexer | None = None,
    start: Path | None = None,
) -> Services:
    """Build the navigation core; config supplies anything not passed in."""
    data_dir = data_dir if data_dir is not None else config.load_data_dir()
    home = home if home is not None else Path.home()
    filesystem = filesystem if filesystem is not None else LocalFileSystem()
    show_hidden = config.load_show_hidden()
    logger.debug("using data directory %s", data_dir)

    resolver = PathScopeResolver(
        KeyValueStore(JsonDocumentStore(data_dir / GRANTS_FILENAME)),
        picker=picker,
    )
    groups = GroupStore(JsonDocumentStore(data_dir / GROUPS_FILENAME), exists=filesystem.exists)
    listing = ListingEngine(resolver, groups, filesystem, show_hidden=show_hidden)
    if indexer is None:
        indexer = WalkIndexer({IndexScope.USER_HOME: [home]}, show_hidden=show_hidden)
    search = SearchFacade(
        resolver,
        listing,
        indexer,
        home=home,
        result_limit=config.load_search_result_limit(),
    )
    session = BrowserSession(
        resolver,
        groups,
        listing,
        start=start if start is not None else home,
        search=search,
    )
    sidebar = Sidebar(groups, home, config.load_sidebar_folders())
    return Services(
        resolver=resolver,
        groups=groups,
        listing=listing,
        search=search,
        session=session,
        sidebar=sidebar,
    )


__all__ = ["GRANTS_FILENAME", "Services", "build_services"]
