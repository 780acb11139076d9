"""Command-line front door for seeker.

Parses CLI options, builds the navigation services once, and dispatches to a
subcommand: list a directory, grant access, manage groups, or search.
"""

from __future__ import annotations

import argparse
import logging
import sys
import uuid
from pathlib import Path
from typing import TextIO

from .access import DirectoryPicker, PromptPicker
from .app import Services, build_services
from .groups import Group
from .listing import LOST_GROUPS_LABEL, DirectoryItem, GroupEntry
from .search import SearchMode

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_NEEDS_ACCESS = 2


def _format_size(size: int | None) -> str:
    if size is None:
        return ""
    if size < 1024:
        return f"{size} B"
    value = size / 1024
    for unit in ("KB", "MB"):
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


def format_item(item: DirectoryItem) -> str:
    """Render one listing row as ``<kind> <name> <size>``."""
    if isinstance(item, GroupEntry):
        return f"G  {item.name}  ({len(item.group.items)} items)"
    if item.is_container:
        return f"D  {item.name}/"
    return f"F  {item.name}  {_format_size(item.size)}".rstrip()


def _write_items(out: TextIO, items: list[DirectoryItem]) -> None:
    for item in items:
        out.write(format_item(item) + "\n")


def _find_group(services: Services, key: str) -> Group | None:
    """Look a group up by full id or unique id prefix."""
    try:
        return services.groups.get(uuid.UUID(key))
    except ValueError:
        pass
    matches = [group for group in services.groups.all_groups() if str(group.id).startswith(key.lower())]
    return matches[0] if len(matches) == 1 else None


def _cmd_ls(services: Services, args: argparse.Namespace, out: TextIO) -> int:
    if args.lost:
        out.write(f"{LOST_GROUPS_LABEL}\n")
        _write_items(out, list(services.listing.lost_groups()))
        return EXIT_OK

    listing = services.session.navigate(Path(args.path or Path.cwd()))
    if listing is None:
        out.write(f"needs access: {services.session.pending_grant} (run `seeker grant`)\n")
        return EXIT_NEEDS_ACCESS
    if listing.error is not None:
        logger.warning("%s", listing.error)
    services.listing.set_query(args.filter or "")
    _write_items(out, services.listing.visible_items())
    return EXIT_OK


def _cmd_grant(services: Services, args: argparse.Namespace, out: TextIO) -> int:
    resolved = services.resolver.request_access(Path(args.path))
    if resolved is None:
        out.write("access not granted\n")
        return EXIT_NEEDS_ACCESS
    out.write(f"granted: {resolved}\n")
    return EXIT_OK


def _cmd_grants(services: Services, _args: argparse.Namespace, out: TextIO) -> int:
    for grant in services.resolver.grants():
        live = services.resolver.has_access(grant.root) is not None
        out.write(f"{'live ' if live else 'stale'}  {grant.root}\n")
    return EXIT_OK


def _cmd_groups(services: Services, args: argparse.Namespace, out: TextIO) -> int:
    store = services.groups
    action = args.action

    if action == "list":
        groups = store.groups_in_directory(Path(args.directory)) if args.directory else store.all_groups()
        for group in sorted(groups, key=lambda g: g.name.lower()):
            out.write(f"{group.id}  {group.name}  ({len(group.items)} items)  in {group.parent_directory}\n")
        return EXIT_OK

    if action == "create":
        group = services.session.create_group_from_selection(args.name, [Path(item) for item in args.items])
        if group is None:
            out.write("a group needs a name and at least two items\n")
            return EXIT_FAILURE
        out.write(f"{group.id}\n")
        return EXIT_OK

    group = _find_group(services, args.group)
    if group is None:
        out.write(f"no such group: {args.group}\n")
        return EXIT_FAILURE

    if action == "show":
        _write_items(out, list(services.session.open_group(group)))
    elif action == "delete":
        store.delete(group)
    elif action == "rename":
        if store.rename(group, args.name) is None:
            out.write("group name must not be empty\n")
            return EXIT_FAILURE
    elif action == "add":
        store.add_items(group, [Path(item) for item in args.items])
    elif action == "remove":
        store.remove_items(group, [Path(item) for item in args.items])
    return EXIT_OK


def _cmd_search(services: Services, args: argparse.Namespace, out: TextIO) -> int:
    search = services.search
    if args.all:
        if not search.has_global_scope():
            out.write(f"global search needs access to {search.home} (run `seeker grant {search.home}`)\n")
            return EXIT_NEEDS_ACCESS
        _write_items(out, search.search(args.query, SearchMode.GLOBAL))
        return EXIT_OK

    if services.session.navigate(Path(args.directory or Path.cwd())) is None:
        out.write(f"needs access: {services.session.pending_grant} (run `seeker grant`)\n")
        return EXIT_NEEDS_ACCESS
    _write_items(out, search.search(args.query, SearchMode.CURRENT_FOLDER))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="seeker",
        description="Browse directories and virtual groups with sandboxed access grants.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument("--data-dir", type=Path, default=None, help="Override the application data directory.")
    sub = parser.add_subparsers(dest="command", required=True)

    ls = sub.add_parser("ls", help="List a directory with its groups.")
    ls.add_argument("path", nargs="?", default=None, help="Directory to list. Defaults to current directory.")
    ls.add_argument("--filter", default="", help="Case-insensitive name filter.")
    ls.add_argument("--lost", action="store_true", help="List groups whose parent directory is gone.")
    ls.set_defaults(handler=_cmd_ls)

    grant = sub.add_parser("grant", help="Grant read access to a directory subtree.")
    grant.add_argument("path")
    grant.set_defaults(handler=_cmd_grant)

    grants = sub.add_parser("grants", help="List stored access grants.")
    grants.set_defaults(handler=_cmd_grants)

    groups = sub.add_parser("groups", help="Manage virtual groups.")
    actions = groups.add_subparsers(dest="action", required=True)
    g_list = actions.add_parser("list")
    g_list.add_argument("directory", nargs="?", default=None)
    g_create = actions.add_parser("create")
    g_create.add_argument("name")
    g_create.add_argument("items", nargs="+")
    for name in ("show", "delete"):
        action = actions.add_parser(name)
        action.add_argument("group", help="Group id or unique id prefix.")
    g_rename = actions.add_parser("rename")
    g_rename.add_argument("group")
    g_rename.add_argument("name")
    for name in ("add", "remove"):
        action = actions.add_parser(name)
        action.add_argument("group")
        action.add_argument("items", nargs="+")
    groups.set_defaults(handler=_cmd_groups)

    search = sub.add_parser("search", help="Search the current folder or the whole index.")
    search.add_argument("query")
    search.add_argument("--all", action="store_true", help="Search globally instead of one folder.")
    search.add_argument("--in", dest="directory", default=None, help="Folder for current-folder search.")
    search.set_defaults(handler=_cmd_search)
    return parser


def main(
    argv: list[str] | None = None,
    picker: DirectoryPicker | None = None,
    out: TextIO | None = None,
) -> int:
    """Parse CLI arguments and run one seeker subcommand.

    ``picker`` and ``out`` are primarily for tests. ``groups create`` places
    the group in the current working directory.
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    out = out if out is not None else sys.stdout

    services = build_services(
        data_dir=args.data_dir,
        picker=picker if picker is not None else PromptPicker(),
        start=Path.cwd(),
    )
    try:
        return args.handler(services, args, out)
    finally:
        services.close()


if __name__ == "__main__":
    raise SystemExit(main())
