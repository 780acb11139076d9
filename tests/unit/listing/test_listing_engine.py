"""Tests for merged directory listings: ordering, filtering, access refusal,
background generations and group contents."""

from __future__ import annotations

import tempfile
import threading
import time
import unittest
from pathlib import Path

from seeker.access import PathScopeResolver
from seeker.errors import AccessDenied, EnumerationFailed
from seeker.groups import GroupStore
from seeker.listing import DirectoryChild, FileSystemEntry, GroupEntry, ListingEngine, LocalFileSystem
from seeker.storage import JsonDocumentStore, KeyValueStore


class _GatedFileSystem(LocalFileSystem):
    """Blocks ``read_directory`` for one directory until released."""

    def __init__(self, gated: Path) -> None:
        self.gated = gated
        self.entered = threading.Event()
        self.release = threading.Event()

    def read_directory(self, directory: Path, show_hidden: bool = False) -> list[DirectoryChild]:
        if directory == self.gated:
            self.entered.set()
            self.release.wait(timeout=2.0)
        return super().read_directory(directory, show_hidden=show_hidden)


def _engine(root: Path, filesystem: LocalFileSystem | None = None, grant: bool = True) -> tuple[ListingEngine, GroupStore]:
    data = root / ".data"
    resolver = PathScopeResolver(KeyValueStore(JsonDocumentStore(data / "grants.json")))
    if grant:
        resolver.grant(root)
    fs = filesystem if filesystem is not None else LocalFileSystem()
    groups = GroupStore(JsonDocumentStore(data / "groups.json"), exists=fs.exists)
    return ListingEngine(resolver, groups, fs), groups


def _wait_idle(engine: ListingEngine, timeout_seconds: float = 2.0) -> None:
    deadline = time.monotonic() + timeout_seconds
    while engine._worker.busy and time.monotonic() < deadline:
        time.sleep(0.01)


class ListingEngineTests(unittest.TestCase):
    def test_groups_then_directories_then_files_case_insensitive(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "Zebra.txt").write_text("z", encoding="utf-8")
            (root / "apple").mkdir()
            engine, groups = _engine(root)
            groups.create("Group A", [root / "Zebra.txt", root / "apple"], root)

            names = [item.name for item in engine.list(root)]

            self.assertEqual(names, ["Group A", "apple", "Zebra.txt"])

    def test_group_rows_are_containers(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            engine, groups = _engine(root)
            groups.create("G", [root / "x"], root)

            items = engine.list(root)
            group_rows = [item for item in items if isinstance(item, GroupEntry)]
            self.assertEqual(len(group_rows), 1)
            self.assertTrue(group_rows[0].is_container)
            self.assertIsNone(group_rows[0].size)

    def test_hidden_entries_are_skipped_and_packages_are_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / ".secret").write_text("s", encoding="utf-8")
            (root / "Tool.app").mkdir()
            (root / "Tool.app" / "Contents").mkdir()
            (root / "folder").mkdir()
            engine, _groups = _engine(root)

            items = {item.name: item for item in engine.list(root)}

            self.assertNotIn(".secret", items)
            self.assertNotIn(".data", items)
            self.assertFalse(items["Tool.app"].is_container)
            self.assertTrue(items["folder"].is_container)

    def test_file_rows_carry_size_and_mtime(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "data.bin").write_bytes(b"12345")
            engine, _groups = _engine(root)

            (entry,) = engine.list(root)
            assert isinstance(entry, FileSystemEntry)
            self.assertEqual(entry.size, 5)
            self.assertIsNotNone(entry.modified_at)

    def test_listing_without_grant_is_refused(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "file.txt").write_text("x", encoding="utf-8")
            engine, _groups = _engine(root, grant=False)

            listing = engine.load(root)

            self.assertEqual(listing.items, ())
            self.assertTrue(listing.needs_access)
            self.assertIsInstance(listing.error, AccessDenied)

    def test_enumeration_failure_yields_empty_listing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            engine, _groups = _engine(root)

            listing = engine.load(root / "missing")

            self.assertEqual(listing.items, ())
            self.assertFalse(listing.needs_access)
            self.assertIsInstance(listing.error, EnumerationFailed)

    def test_listing_validates_groups(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            a, b = root / "a.txt", root / "b.txt"
            a.write_text("a", encoding="utf-8")
            b.write_text("b", encoding="utf-8")
            engine, groups = _engine(root)
            group = groups.create("Pair", [a, b], root)
            a.unlink()

            listing = engine.load(root)

            (row,) = [item for item in listing.items if isinstance(item, GroupEntry)]
            self.assertEqual(row.group.items, (b,))
            self.assertEqual(len(listing.pruned), 1)
            stored = groups.get(group.id)
            assert stored is not None
            self.assertEqual(stored.items, (b,))

    def test_query_filters_visible_items_without_touching_cache(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            for name in ("Report.pdf", "report-old.pdf", "notes.txt"):
                (root / name).write_text("x", encoding="utf-8")
            engine, _groups = _engine(root)
            engine.load(root)

            engine.set_query("REPORT")
            visible = [item.name for item in engine.visible_items()]

            self.assertEqual(visible, ["report-old.pdf", "Report.pdf"])
            current = engine.current
            assert current is not None
            self.assertEqual(len(current.items), 3)

            engine.set_query("")
            self.assertEqual(len(engine.visible_items()), 3)

    def test_background_listing_applies_on_control_thread(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "one.txt").write_text("1", encoding="utf-8")
            engine, _groups = _engine(root)

            engine.schedule(root)
            _wait_idle(engine)
            listing = engine.apply_pending()

            assert listing is not None
            self.assertEqual([item.name for item in listing.items], ["one.txt"])
            self.assertIs(engine.current, listing)

    def test_background_prune_is_saved_on_control_thread(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            a, b = root / "a.txt", root / "b.txt"
            a.write_text("a", encoding="utf-8")
            b.write_text("b", encoding="utf-8")
            engine, groups = _engine(root)
            group = groups.create("Pair", [a, b], root)
            observed: list[str] = []
            groups.subscribe(lambda change: observed.append(threading.current_thread().name))
            a.unlink()

            engine.schedule(root)
            _wait_idle(engine)

            self.assertEqual(observed, [])
            stored = groups.get(group.id)
            assert stored is not None
            self.assertEqual(stored.items, (a, b))

            listing = engine.apply_pending()

            assert listing is not None
            self.assertEqual(observed, [threading.current_thread().name])
            stored = groups.get(group.id)
            assert stored is not None
            self.assertEqual(stored.items, (b,))
            self.assertEqual(len(listing.pruned), 1)

    def test_stale_background_listing_is_discarded(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            slow = root / "slow"
            fast = root / "fast"
            slow.mkdir()
            fast.mkdir()
            (fast / "fast.txt").write_text("f", encoding="utf-8")
            filesystem = _GatedFileSystem(slow)
            engine, _groups = _engine(root, filesystem=filesystem)

            engine.schedule(slow)
            self.assertTrue(filesystem.entered.wait(timeout=2.0))
            engine.load(fast)
            filesystem.release.set()
            _wait_idle(engine)

            self.assertIsNone(engine.apply_pending())
            current = engine.current
            assert current is not None
            self.assertEqual(current.directory, fast)

    def test_group_contents_lists_existing_items_directories_first(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "b.txt").write_text("b", encoding="utf-8")
            (root / "Zdir").mkdir()
            engine, groups = _engine(root)
            group = groups.create("G", [root / "b.txt", root / "gone.txt", root / "Zdir"], root)

            names = [entry.name for entry in engine.group_contents(group)]

            self.assertEqual(names, ["Zdir", "b.txt"])

    def test_lost_groups_lists_orphans_by_name(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            engine, groups = _engine(root)
            groups.create("beta", [root / "x"], root / "gone-1")
            groups.create("Alpha", [root / "x"], root / "gone-2")
            groups.create("Home", [root / "x"], root)

            self.assertEqual([row.name for row in engine.lost_groups()], ["Alpha", "beta"])


if __name__ == "__main__":
    unittest.main()
