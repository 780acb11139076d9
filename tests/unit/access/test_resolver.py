"""Tests for ancestor-walking access resolution.

Covers descendant re-joining, overlapping grants, stale-token fallthrough,
and the interactive request flow with a fake picker.
"""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from seeker.access import GRANT_KEY_PREFIX, PathScopeResolver, grant_key
from seeker.storage import JsonDocumentStore, KeyValueStore


class _FakePicker:
    def __init__(self, answer: Path | None) -> None:
        self.answer = answer
        self.seeds: list[Path] = []

    def pick_directory(self, seed: Path) -> Path | None:
        self.seeds.append(seed)
        return self.answer


def _resolver(data_dir: Path, picker: _FakePicker | None = None) -> tuple[PathScopeResolver, KeyValueStore]:
    store = KeyValueStore(JsonDocumentStore(data_dir / "grants.json"))
    return PathScopeResolver(store, picker=picker), store


class PathScopeResolverTests(unittest.TestCase):
    def test_descendant_of_granted_root_resolves_to_full_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            documents = root / "Users" / "a" / "Documents"
            documents.mkdir(parents=True)
            resolver, _store = _resolver(root / "data")
            resolver.grant(documents)

            requested = documents / "Projects" / "x.txt"
            resolved = resolver.has_access(requested)

            self.assertIsNotNone(resolved)
            assert resolved is not None
            self.assertEqual(resolved.path, requested)
            self.assertEqual(resolved.grant_root, documents)

    def test_resolved_paths_keep_root_prefix_and_remainder_suffix(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            granted = root / "granted"
            granted.mkdir()
            resolver, _store = _resolver(root / "data")
            resolver.grant(granted)

            for remainder in ("a", "a/b", "a/b/c.txt", "deep/er/still/file"):
                requested = granted / remainder
                resolved = resolver.has_access(requested)
                assert resolved is not None
                self.assertTrue(str(resolved).startswith(str(granted)))
                self.assertTrue(str(resolved).endswith(remainder))

    def test_exact_root_returns_root(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            resolver, _store = _resolver(root / "data")
            resolver.grant(root)

            resolved = resolver.has_access(root)
            assert resolved is not None
            self.assertEqual(resolved.path, root)

    def test_no_grant_returns_none(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            resolver, _store = _resolver(root / "data")
            self.assertIsNone(resolver.has_access(root / "anything"))
            self.assertIsNone(resolver.ensure_access(root))

    def test_most_specific_grant_wins_when_grants_overlap(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            child = root / "child"
            child.mkdir()
            resolver, _store = _resolver(root / "data")
            resolver.grant(root)
            resolver.grant(child)

            resolved = resolver.has_access(child / "file.txt")
            assert resolved is not None
            self.assertEqual(resolved.grant_root, child)

    def test_stale_grant_falls_through_to_ancestor(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            child = root / "child"
            child.mkdir()
            resolver, _store = _resolver(root / "data")
            resolver.grant(root)
            resolver.grant(child)
            child.rmdir()

            resolved = resolver.has_access(child / "file.txt")
            assert resolved is not None
            self.assertEqual(resolved.grant_root, root)
            self.assertEqual(resolved.path, child / "file.txt")

    def test_corrupted_token_is_treated_as_absent(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            resolver, store = _resolver(root / "data")
            store.set(grant_key(root), "not-a-token")

            self.assertIsNone(resolver.has_access(root / "x"))

    def test_grant_is_not_overwritten(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            resolver, store = _resolver(root / "data")
            first = resolver.grant(root)
            second = resolver.grant(root)

            assert first is not None and second is not None
            self.assertEqual(first.token, second.token)
            self.assertEqual(len(store.items(GRANT_KEY_PREFIX)), 1)

    def test_stale_grant_is_replaced_on_explicit_grant(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            resolver, store = _resolver(root / "data")
            store.set(grant_key(root), "garbage")

            grant = resolver.grant(root)

            assert grant is not None
            self.assertNotEqual(store.get(grant_key(root)), "garbage")
            self.assertIsNotNone(resolver.has_access(root))

    def test_grants_persist_across_resolver_instances(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            resolver, _store = _resolver(root / "data")
            resolver.grant(root)

            reopened, _store = _resolver(root / "data")
            self.assertIsNotNone(reopened.has_access(root / "sub"))
            self.assertEqual([grant.root for grant in reopened.grants()], [root])

    def test_request_access_stores_picked_parent_and_resolves_request(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            target = root / "photos"
            target.mkdir()
            picker = _FakePicker(answer=root)
            resolver, store = _resolver(root / "data", picker)

            resolved = resolver.request_access(target)

            self.assertEqual(picker.seeds, [target])
            assert resolved is not None
            self.assertEqual(resolved.path, target)
            self.assertEqual(resolved.grant_root, root)
            self.assertIsNotNone(store.get(grant_key(root)))
            self.assertIsNone(store.get(grant_key(target)))

    def test_request_access_cancelled_stores_nothing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            resolver, store = _resolver(root / "data", _FakePicker(answer=None))

            self.assertIsNone(resolver.request_access(root))
            self.assertEqual(store.items(GRANT_KEY_PREFIX), [])

    def test_request_access_without_picker_returns_none(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            resolver, _store = _resolver(root / "data")
            self.assertIsNone(resolver.request_access(root))

    def test_access_begins_once_per_root_and_ends_on_request(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            resolver, _store = _resolver(root / "data")
            resolver.grant(root)

            resolver.has_access(root / "a")
            resolver.has_access(root / "b")
            self.assertEqual(resolver.active_roots(), frozenset({root}))

            resolver.end_access()
            self.assertEqual(resolver.active_roots(), frozenset())


if __name__ == "__main__":
    unittest.main()
