"""Tests for atomic JSON documents and the key-value store on top of them."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from seeker.storage import JsonDocumentStore, KeyValueStore


class JsonDocumentStoreTests(unittest.TestCase):
    def test_missing_document_returns_default(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = JsonDocumentStore(Path(tmp) / "doc.json")
            self.assertEqual(store.load(default=[]), [])

    def test_save_creates_parent_and_leaves_no_temp_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "a" / "b" / "doc.json"
            store = JsonDocumentStore(path)

            self.assertTrue(store.save({"k": [1, 2]}))

            self.assertEqual(json.loads(path.read_text(encoding="utf-8")), {"k": [1, 2]})
            self.assertEqual(sorted(p.name for p in path.parent.iterdir()), ["doc.json"])

    def test_corrupt_document_returns_default(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "doc.json"
            path.write_text("{{{", encoding="utf-8")
            with self.assertLogs("seeker.storage", level="WARNING"):
                self.assertEqual(JsonDocumentStore(path).load(default={}), {})

    def test_unserializable_document_is_refused(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "doc.json"
            with self.assertLogs("seeker.storage", level="ERROR"):
                self.assertFalse(JsonDocumentStore(path).save({"bad": object()}))
            self.assertFalse(path.exists())


class KeyValueStoreTests(unittest.TestCase):
    def test_set_get_delete_persist(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "kv.json"
            store = KeyValueStore(JsonDocumentStore(path))

            store.set("bookmark./a", "token-a")
            store.set("other", "x")
            self.assertEqual(store.get("bookmark./a"), "token-a")

            reopened = KeyValueStore(JsonDocumentStore(path))
            self.assertEqual(reopened.get("other"), "x")
            self.assertTrue(reopened.delete("other"))
            self.assertFalse(reopened.delete("other"))
            self.assertIsNone(KeyValueStore(JsonDocumentStore(path)).get("other"))

    def test_items_filters_by_prefix_and_sorts(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = KeyValueStore(JsonDocumentStore(Path(tmp) / "kv.json"))
            store.set("bookmark./z", "1")
            store.set("bookmark./a", "2")
            store.set("misc", "3")

            self.assertEqual(store.items("bookmark."), [("bookmark./a", "2"), ("bookmark./z", "1")])

    def test_non_string_values_are_dropped_on_load(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "kv.json"
            path.write_text(json.dumps({"ok": "v", "num": 3}), encoding="utf-8")

            store = KeyValueStore(JsonDocumentStore(path))

            self.assertEqual(store.items(), [("ok", "v")])


if __name__ == "__main__":
    unittest.main()
