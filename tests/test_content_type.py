"""
Tests for the node lifecycle of content types.
"""

import os
import re
import unittest

from contentgraph.database import ContentStore
from contentgraph.errors import (
    ContentTypeExistsError,
    DuplicatePathError,
    NodeNotFoundError,
    TransformerNotFoundError,
)
from contentgraph.schema import FieldType, ScalarKind, ScalarType
from contentgraph.transformers import JSONTransformer
from contentgraph.utils import make_uid, parse_iso_date


class ContentTypeTestCase(unittest.TestCase):
    """Base class providing an in-memory store."""

    def setUp(self):
        self.store = ContentStore(":memory:")
        self.store.connect()
        self.store.initialize_database()
        self.posts = self.store.add_content_type("Post")

    def tearDown(self):
        self.store.disconnect()


class TestCreateNode(ContentTypeTestCase):
    """Test building nodes."""

    def test_scenario(self):
        node = self.posts.add_node({"id": "a", "fields": {"Title": "Hello World", "nested": {"x": 1}}})

        self.assertEqual(node.fields, {"title": "Hello World", "nested": {"x": 1}})
        self.assertEqual(node.title, "Hello World")
        self.assertEqual(node.slug, "hello-world")
        self.assertEqual(node.path, "/post/hello-world")
        self.assertEqual(node.uid, make_uid("Posta"))
        self.assertEqual(node.type_name, "Post")

    def test_display_field_defaults(self):
        node, belongs_to = self.posts.create_node({"id": "b"})

        self.assertEqual(node.title, "b")
        self.assertEqual(node.slug, "b")
        self.assertEqual(node.content, "")
        self.assertEqual(node.excerpt, "")
        self.assertIsNotNone(parse_iso_date(node.date))
        self.assertFalse(belongs_to)

    def test_options_win_over_fields(self):
        node, _ = self.posts.create_node({
            "id": "c",
            "title": "Option Title",
            "date": "2020-01-01",
            "fields": {"title": "Field Title", "date": "2021-01-01", "excerpt": "Short"}
        })

        self.assertEqual(node.title, "Option Title")
        self.assertEqual(node.date, "2020-01-01")
        self.assertEqual(node.excerpt, "Short")

    def test_create_node_does_not_index(self):
        self.posts.create_node({"id": "d"})

        self.assertEqual(len(self.posts), 0)
        self.assertEqual(self.store.list_index_entries(), [])

    def test_derived_id_is_stable(self):
        first, _ = self.posts.create_node({"title": "No id"})
        second, _ = self.posts.create_node({"title": "No id"})

        self.assertRegex(first.id, r"^[0-9a-f]{32}$")
        self.assertEqual(first.id, second.id)

    def test_derived_id_with_mixed_keys(self):
        node = self.posts.add_node({"title": "x", "fields": {1: "a", "b": 2}})
        again, _ = self.posts.create_node({"title": "x", "fields": {1: "a", "b": 2}})

        self.assertIsNotNone(node)
        self.assertEqual(node.id, again.id)
        self.assertEqual(node.fields, {"_1": "a", "b": 2})

    def test_caller_options_untouched(self):
        options = {
            "id": "e",
            "fields": {"Some Key": 1},
            "internal": {"mime_type": "application/json", "content": '{"title": "x"}'}
        }
        self.posts.create_node(options)

        self.assertEqual(options["fields"], {"Some Key": 1})
        self.assertNotIn("title", options)

    def test_explicit_path(self):
        node = self.posts.add_node({"id": "f", "path": "//custom//path"})

        self.assertEqual(node.path, "/custom/path")
        self.assertTrue(node.with_path)

    def test_generated_paths_are_clean(self):
        posts = self.store.add_content_type("Article", route="/:section/:slug/")
        for i, title in enumerate(["Hello", "Ünïcode Títle", "  spaced  ", "a/b"]):
            node = posts.add_node({"id": str(i), "title": title, "fields": {"section": ""}})
            self.assertTrue(node.path.startswith("/"))
            self.assertNotIn("//", node.path)

    def test_date_route(self):
        posts = self.store.add_content_type("Blog", route="/blog/:year/:month/:slug")
        node = posts.add_node({"id": "1", "title": "First Post", "date": "2023-07-09T12:00:00Z"})

        self.assertEqual(node.path, "/blog/2023/07/first-post")

    def test_references_in_index(self):
        node = self.posts.add_node({
            "id": "r",
            "fields": {"author": {"typeName": "Author", "id": "jane"}}
        })

        entry = self.store.get_index_entry(node.uid)
        self.assertEqual(entry.belongs_to, {"Author": {"jane": True}})
        self.assertEqual(node.fields["author"], {"typeName": "Author", "id": "jane"})

    def test_declared_reference_field(self):
        self.posts.add_reference("Author Id", {"type_name": "Author"})
        node = self.posts.add_node({"id": "s", "fields": {"authorId": "jane"}})

        entry = self.store.get_index_entry(node.uid)
        self.assertEqual(entry.belongs_to, {"Author": {"jane": True}})

    def test_resolve_absolute_paths(self):
        pages = self.store.add_content_type("Page", resolve_absolute_paths=True)
        node = pages.add_node({
            "id": "1",
            "fields": {"image": "./img/cover.jpg"},
            "internal": {"origin": "/site/pages/about.md"}
        })

        self.assertEqual(node.fields["image"], os.path.normpath("/site/pages/img/cover.jpg"))


class TestAddNode(ContentTypeTestCase):
    """Test adding nodes and path uniqueness."""

    def test_duplicate_path(self):
        first = self.posts.add_node({"id": "1", "path": "/same-path"})

        with self.assertLogs(level="WARNING") as logs:
            second = self.posts.add_node({"id": "2", "path": "/same-path"})

        self.assertIsNotNone(first)
        self.assertIsNone(second)
        self.assertEqual(len(self.posts), 1)
        self.assertIsNone(self.posts.get_node("2"))
        self.assertIn("/same-path", logs.output[0])

    def test_duplicate_path_across_types(self):
        pages = self.store.add_content_type("Page")

        self.assertIsNotNone(self.posts.add_node({"id": "1", "path": "/about"}))
        with self.assertLogs(level="WARNING"):
            self.assertIsNone(pages.add_node({"id": "1", "path": "/about"}))

        self.assertEqual(len(pages), 0)
        self.assertEqual(len(self.store.list_index_entries()), 1)

    def test_duplicate_id(self):
        self.posts.add_node({"id": "1", "path": "/one"})

        with self.assertLogs(level="WARNING") as logs:
            self.assertIsNone(self.posts.add_node({"id": "1", "path": "/two"}))

        self.assertIn("duplicate id", logs.output[0])
        self.assertEqual(self.posts.get_node("1").path, "/one")

    def test_get_node(self):
        node = self.posts.add_node({"id": 5})

        self.assertIs(self.posts.get_node("5"), node)
        self.assertIs(self.posts.get_node(5), node)
        self.assertIsNone(self.posts.get_node("missing"))
        self.assertIn("5", self.posts)
        self.assertEqual(list(self.posts), [node])

    def test_duplicate_content_type(self):
        with self.assertRaises(ContentTypeExistsError):
            self.store.add_content_type("Post")


class TestTransformers(ContentTypeTestCase):
    """Test nodes with raw content."""

    def test_transformed_content_fills_options(self):
        node = self.posts.add_node({
            "id": "j",
            "fields": {"author": "me"},
            "internal": {
                "mime_type": "application/json",
                "content": '{"title": "From JSON", "tags": ["a"], "author": "them"}'
            }
        })

        self.assertEqual(node.title, "From JSON")
        self.assertEqual(node.fields, {"tags": ["a"], "author": "me"})
        self.assertEqual(node.internal.mime_type, "application/json")
        self.assertIsInstance(self.posts.mime_types["application/json"], JSONTransformer)

    def test_explicit_options_win(self):
        node = self.posts.add_node({
            "id": "k",
            "title": "Explicit",
            "internal": {"mime_type": "text/yaml", "content": "title: From YAML\nslug: from-yaml\n"}
        })

        self.assertEqual(node.title, "Explicit")
        self.assertEqual(node.slug, "from-yaml")

    def test_missing_transformer(self):
        with self.assertRaises(TransformerNotFoundError):
            self.posts.add_node({"id": "m", "internal": {"mime_type": "text/markdown", "content": "# Hi"}})

        self.assertEqual(len(self.posts), 0)
        self.assertEqual(self.posts.mime_types, {})


class TestUpdateNode(ContentTypeTestCase):
    """Test updating nodes."""

    def test_update_is_idempotent(self):
        node = self.posts.add_node({
            "id": "a",
            "fields": {"Title": "Hello World", "nested": {"x": 1}, "tags": ["x", "y"]},
            "internal": {"origin": "content/a.json"}
        })
        before = node.model_dump(exclude={"internal": {"timestamp"}})

        updated = self.posts.update_node("a", {"fields": dict(node.fields)})

        self.assertEqual(updated.model_dump(exclude={"internal": {"timestamp"}}), before)

    def test_update_changes_path_and_index(self):
        posts = self.store.add_content_type("Note", route="/notes/:title")
        node = posts.add_node({"id": "1", "title": "First"})
        self.assertEqual(node.path, "/notes/first")

        updated = posts.update_node("1", {"title": "Second", "fields": {"tag": {"typeName": "Tag", "id": "t"}}})

        self.assertIs(updated, node)
        self.assertEqual(node.path, "/notes/second")
        self.assertEqual(node.slug, "first")
        entry = self.store.find_index_entry("/notes/second")
        self.assertEqual(entry.uid, node.uid)
        self.assertEqual(entry.belongs_to, {"Tag": {"t": True}})
        self.assertIsNone(self.store.find_index_entry("/notes/first"))

    def test_update_falls_back_to_previous_values(self):
        node = self.posts.add_node({"id": "p", "title": "Title", "date": "2020-02-02", "excerpt": "Old"})

        self.posts.update_node("p", {"fields": {"other": 1}})

        self.assertEqual(node.title, "Title")
        self.assertEqual(node.date, "2020-02-02")
        self.assertEqual(node.excerpt, "Old")
        self.assertEqual(node.fields, {"other": 1})

    def test_update_explicit_path(self):
        self.posts.add_node({"id": "q"})

        node = self.posts.update_node("q", {"path": "moved"})

        self.assertEqual(node.path, "/moved")
        self.assertTrue(node.with_path)
        self.assertEqual(self.store.get_node_by_path("/moved"), node)

    def test_update_to_taken_path(self):
        self.posts.add_node({"id": "1", "path": "/taken"})
        node = self.posts.add_node({"id": "2", "path": "/free", "title": "Two"})

        with self.assertRaises(DuplicatePathError):
            self.posts.update_node("2", {"path": "/taken", "title": "Changed"})

        self.assertEqual(node.path, "/free")
        self.assertEqual(node.title, "Two")

    def test_update_unknown_node(self):
        with self.assertRaises(NodeNotFoundError):
            self.posts.update_node("missing", {})


class TestRemoveNode(ContentTypeTestCase):
    """Test removing nodes."""

    def test_remove(self):
        node = self.posts.add_node({"id": "1", "path": "/gone"})

        self.posts.remove_node("1")

        self.assertIsNone(self.posts.get_node("1"))
        self.assertIsNone(self.store.get_index_entry(node.uid))
        # The path is free again
        self.assertIsNotNone(self.posts.add_node({"id": "2", "path": "/gone"}))

    def test_remove_unknown_node(self):
        with self.assertRaises(NodeNotFoundError):
            self.posts.remove_node("missing")


class TestNotifications(ContentTypeTestCase):
    """Test change notifications."""

    def setUp(self):
        super().setUp()
        self.events = []
        self.listener = self.posts.subscribe(lambda node, old: self.events.append((node, old)))

    def test_lifecycle_events_in_order(self):
        node = self.posts.add_node({"id": "1", "title": "First"})
        self.posts.update_node("1", {"title": "Second"})
        self.posts.remove_node("1")

        self.assertEqual(len(self.events), 3)

        added, none = self.events[0]
        self.assertIs(added, node)
        self.assertIsNone(none)

        updated, old = self.events[1]
        self.assertIs(updated, node)
        self.assertIsNot(old, node)
        self.assertEqual(old.title, "First")

        removed_new, removed_old = self.events[2]
        self.assertIsNone(removed_new)
        self.assertIs(removed_old, node)
        self.assertEqual(removed_old.title, "Second")

    def test_rejected_nodes_are_not_announced(self):
        self.posts.add_node({"id": "1", "path": "/x"})
        with self.assertLogs(level="WARNING"):
            self.posts.add_node({"id": "2", "path": "/x"})

        self.assertEqual(len(self.events), 1)

    def test_unsubscribe(self):
        self.posts.unsubscribe(self.listener)
        self.posts.add_node({"id": "1"})

        self.assertEqual(self.events, [])


class TestStoreQueries(ContentTypeTestCase):
    """Test lookups across content types."""

    def test_lookup_by_uid_and_path(self):
        authors = self.store.add_content_type("Author", route="/authors/:id")
        jane = authors.add_node({"id": "jane"})

        self.assertIs(self.store.get_node_by_uid(jane.uid), jane)
        self.assertIs(self.store.get_node_by_path("/authors/jane"), jane)
        self.assertIsNone(self.store.get_node_by_uid("missing"))

    def test_find_belongs_to(self):
        post = self.posts.add_node({"id": "1", "fields": {"author": {"typeName": "Author", "id": "jane"}}})
        self.posts.add_node({"id": "2", "fields": {"author": {"typeName": "Author", "id": "john"}}})

        entries = self.store.find_belongs_to("Author", "jane")

        self.assertEqual([entry.uid for entry in entries], [post.uid])

    def test_infer_schema(self):
        self.posts.add_node({"id": "1", "fields": {"views": 3, "tags": [], "count": 0}})
        self.posts.add_schema_field("custom field", {"type": "JSON"})

        schema = self.store.infer_schema()

        self.assertEqual(set(schema), {"Post"})
        self.assertEqual(schema["Post"]["views"], FieldType(ScalarType(ScalarKind.INT)))
        self.assertNotIn("tags", schema["Post"])
        self.assertNotIn("count", schema["Post"])
        self.assertEqual(schema["Post"]["customField"], {"type": "JSON"})

    def test_context_manager(self):
        with ContentStore(":memory:") as store:
            tags = store.add_content_type("Tag", description="Tags")
            self.assertEqual(tags.description, "Tags")
            self.assertEqual(store.list_content_types(), ["Tag"])
            self.assertIsNotNone(tags.add_node({"id": "python"}))

        self.assertIsNone(store.connection)


if __name__ == "__main__":
    unittest.main()
