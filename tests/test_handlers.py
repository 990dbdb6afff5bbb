"""Tests for the default add() and data-handler strategies."""
from __future__ import annotations

import unittest
from dataclasses import dataclass, field
from typing import Any

from subscribe_for_data.errors import ConditionShapeError, SubscriptionConfigError
from subscribe_for_data.handlers import seed_default
from subscribe_for_data.options import build_options
from subscribe_for_data.subscription import Subscription


def _no_stream(source, condition):
    return []


def _subscription(**options: Any) -> Subscription:
    return Subscription("source", build_options({"get_stream": _no_stream}, options))


@dataclass
class Article:
    id: int
    author_id: int
    tags: list[str] | None = None
    author: Any = None
    meta: dict[str, Any] = field(default_factory=dict)


class TestAdd(unittest.TestCase):
    def test_add_indexes_target_and_grows_condition(self):
        sub = _subscription(target_field="children", foreign_field="parent_id")
        target = {"id": 5}
        sub.add(target)

        self.assertIs(sub.index.lookup(5)[0], target)
        self.assertEqual(sub.condition, {"parent_id": {"$in": [5]}})
        self.assertEqual(sub.added, 1)

    def test_scalar_default_is_seeded(self):
        sub = _subscription(target_field="author", foreign_field="_id", default_value="none")
        target = {"id": 1}
        sub.add(target)
        self.assertEqual(target["author"], "none")

    def test_none_default_is_seeded(self):
        sub = _subscription(target_field="author", foreign_field="_id", default_value=None)
        target = {"id": 1}
        sub.add(target)
        self.assertIn("author", target)
        self.assertIsNone(target["author"])

    def test_no_default_leaves_target_alone(self):
        sub = _subscription(target_field="author", foreign_field="_id")
        target = {"id": 1}
        sub.add(target)
        self.assertEqual(target, {"id": 1})

    def test_mapping_default_is_merged_onto_target(self):
        sub = _subscription(
            target_field="author", foreign_field="_id",
            default_value={"author": None, "author_loaded": False},
        )
        target = {"id": 1, "title": "x"}
        sub.add(target)
        self.assertEqual(target, {"id": 1, "title": "x", "author": None, "author_loaded": False})

    def test_list_default_is_not_shared(self):
        sub = _subscription(target_field="tags", foreign_field="post_id", is_multiple=True, default_value=[])
        first, second = {"id": 1}, {"id": 2}
        sub.add(first)
        sub.add(second)
        first["tags"].append("x")
        self.assertEqual(second["tags"], [])

    def test_mixed_condition_shapes_leave_index_untouched(self):
        sub = _subscription(
            target_field="rate",
            foreign_field="pair",
            default_value="n/a",
            get_condition=lambda t: t["condition"],
        )
        sub.add({"id": 1, "condition": "BTCUSD"})
        rejected = {"id": 2, "condition": {"base": "ETH"}}

        with self.assertRaises(ConditionShapeError):
            sub.add(rejected)

        self.assertNotIn(2, sub.index)
        self.assertNotIn("rate", rejected)
        self.assertEqual(sub.added, 1)

    def test_object_targets(self):
        sub = _subscription(
            target_field="author", foreign_field="_id", default_value="unknown",
            get_key=lambda a: a.author_id,
        )
        article = Article(id=1, author_id=3)
        sub.add(article)
        self.assertEqual(article.author, "unknown")
        self.assertIs(sub.index.lookup(3)[0], article)


class TestHandle(unittest.TestCase):
    def test_one_to_one_assigns_source_field(self):
        sub = _subscription(target_field="author", foreign_field="_id", source_field="name")
        target = {"id": 1}
        sub.add(target)
        sub.handle({"_id": 1, "name": "Ann"})
        self.assertEqual(target["author"], "Ann")

    def test_whole_record_when_source_field_unset(self):
        sub = _subscription(target_field="author", foreign_field="_id")
        target = {"id": 1}
        sub.add(target)
        record = {"_id": 1, "name": "Ann"}
        sub.handle(record)
        self.assertIs(target["author"], record)

    def test_miss_is_ignored(self):
        sub = _subscription(target_field="author", foreign_field="_id", source_field="name")
        target = {"id": 1}
        sub.add(target)
        self.assertIsNone(sub.handle({"_id": 2, "name": "Bob"}))
        self.assertEqual(target, {"id": 1})

    def test_one_to_many_creates_collection_lazily(self):
        sub = _subscription(target_field="tags", foreign_field="post_id", source_field="label", is_multiple=True)
        article = Article(id=1, author_id=1)
        sub.add(article)
        self.assertIsNone(article.tags)

        sub.handle({"post_id": 1, "label": "b"})
        sub.handle({"post_id": 1, "label": "a"})
        self.assertEqual(article.tags, ["b", "a"])

    def test_one_to_many_replaces_scalar_default(self):
        sub = _subscription(
            target_field="tags", foreign_field="post_id", source_field="label",
            is_multiple=True, default_value="none",
        )
        matched, unmatched = {"id": 1}, {"id": 2}
        sub.add(matched)
        sub.add(unmatched)

        sub.handle({"post_id": 1, "label": "a"})
        sub.handle({"post_id": 1, "label": "b"})
        self.assertEqual(matched["tags"], ["a", "b"])
        self.assertEqual(unmatched["tags"], "none")

    def test_one_to_many_set_default_collects_into_set(self):
        sub = _subscription(
            target_field="tags", foreign_field="post_id", source_field="label",
            is_multiple=True, default_value=set(),
        )
        target = {"id": 1}
        sub.add(target)
        sub.handle({"post_id": 1, "label": "a"})
        sub.handle({"post_id": 1, "label": "a"})
        self.assertEqual(target["tags"], {"a"})

    def test_records_as_objects(self):
        sub = _subscription(target_field="author", foreign_field="id", source_field="author_id")
        target = {"id": 1}
        sub.add(target)
        sub.handle(Article(id=1, author_id=42))
        self.assertEqual(target["author"], 42)

    def test_assign_data_replaces_default_assignment(self):
        calls = []
        sub = _subscription(
            target_field="author", foreign_field="_id", source_field="name",
            assign_data=lambda target, record: calls.append((target["id"], record["name"])),
        )
        target = {"id": 1}
        sub.add(target)
        sub.handle({"_id": 1, "name": "Ann"})
        self.assertEqual(calls, [(1, "Ann")])
        self.assertNotIn("author", target)


class TestUseTargetId(unittest.TestCase):
    def test_targets_referencing_one_record_are_all_filled(self):
        sub = _subscription(
            target_field="tags",
            foreign_field="_id",
            source_field="label",
            is_multiple=True,
            use_target_id=True,
            get_condition=lambda post: post["tag_ids"],
        )
        first = {"id": 1, "tag_ids": ["t1", "t2"]}
        second = {"id": 2, "tag_ids": ["t2"]}
        sub.add(first)
        sub.add(second)

        self.assertEqual(sub.condition, {"_id": {"$in": ["t1", "t2", "t2"]}})

        sub.handle({"_id": "t1", "label": "python"})
        sub.handle({"_id": "t2", "label": "asyncio"})

        self.assertEqual(first["tags"], ["python", "asyncio"])
        self.assertEqual(second["tags"], ["asyncio"])

    def test_single_reference(self):
        sub = _subscription(
            target_field="owner", foreign_field="_id", source_field="name",
            use_target_id=True, get_condition=lambda doc: doc["owner_id"],
        )
        target = {"id": 1, "owner_id": "u1"}
        sub.add(target)
        sub.handle({"_id": "u1", "name": "Ann"})
        self.assertEqual(target["owner"], "Ann")

    def test_mapping_reference_is_rejected(self):
        sub = _subscription(
            target_field="owner", foreign_field="_id",
            use_target_id=True, get_condition=lambda doc: {"_id": doc["owner_id"]},
        )
        with self.assertRaises(ConditionShapeError):
            sub.add({"id": 1, "owner_id": "u1"})
        self.assertEqual(len(sub.index), 0)


class TestStrategyFactories(unittest.TestCase):
    def test_custom_adding_method(self):
        added = []
        sub = _subscription(
            target_field="x", foreign_field="_id",
            get_adding_method=lambda subscription: added.append,
        )
        sub.add({"id": 1})
        self.assertEqual(added, [{"id": 1}])

    def test_custom_data_handler_receives_subscription(self):
        seen = []

        def factory(subscription):
            return lambda record: seen.append((subscription.target_field, record))

        sub = _subscription(target_field="x", foreign_field="_id", get_data_handler=factory)
        sub.handle({"_id": 1})
        self.assertEqual(seen, [("x", {"_id": 1})])

    def test_factory_must_return_callable(self):
        with self.assertRaises(SubscriptionConfigError):
            _subscription(target_field="x", foreign_field="_id", get_adding_method=lambda s: None)


class TestSeedDefault(unittest.TestCase):
    def test_set_default_is_copied(self):
        default = {"a"}
        target: dict[str, Any] = {}
        seed_default(target, "labels", default)
        target["labels"].add("b")
        self.assertEqual(default, {"a"})


if __name__ == "__main__":
    unittest.main()
