import unittest

from pydantic import ValidationError

from core.domain.records import Record
from core.domain.values import Keyword
from sample_records import Event, Point, Shape, SimpleRecord


class RecordTagTests(unittest.TestCase):
    def test_default_namespace_is_user(self):
        self.assertEqual(SimpleRecord.tag(), "user/SimpleRecord")

    def test_default_namespace_can_be_overridden_by_caller(self):
        self.assertEqual(SimpleRecord.tag("app"), "app/SimpleRecord")

    def test_declared_namespace_wins_over_default(self):
        self.assertEqual(Point.tag("app"), "geo/Point")

    def test_explicit_tag(self):
        self.assertEqual(Event.tag(), "app/event")

    def test_field_names_keep_declared_order(self):
        self.assertEqual(Shape.field_names(), ("name", "origin", "vertices"))


class RecordValueTests(unittest.TestCase):
    def test_equality_ignores_field_order(self):
        self.assertEqual(Point(x=1.0, y=2.0), Point(y=2.0, x=1.0))

    def test_records_are_immutable(self):
        point = Point(x=1.0, y=2.0)
        with self.assertRaises(ValidationError):
            point.x = 5.0

    def test_extra_fields_are_rejected(self):
        with self.assertRaises(ValidationError):
            SimpleRecord(a=1, b=2)

    def test_field_items_keep_nested_records(self):
        origin = Point(x=0.0, y=0.0)
        shape = Shape(name="dot", origin=origin)
        self.assertEqual(shape.field_items(), [("name", "dot"), ("origin", origin), ("vertices", [])])


class FromMapTests(unittest.TestCase):
    def test_builds_from_keyword_map(self):
        self.assertEqual(SimpleRecord.from_map({Keyword("a"): 42}), SimpleRecord(a=42))

    def test_accepts_string_keys(self):
        self.assertEqual(SimpleRecord.from_map({"a": 42}), SimpleRecord(a=42))

    def test_rejects_non_map_payload(self):
        with self.assertRaisesRegex(TypeError, "expects a map payload"):
            SimpleRecord.from_map([42])

    def test_rejects_namespaced_keyword_keys(self):
        with self.assertRaisesRegex(TypeError, "simple keywords"):
            SimpleRecord.from_map({Keyword("a", "x"): 42})

    def test_missing_field_fails_validation(self):
        with self.assertRaises(ValidationError):
            SimpleRecord.from_map({})

    def test_base_record_has_no_fields(self):
        self.assertEqual(Record.field_names(), ())
