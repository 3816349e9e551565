import unittest
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from core.domain.policy import UnknownTagPolicy
from core.domain.values import Char, EdnList, Keyword, Symbol, TaggedLiteral, Vector
from core.errors import ConstructorArityError, MalformedLiteralError, UnknownTagError
from core.services.reader import decode, decode_all
from core.services.registry import TagRegistry, registry_with
from sample_records import Point, Shape, SimpleRecord


class ScalarTests(unittest.TestCase):
    def test_numbers(self):
        self.assertEqual(decode("42"), 42)
        self.assertEqual(decode("-7"), -7)
        self.assertEqual(decode("+3"), 3)
        self.assertEqual(decode("42N"), 42)
        self.assertEqual(decode("1.5"), 1.5)
        self.assertEqual(decode("-2.5e3"), -2500.0)
        self.assertEqual(decode("1.50M"), Decimal("1.50"))
        self.assertIsInstance(decode("1.50M"), Decimal)

    def test_nil_and_booleans(self):
        self.assertIsNone(decode("nil"))
        self.assertIs(decode("true"), True)
        self.assertIs(decode("false"), False)

    def test_strings_with_escapes(self):
        self.assertEqual(decode('"a\\nb\\t\\"c\\"\\\\"'), 'a\nb\t"c"\\')
        self.assertEqual(decode('"caf\\u00e9"'), "café")
        self.assertEqual(decode('"multi\nline"'), "multi\nline")

    def test_keywords_and_symbols(self):
        self.assertEqual(decode(":a"), Keyword("a"))
        self.assertEqual(decode(":geo/lat"), Keyword("lat", "geo"))
        self.assertEqual(decode("foo/bar"), Symbol("bar", "foo"))
        self.assertEqual(decode("-"), Symbol("-"))

    def test_characters(self):
        self.assertEqual(decode("\\a"), Char("a"))
        self.assertEqual(decode("\\newline"), "\n")
        self.assertEqual(decode("\\u0041"), "A")
        self.assertEqual(decode("[\\( \\)]"), Vector(("(", ")")))


class CollectionTests(unittest.TestCase):
    def test_vector_and_list_types(self):
        vector = decode("[1 2 3]")
        self.assertIsInstance(vector, Vector)
        self.assertEqual(vector, (1, 2, 3))

        lst = decode("(1 2)")
        self.assertIsInstance(lst, EdnList)
        self.assertEqual(lst, (1, 2))

    def test_map_with_commas(self):
        self.assertEqual(decode("{:a 1, :b 2}"), {Keyword("a"): 1, Keyword("b"): 2})

    def test_vector_can_be_map_key(self):
        value = decode("{[1 2] :pair}")
        self.assertEqual(value[(1, 2)], Keyword("pair"))

    def test_set(self):
        self.assertEqual(decode("#{1 2 3}"), frozenset({1, 2, 3}))

    def test_comments_and_discard(self):
        self.assertEqual(decode("; header\n[1 #_2 3] ; trailing"), (1, 3))
        self.assertEqual(decode("[#_ #_ 1 2 3]"), (3,))
        self.assertEqual(decode("#_ :ignored 5"), 5)

    def test_decode_all_reads_every_form(self):
        self.assertEqual(decode_all("1 :a [2]\n#_3"), [1, Keyword("a"), (2,)])
        self.assertEqual(decode_all("  ; nothing\n"), [])


class MalformedTests(unittest.TestCase):
    def assertMalformed(self, text, pattern):
        with self.assertRaisesRegex(MalformedLiteralError, pattern):
            decode(text)

    def test_empty_input(self):
        self.assertMalformed("   ", "No form to decode")

    def test_unbalanced(self):
        self.assertMalformed("[1 2", "missing")
        self.assertMalformed("]", "Unmatched delimiter")
        self.assertMalformed("(1 ]", "Unmatched delimiter")

    def test_map_arity_and_duplicates(self):
        self.assertMalformed("{:a}", "even number")
        self.assertMalformed("{:a 1 :a 2}", "Duplicate map key")
        self.assertMalformed("#{1 1}", "Duplicate set member")
        self.assertMalformed("{{:a 1} 2}", "Unhashable map key")

    def test_keys_equal_in_python_are_duplicates(self):
        self.assertMalformed("{1 :a 1.0 :b}", r"Duplicate map key 1.0 \(equal to 1 in Python\)")
        self.assertMalformed("{true 1 1 2}", r"Duplicate map key 1 \(equal to True in Python\)")
        self.assertMalformed("#{1 true}", r"Duplicate set member True \(equal to 1 in Python\)")
        self.assertEqual(decode("{1 :a 2.0 :b}"), {1: Keyword("a"), 2.0: Keyword("b")})

    def test_bad_tokens(self):
        self.assertMalformed("1.2.3", "Invalid number")
        self.assertMalformed('"open', "Unterminated string")
        self.assertMalformed('"\\q"', "Invalid escape")
        self.assertMalformed("\\xyz", "Invalid character literal")
        self.assertMalformed("::a", "Invalid keyword")
        self.assertMalformed("#1abc 2", "Invalid tag")

    def test_trailing_form(self):
        self.assertMalformed("1 2", "trailing form")

    def test_tag_without_form(self):
        self.assertMalformed("#user/SimpleRecord", "missing its form")
        self.assertMalformed("[#_]", "Unmatched delimiter")

    def test_reports_line_and_column(self):
        with self.assertRaises(MalformedLiteralError) as ctx:
            decode("[1\n  2\n  }")
        self.assertEqual((ctx.exception.line, ctx.exception.column), (3, 3))
        self.assertIn("line 3, column 3", str(ctx.exception))

    def test_depth_limit(self):
        text = "[" * 20 + "]" * 20
        self.assertEqual(decode(text, max_depth=30), decode(text))
        with self.assertRaisesRegex(MalformedLiteralError, "nesting depth"):
            decode(text, max_depth=10)

    def test_rejects_bytes(self):
        with self.assertRaises(TypeError):
            decode(b"1")


class TaggedLiteralTests(unittest.TestCase):
    def setUp(self):
        self.registry = registry_with(SimpleRecord, Point, Shape)

    def test_builtin_inst_and_uuid(self):
        self.assertEqual(
            decode('#inst "1985-04-12T23:20:50.52Z"'),
            datetime(1985, 4, 12, 23, 20, 50, 520000, tzinfo=timezone.utc),
        )
        self.assertEqual(
            decode('#uuid "f81d4fae-7dec-11d0-a765-00a0c91e6bf6"'),
            uuid.UUID("f81d4fae-7dec-11d0-a765-00a0c91e6bf6"),
        )

    def test_inst_without_offset_is_utc(self):
        self.assertEqual(decode('#inst "2020-01-02"'), datetime(2020, 1, 2, tzinfo=timezone.utc))

    def test_record_literal(self):
        self.assertEqual(decode("#user/SimpleRecord {:a 42}", self.registry), SimpleRecord(a=42))
        self.assertEqual(decode("#user/SimpleRecord{:a 42}", self.registry), SimpleRecord(a=42))

    def test_nested_tags_resolve_inner_first(self):
        calls = []
        registry = TagRegistry()
        registry.register("t/inner", lambda form: calls.append(("inner", form)) or form * 2)
        registry.register("t/outer", lambda form: calls.append(("outer", form)) or [form])

        self.assertEqual(decode("#t/outer #t/inner 21", registry), [42])
        self.assertEqual(calls, [("inner", 21), ("outer", 42)])

    def test_nested_records(self):
        text = "#geo/Shape {:name \"tri\" :origin #geo/Point {:x 0.0 :y 0.0} :vertices [#geo/Point {:x 1.5 :y -2.0}]}"
        self.assertEqual(
            decode(text, self.registry),
            Shape(name="tri", origin=Point(x=0.0, y=0.0), vertices=[Point(x=1.5, y=-2.0)]),
        )

    def test_unknown_tag_raises(self):
        with self.assertRaises(UnknownTagError) as ctx:
            decode("#user/Missing {:a 1}", self.registry)
        self.assertEqual(ctx.exception.tag, "user/Missing")

    def test_unknown_inner_tag_fails_whole_decode(self):
        with self.assertRaises(UnknownTagError):
            decode("#user/SimpleRecord {:a #user/Missing 1}", self.registry)

    def test_builtins_are_unknown_in_an_empty_registry(self):
        with self.assertRaises(UnknownTagError):
            decode('#inst "2020-01-01"', TagRegistry())

    def test_default_fallback_receives_tag_and_value(self):
        value = decode("#x/y [1 2]", TagRegistry(), default=lambda tag, form: (tag, form))
        self.assertEqual(value, ("x/y", (1, 2)))

    def test_preserve_policy_returns_tagged_literal(self):
        value = decode("#x/y [1 #x/z 2]", TagRegistry(), policy=UnknownTagPolicy.PRESERVE)
        self.assertEqual(value, TaggedLiteral("x/y", Vector((1, TaggedLiteral("x/z", 2)))))

    def test_constructor_rejections(self):
        bad = [
            "#user/SimpleRecord {:a 1 :b 2}",
            "#user/SimpleRecord {}",
            "#user/SimpleRecord [1]",
            '#user/SimpleRecord {:a "x"}',
            "#inst 5",
            '#uuid "nope"',
        ]
        for text in bad:
            with self.subTest(text=text):
                with self.assertRaises(ConstructorArityError):
                    decode(text, self.registry)

    def test_zero_argument_reader_with_empty_payload(self):
        registry = TagRegistry()
        registry.register("t/zero", lambda: "made")
        self.assertEqual(decode("#t/zero {}", registry), "made")
        self.assertEqual(decode("#t/zero nil", registry), "made")
        self.assertEqual(decode("[#t/zero {} #t/zero nil]", registry), ["made", "made"])

    def test_zero_argument_reader_rejects_a_payload(self):
        registry = TagRegistry()
        registry.register("t/zero", lambda: "made")
        for text in ("#t/zero {:a 1}", "#t/zero []", "#t/zero 0"):
            with self.subTest(text=text):
                with self.assertRaises(ConstructorArityError) as ctx:
                    decode(text, registry)
                self.assertEqual(ctx.exception.tag, "t/zero")
                self.assertIsInstance(ctx.exception.cause, TypeError)

    def test_other_reader_errors_propagate(self):
        def boom(form):
            raise RuntimeError("boom")

        registry = TagRegistry()
        registry.register("t/boom", boom)
        with self.assertRaisesRegex(RuntimeError, "boom"):
            decode("#t/boom 1", registry)
