import tempfile
import unittest
from pathlib import Path

from adapters.data_readers import install_data_readers, load_data_readers, parse_data_readers, resolve_target
from core.errors import ReaderConfigError
from core.services.reader import decode
from core.services.registry import default_registry
from sample_records import Point, SimpleRecord, read_point

READERS = """
; tag -> target
{user/SimpleRecord sample_records:SimpleRecord
 geo/point         sample_records.read_point}
"""


def _write(path: Path, content: str):
    path.write_text(content, encoding="utf-8")


class ParseDataReadersTests(unittest.TestCase):
    def test_parses_entries_in_order(self):
        result = parse_data_readers(READERS)
        self.assertEqual(
            [(e.tag, e.target) for e in result.entries],
            [("user/SimpleRecord", "sample_records:SimpleRecord"), ("geo/point", "sample_records.read_point")],
        )

    def test_top_level_must_be_a_map(self):
        with self.assertRaisesRegex(ReaderConfigError, "must be a map"):
            parse_data_readers("[a/b c.d]")

    def test_entries_must_be_symbols(self):
        with self.assertRaisesRegex(ReaderConfigError, "symbol -> symbol"):
            parse_data_readers('{:a/b "c.d"}')

    def test_tags_must_be_namespaced(self):
        with self.assertRaises(ReaderConfigError):
            parse_data_readers("{point sample_records.read_point}")

    def test_invalid_edn(self):
        with self.assertRaisesRegex(ReaderConfigError, "<string>"):
            parse_data_readers("{a/b")

    def test_tags_inside_the_file_are_rejected(self):
        with self.assertRaises(ReaderConfigError):
            parse_data_readers('{a/b #inst "2020-01-01"}')


class ResolveTargetTests(unittest.TestCase):
    def test_colon_and_dot_forms(self):
        self.assertIs(resolve_target("sample_records:SimpleRecord"), SimpleRecord)
        self.assertIs(resolve_target("sample_records.read_point"), read_point)

    def test_missing_module(self):
        with self.assertRaisesRegex(ReaderConfigError, "Cannot import"):
            resolve_target("no_such_module_xyz:thing")

    def test_missing_attribute(self):
        with self.assertRaisesRegex(ReaderConfigError, "has no attribute"):
            resolve_target("sample_records:Missing")

    def test_bare_name(self):
        with self.assertRaises(ReaderConfigError):
            resolve_target("sample_records")


class InstallDataReadersTests(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.base = Path(self.tmpdir.name)
        self.registry = default_registry()

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_missing_file_raises(self):
        with self.assertRaisesRegex(ReaderConfigError, "not found"):
            load_data_readers(self.base / "missing.edn")

    def test_installs_records_and_functions(self):
        path = self.base / "data_readers.edn"
        _write(path, READERS)

        installed = install_data_readers(path, self.registry)

        self.assertEqual(installed, ["user/SimpleRecord", "geo/point"])
        self.assertEqual(decode("#user/SimpleRecord {:a 42}", self.registry), SimpleRecord(a=42))
        self.assertEqual(decode("#geo/point [1.5 2.5]", self.registry), Point(x=1.5, y=2.5))

    def test_non_callable_target(self):
        path = self.base / "data_readers.edn"
        _write(path, "{t/three sample_records:NOT_CALLABLE}")
        with self.assertRaisesRegex(ReaderConfigError, "not callable"):
            install_data_readers(path, self.registry)

    def test_duplicate_tag_needs_replace(self):
        path = self.base / "data_readers.edn"
        _write(path, READERS)
        install_data_readers(path, self.registry)
        with self.assertRaisesRegex(ReaderConfigError, "already registered"):
            install_data_readers(path, self.registry)
        self.assertEqual(install_data_readers(path, self.registry, replace=True), ["user/SimpleRecord", "geo/point"])
