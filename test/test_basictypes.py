"""Tests for the basic type predicates."""

import os
import sys
import unittest
from collections import OrderedDict
from decimal import Decimal
from fractions import Fraction

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from schemaval.basictypes import BASIC_TYPE_VALIDATIONS, build_type_table, kind_of, merge_fn


class TestBasicTypes(unittest.TestCase):

    def check(self, type_name, accepted, rejected):
        predicate = BASIC_TYPE_VALIDATIONS[type_name]
        for value in accepted:
            with self.subTest(type_name=type_name, value=value):
                self.assertTrue(predicate(value))
        for value in rejected:
            with self.subTest(type_name=type_name, value=value):
                self.assertFalse(predicate(value))

    def test_object(self):
        self.check("object", [{}, {"a": 1}, OrderedDict(a=1)], [[], "a", None, 1])

    def test_array(self):
        self.check("array", [[], [1], (1, 2), {1, 2}, frozenset()], [{}, "ab", None, 1])

    def test_string(self):
        self.check("string", ["", "abc"], [b"abc", 1, None, ["a"]])

    def test_number(self):
        self.check("number", [0, -1, 1.5, Decimal("2.5"), Fraction(1, 3)], [True, False, "1", None])

    def test_integer(self):
        self.check("integer", [0, -7, 10 ** 20], [1.0, True, Decimal("1"), "1", None])

    def test_boolean(self):
        self.check("boolean", [True, False], [0, 1, "true", None])

    def test_null(self):
        self.check("null", [None], [0, "", False, [], {}])

    def test_any(self):
        self.check("any", [None, 0, "", [], {}, object()], [])


class TestTypeTable(unittest.TestCase):

    def test_merge_fn(self):
        merged = merge_fn(lambda x: x == 1, lambda x: x == 2)
        self.assertTrue(merged(1))
        self.assertTrue(merged(2))
        self.assertFalse(merged(3))

    def test_default_table_is_a_copy(self):
        table = build_type_table()
        table["string"] = lambda _: False
        self.assertTrue(BASIC_TYPE_VALIDATIONS["string"]("x"))

    def test_extra_validators_are_merged(self):
        table = build_type_table({"integer": lambda x: isinstance(x, Decimal), "uuid": lambda x: len(x) == 36})
        self.assertTrue(table["integer"](3))
        self.assertTrue(table["integer"](Decimal("3")))
        self.assertFalse(table["integer"]("3"))
        self.assertTrue(table["uuid"]("0" * 36))

    def test_passthrough_replaces(self):
        table = build_type_table({"integer": lambda x: x == "one"}, {"integer": lambda x: x == "two"})
        self.assertFalse(table["integer"](1))
        self.assertFalse(table["integer"]("one"))
        self.assertTrue(table["integer"]("two"))


class TestKindOf(unittest.TestCase):

    def test_kinds(self):
        self.assertEqual(kind_of(None), "null")
        self.assertEqual(kind_of(True), "boolean")
        self.assertEqual(kind_of("a"), "string")
        self.assertEqual(kind_of(1), "integer")
        self.assertEqual(kind_of(1.5), "number")
        self.assertEqual(kind_of({}), "object")
        self.assertEqual(kind_of([]), "array")
        self.assertEqual(kind_of(b"x"), "bytes")


if __name__ == '__main__':
    unittest.main()
