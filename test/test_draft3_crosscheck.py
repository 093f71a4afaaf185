"""Cross-checks verdicts against the jsonschema package's draft 3 validator."""

import os
import sys
import unittest

import jsonschema

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from schemaval.validator import validate

# Cases where draft 3 semantics and ours are the same
CASES = [
    ({"type": "object", "properties": {"id": {"type": "number", "required": True}}}, [{}, {"id": 1}, {"id": "1"}]),
    ({"type": "string", "pattern": "^[a-zA-Z0-9]+$"}, ["foo-Bar", "fooBar", "123"]),
    ({"type": "number", "maximum": 5, "exclusiveMaximum": True}, [4, 5, 6]),
    ({"type": "integer", "minimum": 2, "exclusiveMinimum": True}, [2, 3]),
    ({"type": "object", "additionalProperties": False, "properties": {"id": {"type": "number"}}},
     [{"id": 1}, {"id": 1, "extra": "x"}]),
    ({"type": "object", "additionalProperties": {"type": "string"}}, [{"a": "x"}, {"a": 1}]),
    ({"type": ["integer", "string"]}, [5, "x", 1.5, [1]]),
    ({"type": "number", "divisibleBy": 2}, [4, 5]),
    ({"type": "array", "items": [{"type": "string"}, {"type": "number"}]}, [["a", 1], ["a", "b"], ["a"]]),
    ({"type": "array", "items": {"type": "integer"}, "minItems": 1, "maxItems": 2}, [[], [1], [1, 2, 3], [1, "a"]]),
    ({"type": "array", "uniqueItems": True}, [[1, 2, 3], [1, 2, 2], [{"a": 1}, {"a": 1}]]),
    ({"enum": ["a", "b"]}, ["a", "c"]),
    ({"type": "string", "minLength": 2, "maxLength": 3}, ["a", "ab", "abcd"]),
    ({"type": "object", "extends": {"properties": {"a": {"type": "string", "required": True}}}},
     [{}, {"a": "x"}, {"a": 1}]),
    ({"type": "object", "patternProperties": {"^x-": {"type": "integer"}}}, [{"x-a": 1}, {"x-a": "1"}, {"y": "1"}]),
    ({"type": "boolean"}, [True, 0, "true"]),
    ({"type": "any"}, [None, 1, "a"]),
]


class TestDraft3CrossCheck(unittest.TestCase):

    def test_verdicts_agree(self):
        for schema, instances in CASES:
            validator = jsonschema.Draft3Validator(schema)
            for instance in instances:
                with self.subTest(schema=schema, instance=instance):
                    self.assertEqual(validate(schema, instance), validator.is_valid(instance))


if __name__ == '__main__':
    unittest.main()
