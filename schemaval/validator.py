"""Validates JSON-like instances against JSON Schema (draft 3 style) documents.

The validator walks schema and instance together. Every schema node is
classified into exactly one shape (see `SchemaShape`) and handed to the
matching strategy:

- integer/number nodes: numeric constraints
- bare type names: shorthand for {"type": name}
- union types: the instance must satisfy at least one candidate
- $ref nodes: delegate to the referenced schema
- enum nodes: value membership
- named types: object, array, string, or plain type checks
- nodes without a type: treated as objects

Violations are collected into a `ValidationContext` rather than raised.
Exceptions are reserved for broken schemas and environments.
"""

import enum
import logging
import operator
import re
from collections.abc import Mapping, Set
from decimal import Decimal
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple, Union

from schemaval.basictypes import (TypePredicate, TypeTable, build_type_table, is_number, is_object,
                                  is_sequence, kind_of)
from schemaval.context import ValidationContext, Violation
from schemaval.errors import SchemaShapeError, TypePredicateError
from schemaval.schemastore import SchemaStore, default_store, resolve_fragment

logger = logging.getLogger(__name__)

Schema = Union[str, Dict[str, Any]]

DEFAULT_TYPE = "object"
MODES = ("boolean", "collect")


class SchemaShape(enum.Enum):
    """The closed set of schema node shapes, in dispatch priority order."""
    VALUE = "value"
    SIMPLE = "simple"
    UNION = "union"
    REF = "ref"
    ENUM = "enum"
    NAMED = "named"
    DEFAULT = "default"


def schema_shape(schema: Any) -> SchemaShape:
    """Classifies a schema node.

    Raises:
        SchemaShapeError: If the node is neither a mapping nor a type name.
    """
    if isinstance(schema, str):
        return SchemaShape.SIMPLE
    if not isinstance(schema, Mapping):
        raise SchemaShapeError(f"Schema must be an object or a type name, got {type(schema).__name__}")
    schema_type = schema.get("type")
    if schema_type in ("integer", "number"):
        return SchemaShape.VALUE
    if isinstance(schema_type, (list, tuple)):
        return SchemaShape.UNION
    if "$ref" in schema:
        return SchemaShape.REF
    if "enum" in schema:
        return SchemaShape.ENUM
    if isinstance(schema_type, str):
        return SchemaShape.NAMED
    if schema_type is None:
        return SchemaShape.DEFAULT
    raise SchemaShapeError(f"Invalid 'type' {schema_type!r}")


def is_required(schema: Any) -> bool:
    """Resolves requiredness: "required" takes precedence over "optional".

    Properties are not required by default. Any "required" other than null
    or false makes the node required, including a list of property names.
    """
    if not isinstance(schema, Mapping):
        return False
    required = schema.get("required")
    if required is not None:
        return _is_truthy(required)
    return schema.get("optional") is False


def freeze(value: Any) -> Any:
    """Returns a hashable stand-in that compares the way JSON values do."""
    if isinstance(value, bool):
        return ("boolean", value)
    if is_object(value):
        return ("object", frozenset((k, freeze(v)) for k, v in value.items()))
    if isinstance(value, Set):
        return ("set", frozenset(freeze(v) for v in value))
    if is_sequence(value):
        return ("array", tuple(freeze(v) for v in value))
    return value


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> "re.Pattern[str]":
    if not isinstance(pattern, str):
        raise SchemaShapeError(f"Pattern must be a string, got {type(pattern).__name__}")
    try:
        return re.compile(pattern)
    except re.error as e:
        raise SchemaShapeError(f"Invalid regular expression {pattern!r}", context=str(e), cause=e) from e


def _alternate_key(name: Any) -> Any:
    if isinstance(name, bool):
        return None
    if isinstance(name, int):
        return str(name)
    if isinstance(name, str) and name.isascii() and name.isdigit():
        return int(name)
    return None


def _has_key(instance: Any, name: Any) -> bool:
    """True if the mapping holds `name` as given or as its string/integer twin."""
    if not is_object(instance):
        return False
    if name in instance:
        return True
    alternate = _alternate_key(name)
    return alternate is not None and alternate in instance


def _is_schema(value: Any) -> bool:
    return isinstance(value, (Mapping, str))


def _is_truthy(value: Any) -> bool:
    return value is not None and value is not False


def _remainder(value: Any, divisor: Any) -> Any:
    # Decimal does not mix with float arithmetic
    if isinstance(value, Decimal) != isinstance(divisor, Decimal):
        value, divisor = Decimal(str(value)), Decimal(str(divisor))
    return value % divisor


class SchemaValidator:
    """Validates instances against schemas for one top-level call.

    Holds what stays fixed for the call: the type predicate table, the
    schema store and the root schema that fragment-only references resolve
    against. Per-walk state lives in the `ValidationContext` that is passed
    to every method.
    """

    def __init__(self, validators: Optional[TypeTable] = None, store: Optional[SchemaStore] = None,
                 root_schema: Any = None):
        self.validators = validators if validators is not None else build_type_table()
        self.store = store if store is not None else default_store()
        self.root_schema = root_schema
        self._strategies = {
            SchemaShape.VALUE: self._validate_value,
            SchemaShape.SIMPLE: self._validate_simple,
            SchemaShape.UNION: self._validate_union,
            SchemaShape.REF: self._validate_ref,
            SchemaShape.ENUM: self._validate_enum,
            SchemaShape.NAMED: self._validate_named,
            SchemaShape.DEFAULT: self._validate_default,
        }

    def validate(self, schema: Schema, instance: Any, context: ValidationContext) -> None:
        """Dispatches a schema node to its strategy, recording violations in `context`."""
        self._strategies[schema_shape(schema)](schema, instance, context)

    def type_predicate(self, type_name: str) -> TypePredicate:
        try:
            return self.validators[type_name]
        except KeyError:
            raise SchemaShapeError(f"Unknown type '{type_name}'",
                                   context=f"known types: {', '.join(sorted(self.validators))}") from None

    def check_type(self, type_name: str, instance: Any) -> bool:
        predicate = self.type_predicate(type_name)
        try:
            return bool(predicate(instance))
        except Exception as e:
            raise TypePredicateError(type_name, e) from e

    def check_basic_type(self, schema: Dict[str, Any], instance: Any, context: ValidationContext) -> bool:
        """Checks the instance kind against the node's type(s).

        Absent (None) instances of nodes that are not required always pass.
        """
        if instance is None and not is_required(schema):
            return True
        schema_type = schema.get("type") or DEFAULT_TYPE
        types = list(schema_type) if isinstance(schema_type, (list, tuple)) else [schema_type]
        if any(self.check_type(t, instance) for t in types):
            return True
        context.invalid("type", {"expected": [str(t) for t in types], "actual": kind_of(instance)})
        return False

    def common_validate(self, schema: Dict[str, Any], instance: Any, context: ValidationContext) -> None:
        self.check_basic_type(schema, instance, context)

    def resolve_ref(self, locator: Any) -> Tuple[Any, Any]:
        """Returns the referenced schema and the document it belongs to.

        Fragment-only locators point into the current root document; all
        others are loaded through the store.
        """
        if not isinstance(locator, str):
            raise SchemaShapeError(f"$ref must be a string, got {type(locator).__name__}")
        document_locator, _, fragment = locator.partition("#")
        if not document_locator:
            return resolve_fragment(self.root_schema, fragment, locator), self.root_schema
        document = self.store.load(document_locator)
        if not fragment:
            return document, document
        return self.store.load(locator), document

    def _validate_default(self, schema: Dict[str, Any], instance: Any, context: ValidationContext) -> None:
        self.validate(dict(schema, type=DEFAULT_TYPE), instance, context)

    def _validate_simple(self, schema: str, instance: Any, context: ValidationContext) -> None:
        # A bare type name is a complete schema; this lets unions list
        # "integer" next to full object schemas.
        self.validate({"type": schema}, instance, context)

    def _validate_ref(self, schema: Dict[str, Any], instance: Any, context: ValidationContext) -> None:
        referenced, document = self.resolve_ref(schema["$ref"])
        if document is self.root_schema:
            self.validate(referenced, instance, context)
            return
        # refs inside the loaded document resolve against that document
        SchemaValidator(self.validators, self.store, root_schema=document).validate(referenced, instance, context)

    def _validate_union(self, schema: Dict[str, Any], instance: Any, context: ValidationContext) -> None:
        # Each candidate runs against a fresh context so failing branches
        # leave no trace. When all fail, the smallest error set is reported.
        candidate_errors: List[List[Violation]] = []
        for candidate in schema["type"]:
            branch = ValidationContext()
            self.validate(candidate, instance, branch)
            if branch.is_valid:
                return
            candidate_errors.append(branch.errors)
        errors = min(candidate_errors, key=len) if candidate_errors else []
        logger.debug("No union candidate matched at %s; reporting %d errors", context.path, len(errors))
        context.invalid("matches-no-type-in-union", {"instance": instance, "errors": errors})

    def _validate_enum(self, schema: Dict[str, Any], instance: Any, context: ValidationContext) -> None:
        members = schema["enum"]
        if not isinstance(members, (list, tuple)):
            raise SchemaShapeError(f"'enum' must be an array, got {type(members).__name__}")
        frozen = freeze(instance)
        if not any(freeze(member) == frozen for member in members):
            context.invalid("value-not-in-enum", {"enum": list(members), "value": instance})

    def _validate_named(self, schema: Dict[str, Any], instance: Any, context: ValidationContext) -> None:
        schema_type = schema["type"]
        if schema_type == "object":
            self._validate_object(schema, instance, context)
        elif schema_type == "array":
            self._validate_array(schema, instance, context)
        elif schema_type == "string":
            self._validate_string(schema, instance, context)
        else:
            self.common_validate(schema, instance, context)

    def _absorb_properties(self, pattern_properties: Any, instance: Any) -> Dict[Any, Schema]:
        """Synthesizes a property schema for every instance key matching a pattern."""
        if not pattern_properties or not is_object(instance):
            return {}
        if not isinstance(pattern_properties, Mapping):
            raise SchemaShapeError("'patternProperties' must be an object")
        matches: Dict[Any, Schema] = {}
        for pattern, property_schema in pattern_properties.items():
            regex = compile_pattern(str(pattern))
            for key in instance:
                if regex.search(str(key)):
                    matches[key] = property_schema
        return matches

    def _validate_object(self, schema: Dict[str, Any], instance: Any, context: ValidationContext) -> None:
        self.common_validate(schema, instance, context)

        parents = schema.get("extends")
        if parents is not None:
            for parent in (parents if isinstance(parents, (list, tuple)) else [parents]):
                self.validate(parent, instance, context)

        required = schema.get("required")
        if isinstance(required, (list, tuple)):
            for property_name in required:
                if not _has_key(instance, property_name):
                    context.invalid("required", ref=property_name)

        properties = schema.get("properties") or {}
        if not isinstance(properties, Mapping):
            raise SchemaShapeError("'properties' must be an object")
        properties_schema = dict(properties)
        properties_schema.update(self._absorb_properties(schema.get("patternProperties"), instance))

        for property_name, property_schema in properties_schema.items():
            prop_exists = is_object(instance) and property_name in instance
            if not prop_exists and is_required(property_schema):
                context.invalid("required", ref=property_name)

        if not is_object(instance):
            context.invalid("objects-must-be-maps", {"properties": list(properties_schema)})
            return

        additional_schema = schema.get("additionalProperties")
        for property_name, value in instance.items():
            if property_name in properties_schema:
                property_schema = properties_schema[property_name]
            elif _is_schema(additional_schema):
                property_schema = additional_schema
            else:
                continue
            if isinstance(property_schema, Mapping):
                requires = property_schema.get("requires")
                if requires is not None and _is_truthy(value) and instance.get(requires) is None:
                    context.invalid("required", {"required_by": property_name}, ref=requires)
            if value is None and not is_required(property_schema):
                continue
            with context.walk_in(property_name):
                self.validate(property_schema, value, context)

        if additional_schema is False:
            additionals = [key for key in instance if key not in properties_schema]
            if additionals:
                context.invalid("additional-properties-not-allowed", {"properties": additionals})

    def _validate_array(self, schema: Dict[str, Any], instance: Any, context: ValidationContext) -> None:
        self.common_validate(schema, instance, context)
        if not is_sequence(instance):
            return

        total = len(instance)
        for key, violated in (("minItems", operator.lt), ("maxItems", operator.gt)):
            expected = schema.get(key)
            if expected is not None and violated(total, expected):
                context.invalid(key, {"expected": expected, "actual": total})

        if schema.get("uniqueItems"):
            seen = set()
            for item in instance:
                frozen = freeze(item)
                if frozen in seen:
                    context.invalid("uniqueItems", {"duplicate": item})
                seen.add(frozen)

        # Arrays are checked as objects keyed by index, so tuple typing,
        # homogeneous typing and extra elements share the object rules.
        items_schema = schema.get("items")
        if items_schema is None:
            return
        obj_array = dict(enumerate(instance))
        if isinstance(items_schema, (list, tuple)):
            obj_schema = dict(schema, type="object", properties=dict(enumerate(items_schema)))
            obj_schema.pop("items")
            obj_schema.pop("extends", None)
        elif _is_schema(items_schema):
            obj_schema = {"type": "object", "additionalProperties": items_schema}
        else:
            raise SchemaShapeError(f"'items' must be a schema or an array of schemas, got {type(items_schema).__name__}")
        self._validate_object(obj_schema, obj_array, context)

    def _validate_string(self, schema: Dict[str, Any], instance: Any, context: ValidationContext) -> None:
        self.common_validate(schema, instance, context)
        if not isinstance(instance, str):
            return
        max_length = schema.get("maxLength")
        if max_length is not None and len(instance) > max_length:
            context.invalid("max-length-exceeded", {"maxLength": max_length, "actual": len(instance)})
        min_length = schema.get("minLength")
        if min_length is not None and len(instance) < min_length:
            context.invalid("min-length-not-reached", {"minLength": min_length, "actual": len(instance)})
        pattern = schema.get("pattern")
        if pattern is not None and not compile_pattern(pattern).search(instance):
            context.invalid("pattern-not-matched", {"pattern": pattern, "actual": instance})

    @staticmethod
    def _exclusive_bound(flag: Any, limit: Any, keyword: str, limit_keyword: str) -> Any:
        """Returns the exclusive bound for a boolean flag plus limit, or a numeric draft-6 bound."""
        if flag is True:
            if limit is None:
                raise SchemaShapeError(f"'{keyword}' needs '{limit_keyword}'")
            return limit
        if is_number(flag):
            return flag
        raise SchemaShapeError(f"'{keyword}' must be a boolean or a number, got {flag!r}")

    def _validate_value(self, schema: Dict[str, Any], instance: Any, context: ValidationContext) -> None:
        self.common_validate(schema, instance, context)
        if not is_number(instance):
            return

        maximum = schema.get("maximum")
        if maximum is not None and instance > maximum:
            context.invalid("value-greater-than-maximum", {"maximum": maximum, "value": instance})

        minimum = schema.get("minimum")
        if minimum is not None and instance < minimum:
            context.invalid("value-lower-than-minimum", {"minimum": minimum, "value": instance})

        exclusive_maximum = schema.get("exclusiveMaximum")
        if exclusive_maximum is not None and exclusive_maximum is not False:
            bound = self._exclusive_bound(exclusive_maximum, maximum, "exclusiveMaximum", "maximum")
            if not instance < bound:
                context.invalid("value-greater-or-equal-than-maximum",
                                {"exclusiveMaximum": exclusive_maximum, "maximum": bound, "value": instance})

        exclusive_minimum = schema.get("exclusiveMinimum")
        if exclusive_minimum is not None and exclusive_minimum is not False:
            bound = self._exclusive_bound(exclusive_minimum, minimum, "exclusiveMinimum", "minimum")
            if not instance > bound:
                context.invalid("value-lower-or-equal-than-minimum",
                                {"exclusiveMinimum": exclusive_minimum, "minimum": bound, "value": instance})

        divisible_by = schema.get("divisibleBy")
        if divisible_by is not None:
            if divisible_by == 0:
                raise SchemaShapeError("'divisibleBy' must not be zero")
            if _remainder(instance, divisible_by) != 0:
                context.invalid("value-not-divisible-by", {"divisibleBy": divisible_by, "value": instance})


def validate(schema: Schema, instance: Any, *, extra_validators: Optional[Dict[str, TypePredicate]] = None,
             passthrough_validators: Optional[Dict[str, TypePredicate]] = None, mode: str = "boolean",
             store: Optional[SchemaStore] = None) -> Union[bool, List[Violation]]:
    """Validates an instance against a schema.

    Args:
        schema: The schema document (a mapping, or a bare type name)
        instance: The JSON-like value to validate
        extra_validators: Type predicates OR-merged into the built-in ones
        passthrough_validators: Type predicates used verbatim over the merged table
        mode: "boolean" for a pass/fail result, "collect" for the violation list
        store: Schema store for $ref resolution, defaults to the process-wide store

    Returns:
        True/False in boolean mode, the ordered list of violations in collect mode

    Raises:
        SchemaValError: If the schema is malformed, a reference cannot be
            resolved, or a type predicate fails
    """
    if mode not in MODES:
        raise ValueError(f"mode must be one of {MODES}, got {mode!r}")
    validator = SchemaValidator(build_type_table(extra_validators, passthrough_validators), store,
                                root_schema=schema)
    context = ValidationContext()
    validator.validate(schema, instance, context)
    if mode == "collect":
        return context.errors
    return context.is_valid


def report_errors(schema: Schema, instance: Any, **options: Any) -> List[Violation]:
    """Returns all violations instead of a simple boolean."""
    return validate(schema, instance, mode="collect", **options)
