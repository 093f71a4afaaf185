"""Basic type registry.

Maps primitive type names to predicates. Callers may broaden the built-in
checks with extra predicates (merged by logical OR) or hand in a complete
table that is used verbatim.
"""

import numbers
from collections.abc import Mapping, Set
from decimal import Decimal
from typing import Any, Callable, Dict, Optional

TypePredicate = Callable[[Any], bool]
TypeTable = Dict[str, TypePredicate]


def is_object(value: Any) -> bool:
    return isinstance(value, Mapping)


def is_sequence(value: Any) -> bool:
    """Ordered sequences that positional array keywords apply to."""
    return isinstance(value, (list, tuple))


def is_array(value: Any) -> bool:
    return is_sequence(value) or isinstance(value, Set)


def is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, (numbers.Real, Decimal))


def is_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, numbers.Integral)


BASIC_TYPE_VALIDATIONS: TypeTable = {
    "object": is_object,
    "array": is_array,
    "string": lambda value: isinstance(value, str),
    "number": is_number,
    "integer": is_integer,
    "boolean": lambda value: isinstance(value, bool),
    "null": lambda value: value is None,
    "any": lambda value: True,
}


def merge_fn(a: TypePredicate, b: TypePredicate) -> TypePredicate:
    """Merges two predicates into one which ORs their results."""
    def merged(value: Any) -> bool:
        return bool(a(value) or b(value))
    return merged


def build_type_table(extra_validators: Optional[Dict[str, TypePredicate]] = None,
                     passthrough_validators: Optional[Dict[str, TypePredicate]] = None) -> TypeTable:
    """Builds the predicate table for one validation call.

    Args:
        extra_validators: Predicates OR-merged key by key into the built-ins.
            Keys that are not built in are added as they are.
        passthrough_validators: Entries that replace the merged ones verbatim.

    Returns:
        A fresh dictionary; the built-in table is never modified.
    """
    table = dict(BASIC_TYPE_VALIDATIONS)
    if extra_validators:
        for name, predicate in extra_validators.items():
            table[name] = merge_fn(table[name], predicate) if name in table else predicate
    if passthrough_validators:
        table.update(passthrough_validators)
    return table


def kind_of(value: Any) -> str:
    """Names the observed kind of a value for type violations."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, str):
        return "string"
    if is_integer(value):
        return "integer"
    if is_number(value):
        return "number"
    if is_object(value):
        return "object"
    if is_array(value):
        return "array"
    return type(value).__name__
