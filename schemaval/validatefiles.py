"""Validates JSON instance files against schema files.

This module wraps the schema validator for files: it loads a schema
document, reads one or many instances from JSON or JSON Lines files and
reports a result per instance.
"""

import json
import logging
import os
import sys
from typing import Any, List, Optional, Tuple

from schemaval.context import Violation
from schemaval.schemastore import SchemaStore
from schemaval.validator import report_errors

logger = logging.getLogger(__name__)


class ValidationResult:
    """Result of validating a JSON instance against a schema."""

    def __init__(self, is_valid: bool, violations: Optional[List[Violation]] = None, instance_path: Optional[str] = None):
        self.is_valid = is_valid
        self.violations = violations or []
        self.instance_path = instance_path

    def __str__(self) -> str:
        if self.is_valid:
            return "✓ Valid" + (f": {self.instance_path}" if self.instance_path else "")
        prefix = f"{self.instance_path}: " if self.instance_path else ""
        return f"✗ Invalid: {prefix}" + "; ".join(str(v) for v in self.violations)

    def __repr__(self) -> str:
        return f"ValidationResult(is_valid={self.is_valid}, violations={self.violations})"

    def to_dict(self) -> dict:
        return {
            "instance": self.instance_path,
            "valid": self.is_valid,
            "violations": [v.to_dict() for v in self.violations],
        }


def store_for_schema_file(schema_file: str, search_paths: Optional[List[str]] = None) -> SchemaStore:
    """Creates a store that resolves relative $refs next to the schema file first."""
    paths = [os.path.dirname(os.path.abspath(schema_file))]
    paths.extend(search_paths or [])
    return SchemaStore(search_paths=paths)


def load_instances(instance_file: str, schema: Any) -> Tuple[List[Any], List[str]]:
    """Reads instances from a JSON document or a JSON Lines file.

    A top-level JSON array is split into its elements unless the schema
    itself describes an array.
    """
    with open(instance_file, 'r', encoding='utf-8') as f:
        content = f.read().strip()

    schema_is_array = isinstance(schema, dict) and schema.get('type') == 'array'
    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        instances = []
        instance_paths = []
        for i, line in enumerate(content.split('\n')):
            line = line.strip()
            if not line:
                continue
            # a line that does not decode makes the whole file unreadable
            instances.append(json.loads(line))
            instance_paths.append(f"{instance_file}:{i+1}")
        return instances, instance_paths

    if isinstance(data, list) and not schema_is_array:
        return data, [f"{instance_file}[{i}]" for i in range(len(data))]
    return [data], [instance_file]


def validate_file(instance_file: str, schema_file: str, store: Optional[SchemaStore] = None) -> List[ValidationResult]:
    """Validates JSON instance file(s) against a schema file.

    Args:
        instance_file: Path to JSON file (single object, array, or JSONL)
        schema_file: Path to the schema document
        store: Schema store for $ref resolution, defaults to one rooted at the schema file

    Returns:
        List of ValidationResult for each instance in the file
    """
    if store is None:
        store = store_for_schema_file(schema_file)
    schema = store.load(os.path.abspath(schema_file))

    instances, instance_paths = load_instances(instance_file, schema)
    logger.debug("Validating %d instance(s) from %s", len(instances), instance_file)
    results = []
    for instance, path in zip(instances, instance_paths):
        violations = report_errors(schema, instance, store=store)
        results.append(ValidationResult(is_valid=not violations, violations=violations, instance_path=path))
    return results


def validate_json_instances(
    input_files: List[str],
    schema_file: str,
    search_paths: Optional[List[str]] = None,
    verbose: bool = False,
    collect: bool = False
) -> Tuple[int, int]:
    """Validates multiple JSON instance files against a schema.

    Args:
        input_files: List of JSON file paths to validate
        schema_file: Path to schema file
        search_paths: Extra directories for resolving relative $refs
        verbose: Whether to print validation results
        collect: Print results as JSON with the full violation lists

    Returns:
        Tuple of (valid_count, invalid_count)
    """
    store = store_for_schema_file(schema_file, search_paths)
    valid_count = 0
    invalid_count = 0

    for input_file in input_files:
        for result in validate_file(input_file, schema_file, store):
            if result.is_valid:
                valid_count += 1
            else:
                invalid_count += 1
            if collect:
                print(json.dumps(result.to_dict(), default=str))
            elif verbose:
                print(result)

    return valid_count, invalid_count


# Command entry point for schemaval CLI
def validate(
    input: List[str],
    schema: str,
    search_path: Optional[List[str]] = None,
    collect: bool = False,
    quiet: bool = False
) -> None:
    """Validates JSON instances against a schema.

    Args:
        input: List of JSON files to validate
        schema: Path to the schema file
        search_path: Extra directories for resolving relative $refs
        collect: Print each result as JSON including all violations
        quiet: Suppress output, exit with code 0 if valid, 1 if invalid
    """
    valid_count, invalid_count = validate_json_instances(
        input_files=input,
        schema_file=schema,
        search_paths=search_path,
        verbose=not quiet,
        collect=collect and not quiet
    )

    if not quiet and not collect:
        total = valid_count + invalid_count
        print(f"\nValidation summary: {valid_count}/{total} instances valid")

    if invalid_count > 0:
        sys.exit(1)


# Command entry point for schemaval CLI
def show_schema(locator: str, search_path: Optional[List[str]] = None) -> None:
    """Prints the schema a $ref locator resolves to."""
    store = SchemaStore(search_paths=search_path)
    print(json.dumps(store.load(locator), indent=2))
