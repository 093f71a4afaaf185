"""Validation context and violation records."""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional


class Violation:
    """A single recorded non-conformance between an instance and a schema."""

    def __init__(self, path: List[Any], error: str, data: Optional[Dict[str, Any]] = None,
                 ref: Any = None):
        self.path = path
        self.error = error
        self.data = data
        self.ref = ref

    def to_dict(self) -> Dict[str, Any]:
        """Returns the JSON-ready form, converting nested union errors as well."""
        result: Dict[str, Any] = {"path": list(self.path), "error": self.error}
        if self.data is not None:
            data = dict(self.data)
            if isinstance(data.get("errors"), list):
                data["errors"] = [e.to_dict() if isinstance(e, Violation) else e for e in data["errors"]]
            result["data"] = data
        if self.ref is not None:
            result["ref"] = self.ref
        return result

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Violation):
            return NotImplemented
        return (self.path, self.error, self.data, self.ref) == (other.path, other.error, other.data, other.ref)

    def __str__(self) -> str:
        location = "/".join(str(p) for p in self.path) or "#"
        return f"{self.error} at {location}"

    def __repr__(self) -> str:
        return f"Violation(path={self.path!r}, error={self.error!r}, data={self.data!r}, ref={self.ref!r})"


class ValidationContext:
    """
    Append-only violation log plus the instance path being descended.

    One context lives per top-level call and is passed explicitly through
    every recursive step. Union branches get their own throwaway context.
    """

    def __init__(self) -> None:
        self.errors: List[Violation] = []
        self.path: List[Any] = []

    def invalid(self, error: str, data: Optional[Dict[str, Any]] = None, ref: Any = None) -> None:
        """Records a violation at the current path, or at the child `ref` when given."""
        path = self.path + [ref] if ref is not None else list(self.path)
        self.errors.append(Violation(path, error, data, ref))

    @contextmanager
    def walk_in(self, segment: Any) -> Iterator[None]:
        """Steps into a child of the current instance for the duration of the block."""
        self.path.append(segment)
        try:
            yield
        finally:
            self.path.pop()

    @property
    def is_valid(self) -> bool:
        return not self.errors
