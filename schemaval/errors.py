"""Fatal failures raised by schemaval.

Schema non-conformance is never raised; it is collected as violations.
The exceptions below signal that the schema or the environment is broken.
"""

from typing import Optional


class SchemaValError(Exception):
    """
    Base class for fatal schemaval failures.

    Attributes:
        message: Human-readable error description
        context: Optional context about where the error occurred
        cause: Optional underlying exception that caused this error
    """

    def __init__(self, message: str, context: Optional[str] = None,
                 cause: Optional[Exception] = None) -> None:
        self.message = message
        self.context = context
        self.cause = cause
        full_message = message
        if context:
            full_message = f"{message} (context: {context})"
        super().__init__(full_message)


class SchemaResolutionError(SchemaValError):
    """Raised when a schema locator cannot be fetched, decoded or resolved."""


class SchemaShapeError(SchemaValError):
    """Raised when a schema node cannot be interpreted."""


class TypePredicateError(SchemaValError):
    """Raised when a type predicate fails with an exception of its own."""

    def __init__(self, type_name: str, cause: Exception) -> None:
        self.type_name = type_name
        super().__init__(f"Type predicate for '{type_name}' raised {type(cause).__name__}: {cause}",
                         context=type_name, cause=cause)
