"""Error taxonomy for structgen.

All errors derive from ValueError so callers that only care about bad input
can catch a single builtin type.
"""

from typing import Any


class StructGenError(ValueError):
    """Base error carrying an optional source position."""

    def __init__(
        self,
        message: str,
        line: int | None = None,
        column: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        if self.column is None:
            return f"{self.message} (line {self.line})"
        return f"{self.message} (line {self.line}, column {self.column})"

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"message": self.message}
        if self.line is not None:
            result["line"] = self.line
        if self.column is not None:
            result["column"] = self.column
        return result


class ValidationError(StructGenError):
    """Input failed the structural pre-check for its format."""


class ParseError(StructGenError):
    """The parser could not locate a required structural marker."""


class UnsupportedTypeError(StructGenError):
    """A raw type has no canonical counterpart.

    Not fatal: parsers catch it and fall back to the unknown kind.
    """

    def __init__(self, raw_type: str, context: str = ""):
        message = f"Unsupported type '{raw_type}'"
        if context:
            message = f"{message} ({context})"
        super().__init__(message)
        self.raw_type = raw_type
