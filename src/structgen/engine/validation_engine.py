"""Validation Engine - cheap structural pre-checks for raw input.

The Validation Engine rejects input that is obviously malformed for its
format before any parser runs:
- empty or whitespace-only input, for every format
- JSON/YAML that does not decode
- SQL without CREATE TABLE or without a single column
- Protobuf without a message
- XML with unbalanced tags
- CSV without a header and a data line
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Callable

import yaml

from structgen.errors import ParseError
from structgen.schemas.base import InputFormat
from structgen.schemas.ddl import DDLParser
from structgen.schemas.xml_tags import CLOSE, EMPTY, OPEN, iter_events

# Leading comments are allowed before the first CREATE TABLE
_CREATE_TABLE = re.compile(
    r"^\s*(?:(?:--[^\n]*|#[^\n]*|/\*.*?\*/)\s*)*CREATE\s+(?:TEMP(?:ORARY)?\s+)?TABLE\b",
    re.IGNORECASE | re.DOTALL,
)
_MESSAGE = re.compile(r"\bmessage\b")


@dataclass
class ValidationResult:
    """Result of a validation operation."""

    is_valid: bool
    error: str | None = None
    line: int | None = None
    column: int | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def fail(cls, error: str, line: int | None = None, column: int | None = None) -> "ValidationResult":
        return cls(is_valid=False, error=error, line=line, column=column)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"is_valid": self.is_valid}
        if self.error is not None:
            result["error"] = self.error
        if self.line is not None:
            result["line"] = self.line
        if self.column is not None:
            result["column"] = self.column
        return result


class ValidationEngine:
    """Engine for validating raw input against its declared format.

    Every check is pure: no parser state outlives the call.
    """

    def __init__(self):
        self._checks: dict[InputFormat, Callable[[str], ValidationResult]] = {
            InputFormat.JSON: self.validate_json,
            InputFormat.YAML: self.validate_yaml,
            InputFormat.SQL: self.validate_sql,
            InputFormat.PROTO: self.validate_proto,
            InputFormat.XML: self.validate_xml,
            InputFormat.CSV: self.validate_csv,
        }

    def validate(self, content: str, input_format: InputFormat | str) -> ValidationResult:
        """Validate input text for a format.

        Args:
            content: Raw input text
            input_format: Format name or InputFormat

        Returns:
            ValidationResult; unknown formats are reported as invalid
        """
        if not content or not content.strip():
            return ValidationResult.fail("Input is empty")

        if not isinstance(input_format, InputFormat):
            try:
                input_format = InputFormat(str(input_format).lower())
            except ValueError:
                return ValidationResult.fail(f"Unsupported format: {input_format}")

        return self._checks[input_format](content)

    def validate_json(self, content: str) -> ValidationResult:
        try:
            json.loads(content)
        except json.JSONDecodeError as e:
            return ValidationResult.fail(f"Invalid JSON: {e.msg}", e.lineno, e.colno)
        return ValidationResult.ok()

    def validate_yaml(self, content: str) -> ValidationResult:
        try:
            yaml.safe_load(content)
        except yaml.YAMLError as e:
            mark = getattr(e, "problem_mark", None)
            if mark is None:
                return ValidationResult.fail(f"Invalid YAML: {e}")
            return ValidationResult.fail(f"Invalid YAML: {e}", mark.line + 1, mark.column + 1)
        return ValidationResult.ok()

    def validate_sql(self, content: str) -> ValidationResult:
        """Require a leading CREATE TABLE and at least one column.

        Table-level constraint entries (PRIMARY KEY (...), INDEX ..., etc.)
        do not count as columns.
        """
        if not _CREATE_TABLE.match(content):
            return ValidationResult.fail("SQL must start with CREATE TABLE")

        try:
            parser = DDLParser(content)
        except ParseError as e:
            return ValidationResult.fail(e.message, e.line, e.column)

        if parser.column_count() == 0:
            return ValidationResult.fail("CREATE TABLE contains no column definitions")
        return ValidationResult.ok()

    def validate_proto(self, content: str) -> ValidationResult:
        if not _MESSAGE.search(content):
            return ValidationResult.fail("Protobuf input must contain a message definition")
        return ValidationResult.ok()

    def validate_xml(self, content: str) -> ValidationResult:
        """Check that every open tag is closed by a tag of the same name.

        Declarations, processing instructions, comments, doctype and
        self-closing tags do not take part in the matching.
        """
        if not content.lstrip().startswith("<"):
            return ValidationResult.fail("XML must start with a declaration or an opening tag")

        stack: list[tuple[str, int]] = []
        seen_tag = False

        for event in iter_events(content):
            if event.kind == OPEN:
                seen_tag = True
                stack.append((event.value, event.line))
            elif event.kind == EMPTY:
                seen_tag = True
            elif event.kind == CLOSE:
                if not stack:
                    return ValidationResult.fail(f"Unexpected closing tag </{event.value}>", event.line)
                name, _ = stack.pop()
                if name != event.value:
                    return ValidationResult.fail(
                        f"Mismatched closing tag </{event.value}>, expected </{name}>",
                        event.line,
                    )

        if not seen_tag:
            return ValidationResult.fail("XML contains no elements")
        if stack:
            name, line = stack[-1]
            return ValidationResult.fail(f"Unclosed tag <{name}>", line)
        return ValidationResult.ok()

    def validate_csv(self, content: str) -> ValidationResult:
        lines = [line for line in content.splitlines() if line.strip()]
        if len(lines) < 2:
            return ValidationResult.fail("CSV needs a header line and at least one data line")
        return ValidationResult.ok()
