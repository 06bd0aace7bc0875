"""Conversion Engine - runs validate, parse, tag and render for one input.

The Conversion Engine orchestrates a conversion by:
- Rejecting malformed input through the Validation Engine
- Selecting the parser for the input format
- Filling in field tags
- Rendering the resulting structs
"""

import logging
from dataclasses import dataclass
from typing import Any

from structgen.errors import StructGenError, ValidationError
from structgen.options.base import ConversionOptions
from structgen.render.renderer import StructRenderer
from structgen.render.tags import generate_tags
from structgen.schemas.base import InputFormat, StructSpec
from structgen.schemas.parser import coerce_format
from structgen.schemas.registry import ParserRegistry, get_global_parser_registry
from structgen.engine.validation_engine import ValidationEngine, ValidationResult
from structgen.utils.helpers import NameRegistry

logger = logging.getLogger(__name__)

# Serialization keys emitted first in every tag, per input format
TAG_KEYS: dict[InputFormat, tuple[str, ...]] = {
    InputFormat.JSON: ("json", "yaml"),
    InputFormat.YAML: ("json", "yaml"),
    InputFormat.SQL: ("json", "yaml"),
    InputFormat.PROTO: ("json",),
    InputFormat.XML: ("xml", "json"),
    InputFormat.CSV: ("json",),
}

# Formats whose names are lower-cased in tags
LOWERCASE_TAG_FORMATS = frozenset({InputFormat.SQL})


@dataclass
class ConversionError:
    """Failure details of a conversion."""

    message: str
    line: int | None = None
    column: int | None = None

    @classmethod
    def from_exception(cls, error: StructGenError) -> "ConversionError":
        return cls(**error.to_dict())

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"message": self.message}
        if self.line is not None:
            result["line"] = self.line
        if self.column is not None:
            result["column"] = self.column
        return result


@dataclass
class ConversionResult:
    """Result of a conversion run."""

    success: bool
    output: str = ""
    error: ConversionError | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "output": self.output,
            "error": self.error.to_dict() if self.error else None,
        }


class ConversionEngine:
    """Engine for converting raw input into Go struct declarations.

    The engine holds no per-call state; every conversion builds its own
    name registry and parser.
    """

    def __init__(
        self,
        parser_registry: ParserRegistry | None = None,
        validation_engine: ValidationEngine | None = None,
    ):
        self.parser_registry = parser_registry or get_global_parser_registry()
        self.validation_engine = validation_engine or ValidationEngine()

    def validate(self, content: str, input_format: InputFormat | str) -> ValidationResult:
        return self.validation_engine.validate(content, input_format)

    def build_structs(
        self,
        content: str,
        input_format: InputFormat | str,
        options: ConversionOptions | None = None,
    ) -> list[StructSpec]:
        """Validate and parse input, then fill in field tags.

        Args:
            content: Raw input text
            input_format: Format name or InputFormat
            options: Conversion options; required for SQL

        Returns:
            Top-level StructSpecs with tags set on every field

        Raises:
            ValidationError: Input failed validation, the format is unknown,
                or SQL was given without options
            ParseError: The parser could not find a required marker
        """
        result = self.validate(content, input_format)
        if not result.is_valid:
            raise ValidationError(result.error or "Invalid input", result.line, result.column)

        input_format = coerce_format(input_format)
        if input_format == InputFormat.SQL and options is None:
            raise ValidationError("SQL conversion requires options (dialect and tag style)")
        options = options or ConversionOptions()

        parser = self.parser_registry.create(input_format, content, options, NameRegistry())
        if parser is None:
            raise ValidationError(f"Unsupported format: {input_format.value}")

        structs = parser.parse()
        self.apply_tags(structs, input_format, options)
        return structs

    def apply_tags(
        self,
        structs: list[StructSpec],
        input_format: InputFormat,
        options: ConversionOptions,
    ) -> None:
        """Set FieldSpec.tag on every field, nested structs included."""
        keys = TAG_KEYS[input_format]
        lowercase = input_format in LOWERCASE_TAG_FORMATS
        for struct in structs:
            for field in struct.iter_fields():
                field.tag = generate_tags(
                    field.source_name,
                    options,
                    comment=field.comment,
                    default_value=field.default_value_literal,
                    keys=keys,
                    lowercase=lowercase,
                )

    def convert(
        self,
        content: str,
        input_format: InputFormat | str,
        options: ConversionOptions | None = None,
    ) -> str:
        """Convert input text into Go struct declarations.

        Raises:
            ValidationError: See build_structs
            ParseError: See build_structs
        """
        structs = self.build_structs(content, input_format, options)
        output = StructRenderer(options).render(structs)
        logger.debug(
            "Converted %s input into %d top-level struct(s)",
            coerce_format(input_format).value,
            len(structs),
        )
        return output

    def try_convert(
        self,
        content: str,
        input_format: InputFormat | str,
        options: ConversionOptions | None = None,
    ) -> ConversionResult:
        """Convert without raising; failures are reported in the result."""
        try:
            output = self.convert(content, input_format, options)
        except StructGenError as e:
            logger.debug("Conversion failed: %s", e)
            return ConversionResult(success=False, error=ConversionError.from_exception(e))
        return ConversionResult(success=True, output=output)


_default_engine: ConversionEngine | None = None


def get_default_engine() -> ConversionEngine:
    """Get the shared ConversionEngine."""
    global _default_engine
    if _default_engine is None:
        _default_engine = ConversionEngine()
    return _default_engine


def validate(content: str, input_format: InputFormat | str) -> ValidationResult:
    """Check raw input against its format without parsing it fully."""
    return get_default_engine().validate(content, input_format)


def convert(
    content: str,
    input_format: InputFormat | str,
    options: ConversionOptions | None = None,
) -> str:
    """Convert raw input into Go struct declarations."""
    return get_default_engine().convert(content, input_format, options)


def try_convert(
    content: str,
    input_format: InputFormat | str,
    options: ConversionOptions | None = None,
) -> ConversionResult:
    """Convert raw input, returning a ConversionResult instead of raising."""
    return get_default_engine().try_convert(content, input_format, options)
