"""Main schema parser module.

Provides a unified interface to parse any supported input format into
StructSpecs.
"""

from pathlib import Path

from structgen.errors import ValidationError
from structgen.options.base import ConversionOptions
from structgen.schemas.base import InputFormat, StructSpec
from structgen.schemas.registry import ParserRegistry, get_global_parser_registry
from structgen.utils.helpers import NameRegistry


class SchemaParser:
    """Unified schema parser supporting every input format."""

    # File extensions to format mapping
    EXTENSION_FORMATS = {
        ".json": InputFormat.JSON,
        ".yaml": InputFormat.YAML,
        ".yml": InputFormat.YAML,
        ".sql": InputFormat.SQL,
        ".ddl": InputFormat.SQL,
        ".proto": InputFormat.PROTO,
        ".xml": InputFormat.XML,
        ".csv": InputFormat.CSV,
    }

    def __init__(
        self,
        content: str,
        format: InputFormat | str,
        options: ConversionOptions | None = None,
        registry: ParserRegistry | None = None,
    ):
        """Initialize parser with content and format.

        Args:
            content: Raw input text
            format: Input format
            options: Conversion options
            registry: Parser registry (the global one by default)
        """
        self.format = coerce_format(format)
        self.content = content
        self.options = options or ConversionOptions()
        self.registry = registry or get_global_parser_registry()

    @classmethod
    def from_file(
        cls,
        path: Path | str,
        format: InputFormat | str | None = None,
        options: ConversionOptions | None = None,
    ) -> "SchemaParser":
        """Create parser from a file.

        Args:
            path: Path to the input file
            format: Optional explicit format (detected from the extension if not provided)
            options: Conversion options

        Returns:
            Initialized SchemaParser
        """
        path = Path(path)
        content = path.read_text()

        if format is None:
            format = cls.detect_format(path)

        return cls(content, format, options)

    @classmethod
    def detect_format(cls, path: Path | str) -> InputFormat:
        """Detect the input format from a file extension."""
        suffix = Path(path).suffix.lower()
        if suffix in cls.EXTENSION_FORMATS:
            return cls.EXTENSION_FORMATS[suffix]
        raise ValidationError(f"Cannot detect input format for extension '{suffix}'")

    def parse(self) -> list[StructSpec]:
        """Parse the content into top-level StructSpecs.

        Returns:
            StructSpecs in source order, struct names unique across the list
        """
        parser = self.registry.create(self.format, self.content, self.options, NameRegistry())
        if parser is None:
            raise ValidationError(f"Unsupported format: {self.format.value}")
        return parser.parse()


def coerce_format(format: InputFormat | str) -> InputFormat:
    """Turn a format name into an InputFormat.

    Raises:
        ValidationError: If the name is not a supported format
    """
    if isinstance(format, InputFormat):
        return format
    try:
        return InputFormat(str(format).lower())
    except ValueError:
        supported = ", ".join(f.value for f in InputFormat)
        raise ValidationError(f"Unsupported format: {format}. Supported: {supported}") from None


def parse_schema_file(
    path: Path | str,
    format: InputFormat | str | None = None,
    options: ConversionOptions | None = None,
) -> list[StructSpec]:
    """Convenience function to parse an input file.

    Args:
        path: Path to the input file
        format: Optional explicit format (detected from the extension if not provided)
        options: Conversion options

    Returns:
        Parsed StructSpecs
    """
    parser = SchemaParser.from_file(path, format, options)
    return parser.parse()
