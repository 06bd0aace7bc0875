"""Parser Registry for looking up the parser of an input format."""

from typing import Type

from structgen.options.base import ConversionOptions
from structgen.schemas.base import InputFormat, SourceParser
from structgen.utils.helpers import NameRegistry


class ParserRegistry:
    """Registry of input format parsers.

    Maps each InputFormat to a SourceParser class and provides a factory
    for parser instances.
    """

    def __init__(self):
        self._parsers: dict[InputFormat, Type[SourceParser]] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        """Register the built-in parsers."""
        from structgen.schemas.value_tree import JsonParser, YamlParser
        from structgen.schemas.ddl import DDLParser
        from structgen.schemas.protobuf import ProtobufParser
        from structgen.schemas.xml_tags import XmlParser
        from structgen.schemas.csv_sample import CsvParser

        self.register(InputFormat.JSON, JsonParser)
        self.register(InputFormat.YAML, YamlParser)
        self.register(InputFormat.SQL, DDLParser)
        self.register(InputFormat.PROTO, ProtobufParser)
        self.register(InputFormat.XML, XmlParser)
        self.register(InputFormat.CSV, CsvParser)

    def register(self, input_format: InputFormat, parser_class: Type[SourceParser]) -> None:
        """Register a parser for an input format.

        Args:
            input_format: The format the parser reads
            parser_class: The parser class to register
        """
        self._parsers[input_format] = parser_class

    def get(self, input_format: InputFormat | str) -> Type[SourceParser] | None:
        """Get a parser class by input format.

        Args:
            input_format: The input format (can be string or enum)

        Returns:
            The parser class or None if not found
        """
        if isinstance(input_format, str):
            try:
                input_format = InputFormat(input_format.lower())
            except ValueError:
                return None

        return self._parsers.get(input_format)

    def create(
        self,
        input_format: InputFormat | str,
        content: str,
        options: ConversionOptions | None = None,
        names: NameRegistry | None = None,
    ) -> SourceParser | None:
        """Create a parser instance.

        Args:
            input_format: The format to parse
            content: Raw input text
            options: Conversion options
            names: Struct name registry shared by the conversion call

        Returns:
            A parser instance or None if the format is not registered
        """
        parser_class = self.get(input_format)
        if parser_class is None:
            return None
        return parser_class(content, options, names)

    def list_formats(self) -> list[InputFormat]:
        """List all registered input formats."""
        return list(self._parsers.keys())

    def __contains__(self, input_format: InputFormat | str) -> bool:
        """Check if an input format is registered."""
        return self.get(input_format) is not None


_global_registry: ParserRegistry | None = None


def get_global_parser_registry() -> ParserRegistry:
    """Get the global parser registry singleton."""
    global _global_registry
    if _global_registry is None:
        _global_registry = ParserRegistry()
    return _global_registry
