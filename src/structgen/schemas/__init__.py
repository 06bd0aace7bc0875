"""Schema parsing module for turning input formats into StructSpecs.

Six input formats are supported: JSON, YAML, SQL DDL, Protobuf, XML and CSV.
Each parser produces the same canonical model (StructSpec, FieldSpec,
TypeDescriptor) which the renderer turns into declarations.

Example usage:
    from structgen.schemas import SchemaParser, parse_schema_file

    # Parse a SQL file, format detected from the extension
    structs = parse_schema_file("users.sql")

    # Parse a string explicitly
    structs = SchemaParser('{"id": 1}', "json").parse()
"""

from structgen.schemas.base import (
    CanonicalType,
    FieldSpec,
    InputFormat,
    SourceParser,
    StructSpec,
    TypeDescriptor,
)
from structgen.schemas.parser import SchemaParser, coerce_format, parse_schema_file
from structgen.schemas.registry import ParserRegistry, get_global_parser_registry
from structgen.schemas.value_tree import JsonParser, YamlParser
from structgen.schemas.ddl import DDLParser
from structgen.schemas.protobuf import ProtobufParser
from structgen.schemas.xml_tags import XmlParser
from structgen.schemas.csv_sample import CsvParser

__all__ = [
    "CanonicalType",
    "FieldSpec",
    "InputFormat",
    "SourceParser",
    "StructSpec",
    "TypeDescriptor",
    "SchemaParser",
    "coerce_format",
    "parse_schema_file",
    "ParserRegistry",
    "get_global_parser_registry",
    "JsonParser",
    "YamlParser",
    "DDLParser",
    "ProtobufParser",
    "XmlParser",
    "CsvParser",
]
