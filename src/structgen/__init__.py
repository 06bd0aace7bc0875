"""
structgen - Convert JSON, YAML, SQL DDL, Protobuf, XML and CSV into Go structs.

Every input format is parsed into one canonical schema model, which is then
rendered as Go struct declarations with serialization tags.
"""

__version__ = "0.1.0"

from structgen.errors import ParseError, StructGenError, UnsupportedTypeError, ValidationError
from structgen.options.base import ConversionOptions, Dialect, TagStyle
from structgen.schemas.base import CanonicalType, FieldSpec, InputFormat, StructSpec, TypeDescriptor
from structgen.engine.validation_engine import ValidationEngine, ValidationResult
from structgen.engine.conversion_engine import (
    ConversionEngine,
    ConversionError,
    ConversionResult,
    convert,
    try_convert,
    validate,
)

__all__ = [
    "ParseError",
    "StructGenError",
    "UnsupportedTypeError",
    "ValidationError",
    "ConversionOptions",
    "Dialect",
    "TagStyle",
    "CanonicalType",
    "FieldSpec",
    "InputFormat",
    "StructSpec",
    "TypeDescriptor",
    "ValidationEngine",
    "ValidationResult",
    "ConversionEngine",
    "ConversionError",
    "ConversionResult",
    "convert",
    "try_convert",
    "validate",
]
