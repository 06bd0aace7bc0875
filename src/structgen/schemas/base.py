"""Base classes for schema representation.

Provides the canonical typed-schema model that every input format
(JSON, YAML, SQL DDL, Protobuf, XML, CSV) is converted to before rendering.
"""

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Iterator

from pydantic import BaseModel, Field

from structgen.options.base import ConversionOptions
from structgen.utils.helpers import NameRegistry


class InputFormat(str, Enum):
    """Supported input formats."""

    JSON = "json"
    YAML = "yaml"
    SQL = "sql"
    PROTO = "proto"
    XML = "xml"
    CSV = "csv"


class CanonicalType(str, Enum):
    """Database and format independent field kinds."""

    STRING = "string"
    BOOL = "bool"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    TIMESTAMP = "timestamp"
    BYTES = "bytes"
    JSON = "json"
    UNKNOWN = "unknown"
    # Reference to a named StructSpec; the name lives in TypeDescriptor.ref_name
    STRUCT = "struct"

    @property
    def is_signed_integer(self) -> bool:
        return self in (
            CanonicalType.INT8,
            CanonicalType.INT16,
            CanonicalType.INT32,
            CanonicalType.INT64,
        )

    @property
    def is_unsigned_integer(self) -> bool:
        return self in (
            CanonicalType.UINT8,
            CanonicalType.UINT16,
            CanonicalType.UINT32,
            CanonicalType.UINT64,
        )


class TypeDescriptor(BaseModel):
    """Canonical type of a field, including its array and pointer shape."""

    base_type: CanonicalType = Field(..., description="Canonical kind")
    ref_name: str | None = Field(default=None, description="Struct name when base_type is struct")
    is_pointer: bool = Field(default=False, description="Whether the value is pointer-qualified")
    is_array: bool = Field(default=False, description="Whether the value is a sequence")
    element_type: "TypeDescriptor | None" = Field(default=None, description="Element type for arrays")

    @classmethod
    def scalar(cls, base_type: CanonicalType, is_pointer: bool = False) -> "TypeDescriptor":
        return cls(base_type=base_type, is_pointer=is_pointer)

    @classmethod
    def unknown(cls, is_pointer: bool = False) -> "TypeDescriptor":
        return cls(base_type=CanonicalType.UNKNOWN, is_pointer=is_pointer)

    @classmethod
    def reference(cls, name: str) -> "TypeDescriptor":
        return cls(base_type=CanonicalType.STRUCT, ref_name=name)

    @classmethod
    def array_of(cls, element: "TypeDescriptor | None") -> "TypeDescriptor":
        """Build an array descriptor.

        A missing element type produces an array of the unknown kind.
        """
        if element is None:
            return cls(base_type=CanonicalType.UNKNOWN, is_array=True)
        return cls(
            base_type=element.base_type,
            ref_name=element.ref_name,
            is_pointer=element.is_pointer,
            is_array=True,
            element_type=element,
        )

    def iter_types(self) -> Iterator["TypeDescriptor"]:
        """Yield this descriptor and every element descriptor below it."""
        yield self
        if self.element_type is not None:
            yield from self.element_type.iter_types()


class FieldSpec(BaseModel):
    """Schema definition for a single field.

    Owned by exactly one StructSpec.
    """

    name: str = Field(..., description="Rendered field identifier")
    source_name: str = Field(..., description="Field name as written in the input")
    raw_type_token: str = Field(default="", description="Type token as written in the input")
    descriptor: TypeDescriptor = Field(..., description="Canonical type")
    nullable: bool = Field(default=False, description="Whether the field can be null")
    enum_values: list[str] | None = Field(default=None, description="Allowed enum values")
    default_value_literal: str | None = Field(default=None, description="Default value as written")
    comment: str | None = Field(default=None, description="Column or field comment")
    tag: str | None = Field(default=None, description="Serialization tag text")


class StructSpec(BaseModel):
    """A named structure with ordered fields and the structs nested in it."""

    name: str = Field(..., description="Struct name, unique within one conversion")
    fields: list[FieldSpec] = Field(default_factory=list, description="Fields in source order")
    nested_structs: list["StructSpec"] = Field(default_factory=list, description="Owned nested structs")

    def get_field(self, name: str) -> FieldSpec | None:
        """Get a field by rendered or source name."""
        for field in self.fields:
            if field.name == name or field.source_name == name:
                return field
        return None

    def iter_structs(self) -> Iterator["StructSpec"]:
        """Yield nested structs before their owner (post-order)."""
        for nested in self.nested_structs:
            yield from nested.iter_structs()
        yield self

    def iter_fields(self) -> Iterator[FieldSpec]:
        """Yield every field of this struct and of its nested structs."""
        for struct in self.iter_structs():
            yield from struct.fields


class SourceParser(ABC):
    """Abstract base class for all input format parsers.

    A parser turns raw text into one or more StructSpecs. Parsers hold no
    state beyond a single conversion call.
    """

    input_format: InputFormat

    def __init__(
        self,
        content: str,
        options: ConversionOptions | None = None,
        names: NameRegistry | None = None,
    ):
        """Initialize the parser.

        Args:
            content: Raw input text
            options: Conversion options (defaults are used when omitted)
            names: Registry used to keep struct names unique across the call
        """
        self.content = content
        self.options = options or ConversionOptions()
        self.names = names or NameRegistry()

    @classmethod
    def from_string(cls, content: str, options: ConversionOptions | None = None) -> "SourceParser":
        """Create a parser from a string."""
        return cls(content, options)

    @classmethod
    def from_file(cls, path: Path | str, options: ConversionOptions | None = None) -> "SourceParser":
        """Create a parser from a file."""
        path = Path(path)
        return cls(path.read_text(), options)

    @abstractmethod
    def parse(self) -> list[StructSpec]:
        """Parse the content into top-level StructSpecs, in source order."""
        pass
