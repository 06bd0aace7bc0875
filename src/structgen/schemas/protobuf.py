"""Protobuf schema parser.

Line-oriented: each line is tokenized on its own, split into `;`-terminated
statements, and each statement is classified as a field or noise. Lines
inside an open message that are neither fields nor known noise are logged
as warnings. Nested message blocks are not modelled; a nested
`message` simply starts a new sibling struct.
"""

import logging
import re
from types import MappingProxyType
from typing import Mapping

from structgen.schemas.base import (
    CanonicalType,
    FieldSpec,
    InputFormat,
    SourceParser,
    StructSpec,
    TypeDescriptor,
)
from structgen.utils.helpers import NameRegistry, to_identifier

logger = logging.getLogger(__name__)

C = CanonicalType

# Protobuf scalar types to canonical types
SCALAR_TYPES: Mapping[str, CanonicalType] = MappingProxyType({
    "double": C.FLOAT64,
    "float": C.FLOAT32,
    "int32": C.INT32,
    "int64": C.INT64,
    "uint32": C.UINT32,
    "uint64": C.UINT64,
    "sint32": C.INT32,
    "sint64": C.INT64,
    "fixed32": C.UINT32,
    "fixed64": C.UINT64,
    "sfixed32": C.INT32,
    "sfixed64": C.INT64,
    "bool": C.BOOL,
    "string": C.STRING,
    "bytes": C.BYTES,
    "Timestamp": C.TIMESTAMP,
    "google.protobuf.Timestamp": C.TIMESTAMP,
})

_SKIPPED_LINE_WORDS = ("syntax", "package", "import", "option")
# Statements inside a message that are not fields and carry nothing to map
_IGNORED_STATEMENT_WORDS = ("option", "reserved", "oneof", "extensions", "extend")
_FIELD_LABELS = ("repeated", "optional", "required")
_LINE_TOKEN = re.compile(r"[A-Za-z_][\w.]*|\d+|\S")
_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_ENUM_HEADER = re.compile(r"^\s*enum\s+(\w+)")
_ENUM_VALUE = re.compile(r"(\w+)\s*=\s*-?\d+")


class ProtobufParser(SourceParser):
    """Parser for Protocol Buffer message definitions."""

    input_format = InputFormat.PROTO

    def _lines(self) -> list[str]:
        """Source lines with // and /* */ comments removed.

        Block comments keep their newlines so line numbers do not shift.
        """
        content = _BLOCK_COMMENT.sub(lambda m: "\n" * m.group(0).count("\n"), self.content)
        return [line.split("//", 1)[0] for line in content.splitlines()]

    def _collect_enums(self, lines: list[str]) -> dict[str, list[str]]:
        """Collect enum names and their values.

        Returns:
            Dict of enum name to list of values
        """
        enums: dict[str, list[str]] = {}
        current: str | None = None

        for line in lines:
            header = _ENUM_HEADER.match(line)
            if header:
                current = header.group(1)
                enums[current] = []
                line = line.split("{", 1)[1] if "{" in line else ""
            if current is None:
                continue
            for value in _ENUM_VALUE.findall(line):
                if not value.endswith("_UNSPECIFIED"):
                    enums[current].append(value)
            if "}" in line:
                current = None

        return enums

    def list_messages(self) -> list[str]:
        """List all message names found in the proto content.

        Returns:
            List of message names, in source order
        """
        names = []
        for line in self._lines():
            tokens = _LINE_TOKEN.findall(line)
            if len(tokens) >= 2 and tokens[0] == "message":
                names.append(tokens[1])
        return names

    def parse(self) -> list[StructSpec]:
        lines = self._lines()
        enums = self._collect_enums(lines)

        # Struct names are claimed up front so references can point forward
        declared = self.list_messages()
        claimed = [self.names.claim(to_identifier(name)) for name in declared]
        struct_names: dict[str, str] = {}
        for source_name, struct_name in zip(declared, claimed):
            struct_names.setdefault(source_name, struct_name)
        next_name = iter(claimed)

        structs: list[StructSpec] = []
        current: StructSpec | None = None
        field_names = NameRegistry()
        in_enum = False

        for line_number, line in enumerate(lines, start=1):
            tokens = _LINE_TOKEN.findall(line)
            if not tokens or tokens[0] in _SKIPPED_LINE_WORDS:
                continue

            if in_enum or tokens[0] == "enum":
                in_enum = "}" not in tokens
                continue

            if len(tokens) >= 2 and tokens[0] == "message":
                if current is not None:
                    structs.append(current)
                current = StructSpec(name=next(next_name))
                field_names = NameRegistry()
                tokens = tokens[2:]

            if current is None:
                continue

            for statement in _split_statements(tokens):
                field = self._parse_field(statement, enums, struct_names, field_names)
                if field is not None:
                    current.fields.append(field)
                elif statement[0] not in _IGNORED_STATEMENT_WORDS:
                    logger.warning(
                        "Skipping unrecognised line %d in message %s: %s",
                        line_number,
                        current.name,
                        " ".join(statement),
                    )

        if current is not None:
            structs.append(current)

        logger.debug("Parsed %d message(s)", len(structs))
        return structs

    def _parse_field(
        self,
        tokens: list[str],
        enums: dict[str, list[str]],
        struct_names: dict[str, str],
        field_names: NameRegistry,
    ) -> FieldSpec | None:
        """Parse one `[label] <type> <name> = <number> [options];` statement.

        Returns:
            FieldSpec, or None when the statement is not a field
        """
        label = None
        if tokens[0] in _FIELD_LABELS:
            label = tokens[0]
            tokens = tokens[1:]

        if (
            len(tokens) < 5
            or tokens[2] != "="
            or not tokens[3].isdigit()
            or tokens[-1] != ";"
            or not re.fullmatch(r"[A-Za-z_][\w.]*", tokens[0])
            or not re.fullmatch(r"[A-Za-z_]\w*", tokens[1])
        ):
            return None

        type_name, name = tokens[0], tokens[1]
        descriptor, enum_values = self._map_type(type_name, enums, struct_names)
        if label == "repeated":
            descriptor = TypeDescriptor.array_of(descriptor)

        return FieldSpec(
            name=field_names.claim(to_identifier(name)),
            source_name=name,
            raw_type_token=type_name,
            descriptor=descriptor,
            nullable=label == "optional",
            enum_values=enum_values,
        )

    def _map_type(
        self,
        type_name: str,
        enums: dict[str, list[str]],
        struct_names: dict[str, str],
    ) -> tuple[TypeDescriptor, list[str] | None]:
        if type_name in SCALAR_TYPES:
            return TypeDescriptor.scalar(SCALAR_TYPES[type_name]), None

        short_name = type_name.rsplit(".", 1)[-1]
        if short_name in enums:
            return TypeDescriptor.scalar(C.STRING), enums[short_name] or None
        if short_name in struct_names:
            return TypeDescriptor.reference(struct_names[short_name]), None

        logger.warning("Unsupported protobuf type '%s'; falling back to unknown", type_name)
        return TypeDescriptor.unknown(), None


def _split_statements(tokens: list[str]) -> list[list[str]]:
    """Split a line's tokens into `;`-terminated statements.

    Braces are dropped since blocks are not modelled. A trailing statement
    without `;` is kept as is.
    """
    statements: list[list[str]] = []
    current: list[str] = []
    for token in tokens:
        if token in ("{", "}"):
            continue
        if token == ";" and not current:
            continue
        current.append(token)
        if token == ";":
            statements.append(current)
            current = []
    if current:
        statements.append(current)
    return statements
