"""Struct renderer - turns StructSpecs into Go declarations."""

import logging
from types import MappingProxyType
from typing import Iterable, Mapping

from structgen.options.base import ConversionOptions
from structgen.schemas.base import CanonicalType, FieldSpec, StructSpec, TypeDescriptor

logger = logging.getLogger(__name__)

C = CanonicalType

GO_TYPES: Mapping[CanonicalType, str] = MappingProxyType({
    C.STRING: "string",
    C.BOOL: "bool",
    C.INT8: "int8",
    C.INT16: "int16",
    C.INT32: "int32",
    C.INT64: "int64",
    C.UINT8: "uint8",
    C.UINT16: "uint16",
    C.UINT32: "uint32",
    C.UINT64: "uint64",
    C.FLOAT32: "float32",
    C.FLOAT64: "float64",
    C.TIMESTAMP: "time.Time",
    C.BYTES: "[]byte",
    C.JSON: "json.RawMessage",
    C.UNKNOWN: "interface{}",
})

# Packages needed by canonical kinds
IMPORTS: Mapping[CanonicalType, str] = MappingProxyType({
    C.TIMESTAMP: "time",
    C.JSON: "encoding/json",
})


class StructRenderer:
    """Renders StructSpecs as Go struct declarations.

    Output layout:
    - an import block when any field needs a package
    - one block per struct, nested structs before their owner
    - blocks separated by a blank line, output ending with a newline
    """

    def __init__(self, options: ConversionOptions | None = None):
        self.options = options or ConversionOptions()

    def render(self, structs: Iterable[StructSpec]) -> str:
        """Render top-level structs (and everything nested in them)."""
        ordered = [s for top in structs for s in top.iter_structs()]

        blocks = []
        imports = self.collect_imports(ordered)
        if imports:
            lines = ["import ("] + [f'\t"{package}"' for package in imports] + [")"]
            blocks.append("\n".join(lines))

        blocks.extend(self.render_struct(struct) for struct in ordered)
        logger.debug("Rendered %d struct(s) with %d import(s)", len(ordered), len(imports))
        return "\n\n".join(blocks) + "\n"

    def collect_imports(self, structs: Iterable[StructSpec]) -> list[str]:
        """Sorted packages needed by the fields of the given structs."""
        packages = set()
        for struct in structs:
            for field in struct.fields:
                for descriptor in field.descriptor.iter_types():
                    if descriptor.base_type in IMPORTS:
                        packages.add(IMPORTS[descriptor.base_type])
        return sorted(packages)

    def render_struct(self, struct: StructSpec) -> str:
        """Render a single struct block, without its nested structs."""
        lines = [f"type {struct.name} struct {{"]
        lines.extend(self.render_field(field) for field in struct.fields)
        lines.append("}")
        return "\n".join(lines)

    def render_field(self, field: FieldSpec) -> str:
        line = f"\t{field.name} {self.field_type(field)}"
        if field.tag:
            line += f" `{field.tag}`"
        return line

    def field_type(self, field: FieldSpec) -> str:
        """Go type of a field, applying the pointer rule.

        A non-array field is a pointer when its descriptor is one, when the
        field is nullable, or when use_pointer_for_nullable is set.
        """
        descriptor = field.descriptor
        if descriptor.is_array:
            return go_type(descriptor)

        name = base_type_name(descriptor)
        if descriptor.is_pointer or field.nullable or self.options.use_pointer_for_nullable:
            return f"*{name}"
        return name


def base_type_name(descriptor: TypeDescriptor) -> str:
    """Go name of a descriptor's kind, ignoring its shape."""
    if descriptor.base_type == C.STRUCT:
        return descriptor.ref_name or GO_TYPES[C.UNKNOWN]
    return GO_TYPES[descriptor.base_type]


def go_type(descriptor: TypeDescriptor) -> str:
    """Go type of a descriptor, including array and pointer shape."""
    if descriptor.is_array:
        if descriptor.element_type is not None:
            return f"[]{go_type(descriptor.element_type)}"
        return f"[]{base_type_name(descriptor)}"

    name = base_type_name(descriptor)
    return f"*{name}" if descriptor.is_pointer else name
