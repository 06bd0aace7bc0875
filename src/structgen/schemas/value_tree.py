"""JSON and YAML value-tree parsers.

Both formats are decoded into plain Python values and then walked the same
way: every object becomes a StructSpec, every nested object becomes a nested
StructSpec named after its parent and the field holding it.
"""

import json
import logging
from typing import Any

import yaml

from structgen.errors import ParseError
from structgen.schemas.base import (
    CanonicalType,
    FieldSpec,
    InputFormat,
    SourceParser,
    StructSpec,
    TypeDescriptor,
)
from structgen.schemas.inference import infer_value_type
from structgen.utils.helpers import NameRegistry, to_identifier

logger = logging.getLogger(__name__)


class ValueTreeParser(SourceParser):
    """Walks an already decoded value tree.

    Subclasses only decide how the text is decoded.
    """

    def decode(self) -> Any:
        raise NotImplementedError

    def parse(self) -> list[StructSpec]:
        return self.describe(self.decode())

    def describe(self, value: Any) -> list[StructSpec]:
        """Describe an in-memory value tree.

        The tree may contain cycles; a container revisited on the same
        branch is typed as unknown instead of being entered again.
        """
        root = self._select_root(value)
        root_name = self.names.claim(self.options.root_name)
        struct = self.build_struct(root, root_name, frozenset())
        logger.debug(
            "Inferred %d struct(s) from %s input",
            sum(1 for _ in struct.iter_structs()),
            self.input_format.value,
        )
        return [struct]

    def _select_root(self, value: Any) -> dict[str, Any]:
        """Pick the object to describe.

        A top-level list is described by its first object element.
        """
        if isinstance(value, dict):
            return value
        if isinstance(value, list):
            for item in value:
                if isinstance(item, dict):
                    return item
            raise ParseError("Top-level array contains no objects to describe")
        raise ParseError(
            f"Top-level value must be an object or an array of objects, got {type(value).__name__}"
        )

    def build_struct(
        self,
        obj: dict[str, Any],
        name: str,
        visited: frozenset[int],
    ) -> StructSpec:
        """Build a StructSpec for one object.

        Args:
            obj: The object to describe
            name: Already claimed struct name
            visited: Identities of containers entered on this branch

        Returns:
            The StructSpec, with nested structs attached
        """
        branch = visited | {id(obj)}
        struct = StructSpec(name=name)
        field_names = NameRegistry()

        for key, value in obj.items():
            source_name = str(key)
            field_name = field_names.claim(to_identifier(source_name))
            descriptor = infer_value_type(value, branch)

            if descriptor.base_type == CanonicalType.STRUCT:
                sample = self._struct_sample(value)
                if sample is None:
                    descriptor = _replace_struct(descriptor, None)
                else:
                    nested_name = self.names.claim(f"{name}{field_name}")
                    struct.nested_structs.append(
                        self.build_struct(sample, nested_name, branch | {id(value)})
                    )
                    descriptor = _replace_struct(descriptor, nested_name)

            struct.fields.append(
                FieldSpec(
                    name=field_name,
                    source_name=source_name,
                    raw_type_token=type(value).__name__,
                    descriptor=descriptor,
                    nullable=value is None,
                )
            )

        return struct

    def _struct_sample(self, value: Any) -> dict[str, Any] | None:
        """Object used to materialize a nested struct for a field value."""
        if isinstance(value, dict):
            return value
        if isinstance(value, list):
            for item in value:
                if isinstance(item, dict):
                    return item
        return None


class JsonParser(ValueTreeParser):
    """Parser for JSON documents."""

    input_format = InputFormat.JSON

    def decode(self) -> Any:
        try:
            return json.loads(self.content)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON: {e.msg}", line=e.lineno, column=e.colno) from e


class YamlParser(ValueTreeParser):
    """Parser for YAML documents."""

    input_format = InputFormat.YAML

    def decode(self) -> Any:
        try:
            return yaml.safe_load(self.content)
        except yaml.YAMLError as e:
            mark = getattr(e, "problem_mark", None)
            raise ParseError(
                f"Invalid YAML: {e}",
                line=mark.line + 1 if mark else None,
                column=mark.column + 1 if mark else None,
            ) from e


def _replace_struct(descriptor: TypeDescriptor, ref_name: str | None) -> TypeDescriptor:
    """Point an unnamed struct descriptor at a materialized struct.

    Without a name (no object sample available) the kind degrades to unknown.
    """
    if descriptor.is_array:
        element = TypeDescriptor.reference(ref_name) if ref_name else None
        return TypeDescriptor.array_of(element)
    if ref_name is None:
        return TypeDescriptor.unknown()
    return TypeDescriptor.reference(ref_name)
