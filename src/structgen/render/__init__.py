"""Render module - tag generation and Go struct output."""

from structgen.render.renderer import GO_TYPES, StructRenderer, go_type
from structgen.render.tags import generate_tags, escape_tag_value

__all__ = [
    "GO_TYPES",
    "StructRenderer",
    "go_type",
    "generate_tags",
    "escape_tag_value",
]
