"""Utility functions for structgen."""

from structgen.utils.helpers import (
    NameRegistry,
    capitalize_first,
    to_identifier,
    to_pascal_case,
)

__all__ = [
    "NameRegistry",
    "capitalize_first",
    "to_identifier",
    "to_pascal_case",
]
