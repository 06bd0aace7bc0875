"""Type inference for raw values and text literals.

Two entry points:
- infer_value_type: decides the descriptor of a value taken from a parsed
  JSON/YAML tree.
- infer_literal_type: decides the kind of a text leaf (XML element body,
  CSV cell).

Objects are reported as a bare struct descriptor; materializing the nested
StructSpec is the walker's job.
"""

import re
from datetime import date, datetime
from typing import Any

from structgen.schemas.base import CanonicalType, TypeDescriptor

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

_INTEGER_LITERAL = re.compile(r"-?\d+")
_DECIMAL_LITERAL = re.compile(r"-?\d*\.\d+")
_TIMESTAMP_PREFIX = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}")


def integer_type(value: int) -> CanonicalType:
    """Pick the narrowest signed kind (32 or 64 bit) for an integer."""
    if INT32_MIN <= value <= INT32_MAX:
        return CanonicalType.INT32
    return CanonicalType.INT64


def infer_value_type(value: Any, visited: frozenset[int] = frozenset()) -> TypeDescriptor:
    """Infer the descriptor for a value from a parsed document tree.

    Args:
        value: The value to inspect
        visited: Identities of the dicts and lists already entered on the
            current recursion branch. Never mutated.

    Returns:
        The inferred TypeDescriptor. Objects come back as an unnamed struct
        reference; revisited containers come back as pointer-to-unknown.
    """
    if value is None:
        return TypeDescriptor.unknown(is_pointer=True)

    if isinstance(value, (dict, list)) and id(value) in visited:
        return TypeDescriptor.unknown(is_pointer=True)

    if isinstance(value, list):
        if not value:
            return TypeDescriptor.array_of(None)
        branch = visited | {id(value)}
        element_types = [infer_value_type(item, branch) for item in value]
        first = element_types[0]
        if all(t == first for t in element_types[1:]):
            return TypeDescriptor.array_of(first)
        return TypeDescriptor.array_of(None)

    if isinstance(value, dict):
        return TypeDescriptor(base_type=CanonicalType.STRUCT)

    # bool is a subclass of int, so it has to be checked first
    if isinstance(value, bool):
        return TypeDescriptor.scalar(CanonicalType.BOOL)
    if isinstance(value, int):
        return TypeDescriptor.scalar(integer_type(value))
    if isinstance(value, float):
        return TypeDescriptor.scalar(CanonicalType.FLOAT64)
    if isinstance(value, str):
        return TypeDescriptor.scalar(CanonicalType.STRING)
    if isinstance(value, (datetime, date)):
        return TypeDescriptor.scalar(CanonicalType.TIMESTAMP)
    if isinstance(value, (bytes, bytearray)):
        return TypeDescriptor.scalar(CanonicalType.BYTES)

    return TypeDescriptor.unknown()


def infer_literal_type(text: str) -> CanonicalType:
    """Infer the kind of a text literal.

    Order: boolean, integer, decimal, ISO-8601 timestamp prefix, string.
    """
    if text in ("true", "false"):
        return CanonicalType.BOOL
    if _INTEGER_LITERAL.fullmatch(text):
        return integer_type(int(text))
    if _DECIMAL_LITERAL.fullmatch(text):
        return CanonicalType.FLOAT64
    if _TIMESTAMP_PREFIX.match(text):
        return CanonicalType.TIMESTAMP
    return CanonicalType.STRING
