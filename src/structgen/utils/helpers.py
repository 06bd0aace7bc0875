"""Utility helper functions."""

import re

_WORD_SPLIT = re.compile(r"[^0-9A-Za-z]+")


def capitalize_first(value: str) -> str:
    """Upper-case the first character, leaving the rest untouched."""
    return value[:1].upper() + value[1:]


def to_identifier(name: str) -> str:
    """Convert a source key into an exported identifier, keeping inner case.

    Examples:
        userName -> UserName
        user_name -> UserName
        first-name -> FirstName
    """
    parts = [p for p in _WORD_SPLIT.split(name) if p]
    return _safe_start("".join(capitalize_first(p) for p in parts))


def to_pascal_case(name: str) -> str:
    """Convert a snake_case name into PascalCase.

    The name is lower-cased first, so SQL style identifiers such as
    USER_ID and user_id both become UserId.
    """
    parts = [p for p in _WORD_SPLIT.split(name.lower()) if p]
    return _safe_start("".join(capitalize_first(p) for p in parts))


def _safe_start(identifier: str) -> str:
    if not identifier:
        return "Field"
    if identifier[0].isdigit():
        return f"F{identifier}"
    return identifier


class NameRegistry:
    """Hands out names that are unique within one scope.

    The first request for a name returns it unchanged; later requests get a
    numeric suffix starting at 2.
    """

    def __init__(self):
        self._used: set[str] = set()

    def claim(self, name: str) -> str:
        candidate = name
        counter = 2
        while candidate in self._used:
            candidate = f"{name}{counter}"
            counter += 1
        self._used.add(candidate)
        return candidate

    def __contains__(self, name: str) -> bool:
        return name in self._used
