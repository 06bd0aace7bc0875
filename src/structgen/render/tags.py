"""Field tag generation.

A tag is the text between the backticks of a Go struct field. It always
starts with one serialization entry per key (json, yaml, ...) and is then
extended according to the selected TagStyle.
"""

from typing import Sequence

from structgen.options.base import ConversionOptions, TagStyle

DEFAULT_TAG_KEYS = ("json", "yaml")


def escape_tag_value(text: str) -> str:
    """Escape text placed inside a double-quoted tag value.

    Backticks cannot appear in a raw string literal, so they become single
    quotes.
    """
    text = text.replace("`", "'")
    return text.replace("\\", "\\\\").replace('"', '\\"')


def escape_quoted_clause(text: str) -> str:
    """Escape text placed inside a single-quoted clause, e.g. comment('...')."""
    return escape_tag_value(text).replace("'", "''")


def strip_quotes(literal: str) -> str:
    """Remove one pair of surrounding quotes from a literal."""
    if len(literal) >= 2 and literal[0] == literal[-1] and literal[0] in ("'", '"'):
        return literal[1:-1]
    return literal


def generate_tags(
    field_name: str,
    options: ConversionOptions,
    comment: str | None = None,
    default_value: str | None = None,
    keys: Sequence[str] = DEFAULT_TAG_KEYS,
    lowercase: bool = True,
) -> str:
    """Build the tag text for one field.

    Args:
        field_name: Name as written in the input
        options: Conversion options (tag_style is used)
        comment: Column comment, if any
        default_value: Default literal as written in the input, if any
        keys: Serialization keys emitted first, in order
        lowercase: Lower-case the name in every entry

    Returns:
        Tag text without the surrounding backticks
    """
    name = field_name.lower() if lowercase else field_name
    # A comma would start the tag's option list
    name = escape_tag_value(name.replace(",", "_"))
    parts = [f'{key}:"{name}"' for key in keys]

    style = options.tag_style
    if style == TagStyle.PLAIN:
        if comment:
            parts.append(f'comment:"{escape_tag_value(comment)}"')
        if default_value is not None:
            parts.append(f'default:"{escape_tag_value(default_value)}"')

    elif style == TagStyle.DB:
        parts.append(f'db:"{name}"')
        if default_value is not None:
            parts.append(f'default:"{escape_tag_value(default_value)}"')

    elif style == TagStyle.GORM:
        clauses = [f"column:{name}"]
        if comment:
            clauses.append(f"comment:'{escape_quoted_clause(comment)}'")
        if default_value is not None:
            clauses.append(f"default:{escape_tag_value(strip_quotes(default_value))}")
        parts.append(f'gorm:"{";".join(clauses)}"')

    elif style == TagStyle.XORM:
        clauses = [f"'{name}'"]
        if comment:
            clauses.append(f"comment('{escape_quoted_clause(comment)}')")
        if default_value is not None:
            clauses.append(f"default({escape_tag_value(default_value)})")
        parts.append(f'xorm:"{" ".join(clauses)}"')

    return " ".join(parts)
