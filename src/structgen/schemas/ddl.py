"""SQL DDL schema parser.

Parses CREATE TABLE statements into StructSpecs. Works on the token stream
from sql_lexer with a small recursive-descent scanner covering this subset:

    script       := { create_table | other tokens }
    create_table := CREATE [TEMP|TEMPORARY] TABLE [IF NOT EXISTS]
                    name ['.' name] '(' entry {',' entry} ')'
    entry        := table_constraint | column
    column       := name [type] {constraint}
    type         := (ENUM | SET) '(' string {',' string} ')'
                  | word {word} ['(' args ')'] {word} ['[]' | ARRAY]
    constraint   := NOT NULL | NULL | PRIMARY KEY | UNSIGNED
                  | DEFAULT literal | COMMENT string | CHECK '(' ... ')' | token

Multi-word types are only joined when they form a known phrase such as
DOUBLE PRECISION, so trailing keywords are never swallowed into the type.
"""

import logging
from typing import Any

from structgen.errors import ParseError
from structgen.options.base import ConversionOptions
from structgen.schemas.base import (
    CanonicalType,
    FieldSpec,
    InputFormat,
    SourceParser,
    StructSpec,
    TypeDescriptor,
)
from structgen.schemas.dialects import map_sql_type
from structgen.schemas.sql_lexer import IDENT, NUMBER, PUNCT, STRING, WORD, Token, tokenize
from structgen.utils.helpers import NameRegistry, to_pascal_case

logger = logging.getLogger(__name__)

# Leading words of table-level entries that are not columns
CONSTRAINT_KEYWORDS = frozenset({
    "PRIMARY", "FOREIGN", "UNIQUE", "CHECK", "INDEX", "KEY", "CONSTRAINT",
    "FULLTEXT", "SPATIAL",
})

MULTIWORD_TYPES: tuple[tuple[str, ...], ...] = (
    ("DOUBLE", "PRECISION"),
    ("CHARACTER", "VARYING"),
    ("NATIONAL", "CHARACTER", "VARYING"),
    ("NATIONAL", "CHARACTER"),
    ("BIT", "VARYING"),
    ("TIMESTAMP", "WITH", "TIME", "ZONE"),
    ("TIMESTAMP", "WITHOUT", "TIME", "ZONE"),
    ("TIMESTAMP", "WITH", "LOCAL", "TIME", "ZONE"),
    ("TIME", "WITH", "TIME", "ZONE"),
    ("TIME", "WITHOUT", "TIME", "ZONE"),
    ("LONG", "RAW"),
)

_ENUM_TYPES = ("ENUM", "SET")

# Words that start the constraint tail of a column declared without a type
_TAIL_KEYWORDS = (
    "PRIMARY", "NOT", "NULL", "DEFAULT", "UNIQUE", "REFERENCES", "CHECK", "COMMENT",
)


class DDLParser(SourceParser):
    """Parser for SQL DDL CREATE TABLE statements."""

    input_format = InputFormat.SQL

    def __init__(
        self,
        content: str,
        options: ConversionOptions | None = None,
        names: NameRegistry | None = None,
    ):
        """Initialize parser with DDL content.

        Args:
            content: SQL DDL content as string
            options: Conversion options (the dialect drives type mapping)
            names: Registry keeping struct names unique
        """
        super().__init__(content, options, names)
        self._tables = self._parse_all_tables()

    def _parse_all_tables(self) -> dict[str, dict[str, Any]]:
        """Parse all CREATE TABLE statements.

        Returns:
            Dict of table name to table info, in source order
        """
        tokens = tokenize(self.content)
        tables: dict[str, dict[str, Any]] = {}
        pos = 0

        while pos < len(tokens):
            if not (tokens[pos].is_word("CREATE") and self._is_create_table(tokens, pos)):
                pos += 1
                continue

            create_token = tokens[pos]
            pos = self._skip_create_table_prefix(tokens, pos)
            schema_name, table_name, pos = self._read_table_name(tokens, pos, create_token)

            if pos >= len(tokens) or not tokens[pos].is_punct("("):
                where = tokens[pos] if pos < len(tokens) else tokens[-1]
                raise ParseError(
                    f"Expected '(' after table name '{table_name}'",
                    line=where.line,
                    column=where.column,
                )

            entries, pos = self._split_entries(tokens, pos)
            columns = []
            for entry in entries:
                column = self._parse_entry(entry)
                if column is not None:
                    columns.append(column)

            tables[table_name] = {"schema": schema_name, "columns": columns}
            logger.debug("Parsed table %s with %d column(s)", table_name, len(columns))

        return tables

    def _is_create_table(self, tokens: list[Token], pos: int) -> bool:
        pos += 1
        if pos < len(tokens) and tokens[pos].is_word("TEMP", "TEMPORARY"):
            pos += 1
        return pos < len(tokens) and tokens[pos].is_word("TABLE")

    def _skip_create_table_prefix(self, tokens: list[Token], pos: int) -> int:
        """Move past CREATE [TEMPORARY] TABLE [IF NOT EXISTS]."""
        pos += 1
        if tokens[pos].is_word("TEMP", "TEMPORARY"):
            pos += 1
        pos += 1
        if (
            pos + 2 < len(tokens)
            and tokens[pos].is_word("IF")
            and tokens[pos + 1].is_word("NOT")
            and tokens[pos + 2].is_word("EXISTS")
        ):
            pos += 3
        return pos

    def _read_table_name(
        self,
        tokens: list[Token],
        pos: int,
        create_token: Token,
    ) -> tuple[str | None, str, int]:
        if pos >= len(tokens) or not tokens[pos].is_name:
            where = tokens[pos] if pos < len(tokens) else create_token
            raise ParseError("Missing table name in CREATE TABLE", line=where.line, column=where.column)

        schema_name = None
        table_name = tokens[pos].value
        pos += 1
        if (
            pos + 1 < len(tokens)
            and tokens[pos].is_punct(".")
            and tokens[pos + 1].is_name
        ):
            schema_name = table_name
            table_name = tokens[pos + 1].value
            pos += 2
        return schema_name, table_name, pos

    def _split_entries(self, tokens: list[Token], pos: int) -> tuple[list[list[Token]], int]:
        """Split the parenthesized column list on top-level commas.

        Args:
            tokens: All tokens
            pos: Index of the opening parenthesis

        Returns:
            The entries and the index just past the closing parenthesis
        """
        opening = tokens[pos]
        depth = 1
        pos += 1
        entries: list[list[Token]] = []
        current: list[Token] = []

        while pos < len(tokens):
            token = tokens[pos]
            if token.is_punct("("):
                depth += 1
            elif token.is_punct(")"):
                depth -= 1
                if depth == 0:
                    if current:
                        entries.append(current)
                    return entries, pos + 1
            elif token.is_punct(",") and depth == 1:
                entries.append(current)
                current = []
                pos += 1
                continue
            current.append(token)
            pos += 1

        raise ParseError(
            "Unbalanced parentheses in column list",
            line=opening.line,
            column=opening.column,
        )

    def _parse_entry(self, entry: list[Token]) -> dict[str, Any] | None:
        """Parse one column list entry.

        Returns:
            Column info dict, or None for table-level constraints
        """
        if not entry:
            return None

        head = entry[0]
        if head.kind == WORD and head.value.upper() in CONSTRAINT_KEYWORDS:
            return None
        if not head.is_name:
            raise ParseError(
                f"Malformed column definition starting with '{head.text}'",
                line=head.line,
                column=head.column,
            )

        cursor = _Cursor(entry, 1)
        column: dict[str, Any] = {
            "name": head.value,
            "type": "",
            "args": None,
            "raw_type": "",
            "enum": None,
            "is_array": False,
            "unsigned": False,
            "not_null": False,
            "primary_key": False,
            "default": None,
            "comment": None,
        }

        self._parse_type(cursor, column)
        self._parse_constraints(cursor, column)
        return column

    def _parse_type(self, cursor: "_Cursor", column: dict[str, Any]) -> None:
        token = cursor.peek()
        if token is None or token.kind != WORD or token.is_word(*_TAIL_KEYWORDS):
            return

        if token.is_word(*_ENUM_TYPES) and cursor.peek(1) is not None and cursor.peek(1).is_punct("("):
            cursor.next()
            group = cursor.take_group()
            column["type"] = token.value.upper()
            column["enum"] = [t.value for t in group if t.kind == STRING]
            column["raw_type"] = f"{column['type']}({_join(group)})"
            return

        words = self._read_type_words(cursor, [])
        column["raw_type"] = " ".join(words)
        if cursor.peek() is not None and cursor.peek().is_punct("("):
            column["args"] = _join(cursor.take_group())
            column["raw_type"] += f"({column['args']})"
            before = len(words)
            words = self._read_type_words(cursor, words)
            column["raw_type"] += "".join(f" {w}" for w in words[before:])

        column["type"] = " ".join(words)

        next_token = cursor.peek()
        if next_token is not None and (next_token.is_punct("[]") or next_token.is_word("ARRAY")):
            cursor.next()
            column["is_array"] = True

    def _read_type_words(self, cursor: "_Cursor", words: list[str]) -> list[str]:
        """Read a base type word and extend it to a known multi-word phrase."""
        if not words:
            words = [cursor.next().value]

        complete = list(words)
        candidate = list(words)
        offset = 0
        while True:
            token = cursor.peek(offset)
            if token is None or token.kind != WORD:
                break
            candidate = candidate + [token.value]
            upper = tuple(w.upper() for w in candidate)
            if not any(phrase[:len(upper)] == upper for phrase in MULTIWORD_TYPES):
                break
            offset += 1
            if upper in MULTIWORD_TYPES:
                complete = list(candidate)

        cursor.skip(len(complete) - len(words))
        return complete

    def _parse_constraints(self, cursor: "_Cursor", column: dict[str, Any]) -> None:
        while cursor.peek() is not None:
            token = cursor.next()

            if token.is_word("NOT") and _peek_word(cursor, "NULL"):
                cursor.next()
                column["not_null"] = True
            elif token.is_word("PRIMARY") and _peek_word(cursor, "KEY"):
                cursor.next()
                column["primary_key"] = True
            elif token.is_word("UNSIGNED"):
                column["unsigned"] = True
            elif token.is_word("DEFAULT"):
                column["default"] = self._read_default(cursor)
            elif token.is_word("COMMENT"):
                literal = cursor.peek()
                if literal is not None and literal.kind in (STRING, IDENT):
                    cursor.next()
                    column["comment"] = literal.value
            elif token.is_word("CHECK") and cursor.peek() is not None and cursor.peek().is_punct("("):
                values = _check_in_values(cursor.take_group())
                if values and column["enum"] is None:
                    column["enum"] = values
            elif token.is_punct("("):
                cursor.back()
                cursor.take_group()

    def _read_default(self, cursor: "_Cursor") -> str | None:
        """Read a DEFAULT literal, keeping its source text."""
        token = cursor.peek()
        if token is None:
            return None

        if token.is_punct("("):
            literal = f"({_join(cursor.take_group())})"
        elif token.kind == PUNCT and token.value in ("-", "+"):
            cursor.next()
            number = cursor.peek()
            literal = token.value
            if number is not None and number.kind == NUMBER:
                cursor.next()
                literal += number.text
        else:
            cursor.next()
            literal = token.text
            if token.kind == WORD and cursor.peek() is not None and cursor.peek().is_punct("("):
                literal += f"({_join(cursor.take_group())})"

        # Postgres casts such as 'x'::character varying
        while cursor.peek() is not None and cursor.peek().is_punct("::"):
            cursor.next()
            if cursor.peek() is None or cursor.peek().kind != WORD:
                break
            self._read_type_words(cursor, [])
            if cursor.peek() is not None and cursor.peek().is_punct("("):
                cursor.take_group()

        return literal

    def _column_to_field(self, column: dict[str, Any], field_names: NameRegistry) -> FieldSpec:
        if column["enum"] is not None and column["type"].upper() in _ENUM_TYPES:
            canonical = CanonicalType.STRING
        elif not column["type"]:
            logger.warning("Column %s has no type; falling back to unknown", column["name"])
            canonical = CanonicalType.UNKNOWN
        else:
            canonical = map_sql_type(
                self.options.dialect,
                column["type"],
                unsigned=column["unsigned"],
                args=column["args"],
            )

        descriptor = TypeDescriptor.scalar(canonical)
        if column["is_array"]:
            descriptor = TypeDescriptor.array_of(descriptor)

        return FieldSpec(
            name=field_names.claim(to_pascal_case(column["name"])),
            source_name=column["name"],
            raw_type_token=column["raw_type"],
            descriptor=descriptor,
            nullable=not column["not_null"] and not column["primary_key"],
            enum_values=column["enum"],
            default_value_literal=column["default"],
            comment=column["comment"],
        )

    def list_tables(self) -> list[str]:
        """List all table names found in the DDL.

        Returns:
            List of table names
        """
        return list(self._tables.keys())

    def column_count(self) -> int:
        """Number of column definitions across all tables."""
        return sum(len(t["columns"]) for t in self._tables.values())

    def parse_table(self, table_name: str) -> StructSpec:
        """Parse a specific table by name.

        Args:
            table_name: Name of the table to parse

        Returns:
            StructSpec for the table
        """
        if table_name not in self._tables:
            available = ", ".join(self._tables.keys())
            raise ParseError(f"Table '{table_name}' not found. Available: {available}")

        field_names = NameRegistry()
        fields = [
            self._column_to_field(col, field_names)
            for col in self._tables[table_name]["columns"]
        ]
        return StructSpec(
            name=self.names.claim(to_pascal_case(table_name)),
            fields=fields,
        )

    def parse(self) -> list[StructSpec]:
        """Parse every table found in the DDL, in source order."""
        if not self._tables:
            raise ParseError("No CREATE TABLE statement found")
        return [self.parse_table(name) for name in self._tables]


class _Cursor:
    """Forward cursor over the tokens of one column entry."""

    def __init__(self, tokens: list[Token], pos: int = 0):
        self.tokens = tokens
        self.pos = pos

    def peek(self, offset: int = 0) -> Token | None:
        index = self.pos + offset
        return self.tokens[index] if index < len(self.tokens) else None

    def next(self) -> Token:
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def back(self) -> None:
        self.pos -= 1

    def skip(self, count: int) -> None:
        self.pos += count

    def take_group(self) -> list[Token]:
        """Consume a balanced '(' ... ')' group and return its inner tokens."""
        opening = self.next()
        depth = 1
        inner: list[Token] = []
        while self.peek() is not None:
            token = self.next()
            if token.is_punct("("):
                depth += 1
            elif token.is_punct(")"):
                depth -= 1
                if depth == 0:
                    return inner
            inner.append(token)
        raise ParseError("Unbalanced parentheses", line=opening.line, column=opening.column)


def _peek_word(cursor: _Cursor, word: str) -> bool:
    token = cursor.peek()
    return token is not None and token.is_word(word)


def _join(tokens: list[Token]) -> str:
    """Rebuild compact source text from tokens, spacing only between words."""
    parts: list[str] = []
    previous: Token | None = None
    for token in tokens:
        if previous is not None and previous.kind != PUNCT and token.kind != PUNCT:
            parts.append(" ")
        parts.append(token.text)
        previous = token
    return "".join(parts)


def _check_in_values(group: list[Token]) -> list[str] | None:
    """Extract the literal list from CHECK (col IN ('a', 'b'))."""
    for index, token in enumerate(group):
        if token.is_word("IN") and index + 1 < len(group) and group[index + 1].is_punct("("):
            values = []
            for inner in group[index + 2:]:
                if inner.is_punct(")"):
                    break
                if inner.kind == STRING:
                    values.append(inner.value)
            return values or None
    return None
