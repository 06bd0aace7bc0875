"""Tokenizer for the subset of SQL used by CREATE TABLE statements.

Token kinds:
    word    bare keyword or identifier (CREATE, users, varchar)
    ident   quoted identifier: `name`, "name" or [name]
    string  single-quoted literal; '' and \\' are unescaped in value
    number  integer or decimal literal
    punct   one of ( ) , ; . = - + * :: []

Comments (--, # and /* */) and whitespace are dropped.
"""

from dataclasses import dataclass

from structgen.errors import ParseError

WORD = "word"
IDENT = "ident"
STRING = "string"
NUMBER = "number"
PUNCT = "punct"

_IDENT_CLOSERS = {'"': '"', "`": "`", "[": "]"}


@dataclass(frozen=True)
class Token:
    """A single lexical token with its source position (1-based)."""

    kind: str
    value: str
    text: str
    line: int
    column: int

    def is_word(self, *words: str) -> bool:
        return self.kind == WORD and self.value.upper() in words

    def is_punct(self, value: str) -> bool:
        return self.kind == PUNCT and self.value == value

    @property
    def is_name(self) -> bool:
        return self.kind in (WORD, IDENT)


class _Reader:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.line = 1
        self.column = 1

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.text[index] if index < len(self.text) else ""

    def advance(self, count: int = 1) -> None:
        for _ in range(count):
            if self.pos >= len(self.text):
                return
            if self.text[self.pos] == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def at_end(self) -> bool:
        return self.pos >= len(self.text)


def tokenize(text: str) -> list[Token]:
    """Split SQL text into tokens.

    Raises:
        ParseError: On an unterminated string or quoted identifier
    """
    reader = _Reader(text)
    tokens: list[Token] = []

    while not reader.at_end():
        ch = reader.peek()

        if ch.isspace():
            reader.advance()
            continue

        if (ch == "-" and reader.peek(1) == "-") or ch == "#":
            while not reader.at_end() and reader.peek() != "\n":
                reader.advance()
            continue

        if ch == "/" and reader.peek(1) == "*":
            reader.advance(2)
            while not reader.at_end() and not (reader.peek() == "*" and reader.peek(1) == "/"):
                reader.advance()
            reader.advance(2)
            continue

        start, line, column = reader.pos, reader.line, reader.column

        if ch == "'":
            value = _read_string(reader, line, column)
            tokens.append(Token(STRING, value, text[start:reader.pos], line, column))
        elif ch == "[" and _next_non_space(reader) == "]":
            while reader.peek() != "]":
                reader.advance()
            reader.advance()
            tokens.append(Token(PUNCT, "[]", text[start:reader.pos], line, column))
        elif ch in _IDENT_CLOSERS:
            value = _read_quoted_ident(reader, _IDENT_CLOSERS[ch], line, column)
            tokens.append(Token(IDENT, value, text[start:reader.pos], line, column))
        elif ch.isdigit() or (ch == "." and reader.peek(1).isdigit()):
            while reader.peek().isdigit() or reader.peek() == ".":
                reader.advance()
            tokens.append(Token(NUMBER, text[start:reader.pos], text[start:reader.pos], line, column))
        elif ch.isalpha() or ch == "_":
            while reader.peek().isalnum() or reader.peek() in ("_", "$"):
                reader.advance()
            word = text[start:reader.pos]
            tokens.append(Token(WORD, word, word, line, column))
        elif ch == ":" and reader.peek(1) == ":":
            reader.advance(2)
            tokens.append(Token(PUNCT, "::", "::", line, column))
        else:
            reader.advance()
            tokens.append(Token(PUNCT, ch, ch, line, column))

    return tokens


def _next_non_space(reader: _Reader) -> str:
    offset = 1
    while reader.peek(offset).isspace():
        offset += 1
    return reader.peek(offset)


def _read_string(reader: _Reader, line: int, column: int) -> str:
    reader.advance()
    chars: list[str] = []
    while True:
        if reader.at_end():
            raise ParseError("Unterminated string literal", line=line, column=column)
        ch = reader.peek()
        if ch == "\\" and reader.peek(1):
            chars.append(reader.peek(1))
            reader.advance(2)
        elif ch == "'" and reader.peek(1) == "'":
            chars.append("'")
            reader.advance(2)
        elif ch == "'":
            reader.advance()
            return "".join(chars)
        else:
            chars.append(ch)
            reader.advance()


def _read_quoted_ident(reader: _Reader, closer: str, line: int, column: int) -> str:
    reader.advance()
    chars: list[str] = []
    while True:
        if reader.at_end():
            raise ParseError("Unterminated quoted identifier", line=line, column=column)
        ch = reader.peek()
        if ch == closer and reader.peek(1) == closer:
            chars.append(closer)
            reader.advance(2)
        elif ch == closer:
            reader.advance()
            return "".join(chars)
        else:
            chars.append(ch)
            reader.advance()
