"""XML tag extractor.

Does not model hierarchy: the root element names the struct and every
distinct leaf element (`<tag>text</tag>` with no child elements) anywhere in
the document becomes one field. A leaf name seen more than once becomes an
array field.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterator

from structgen.errors import ParseError
from structgen.schemas.base import (
    FieldSpec,
    InputFormat,
    SourceParser,
    StructSpec,
    TypeDescriptor,
)
from structgen.schemas.inference import infer_literal_type
from structgen.utils.helpers import NameRegistry, to_pascal_case

logger = logging.getLogger(__name__)

OPEN = "open"
CLOSE = "close"
EMPTY = "empty"
TEXT = "text"

_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>", re.IGNORECASE)
_TAG_NAME = re.compile(r"[^\s/>]+")


@dataclass(frozen=True)
class XmlEvent:
    """One markup or text event, positioned by 1-based line."""

    kind: str
    value: str
    line: int


def iter_events(text: str) -> Iterator[XmlEvent]:
    """Scan XML text into open/close/empty/text events.

    Comments, CDATA markers, processing instructions and doctype
    declarations are skipped.
    """
    pos = 0
    line = 1
    length = len(text)

    while pos < length:
        start = text.find("<", pos)
        if start == -1:
            chunk = text[pos:]
            if chunk.strip():
                yield XmlEvent(TEXT, chunk, line)
            return

        if start > pos:
            yield XmlEvent(TEXT, text[pos:start], line)
            line += text.count("\n", pos, start)

        if text.startswith("<!--", start):
            end = _find_end(text, "-->", start)
        elif text.startswith("<![CDATA[", start):
            end = _find_end(text, "]]>", start)
            yield XmlEvent(TEXT, text[start + 9:end - 3], line)
        elif text.startswith("<?", start) or text.startswith("<!", start):
            end = _find_end(text, ">", start)
        else:
            end = _find_end(text, ">", start)
            body = text[start + 1:end - 1].strip()
            if body.startswith("/"):
                yield XmlEvent(CLOSE, _tag_name(body[1:]), line)
            elif body.endswith("/"):
                yield XmlEvent(EMPTY, _tag_name(body[:-1]), line)
            elif body:
                yield XmlEvent(OPEN, _tag_name(body), line)

        line += text.count("\n", start, end)
        pos = end


def _find_end(text: str, marker: str, start: int) -> int:
    end = text.find(marker, start)
    if end == -1:
        return len(text)
    return end + len(marker)


def _tag_name(body: str) -> str:
    match = _TAG_NAME.match(body.strip())
    return match.group(0) if match else ""


def merge_text(events: Iterator[XmlEvent]) -> list[XmlEvent]:
    """Join runs of adjacent text events, e.g. text split by a comment or CDATA."""
    merged: list[XmlEvent] = []
    for event in events:
        if event.kind == TEXT and merged and merged[-1].kind == TEXT:
            previous = merged[-1]
            merged[-1] = XmlEvent(TEXT, previous.value + event.value, previous.line)
        else:
            merged.append(event)
    return merged


class XmlParser(SourceParser):
    """Parser for XML documents."""

    input_format = InputFormat.XML

    def parse(self) -> list[StructSpec]:
        text = _DECLARATION.sub("", self.content, count=1).strip()
        events = merge_text(iter_events(text))

        root = next((e for e in events if e.kind in (OPEN, EMPTY) and e.value), None)
        if root is None:
            raise ParseError("Could not find the XML root element")

        struct = StructSpec(name=self.names.claim(to_pascal_case(root.value)))
        fields: dict[str, FieldSpec] = {}
        field_names = NameRegistry()

        for name, value in self._iter_leaves(events):
            existing = fields.get(name)
            if existing is not None:
                if not existing.descriptor.is_array:
                    existing.descriptor = TypeDescriptor.array_of(existing.descriptor)
                continue

            kind = infer_literal_type(value.strip())
            field = FieldSpec(
                name=field_names.claim(to_pascal_case(name)),
                source_name=name,
                raw_type_token=kind.value,
                descriptor=TypeDescriptor.scalar(kind),
            )
            fields[name] = field
            struct.fields.append(field)

        logger.debug("Extracted %d field(s) under <%s>", len(struct.fields), root.value)
        return [struct]

    def _iter_leaves(self, events: list[XmlEvent]) -> Iterator[tuple[str, str]]:
        """Yield (tag, text) for every open/text/close run with the same tag."""
        index = 0
        while index < len(events):
            event = events[index]
            if event.kind == OPEN:
                following = events[index + 1:index + 3]
                if following and following[0].kind == CLOSE and following[0].value == event.value:
                    yield event.value, ""
                    index += 2
                    continue
                if (
                    len(following) == 2
                    and following[0].kind == TEXT
                    and following[1].kind == CLOSE
                    and following[1].value == event.value
                ):
                    yield event.value, following[0].value
                    index += 3
                    continue
            index += 1
