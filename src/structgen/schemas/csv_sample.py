"""CSV header mapper.

The schema is inferred from a single sample: the header line and the first
data line. Extra cells beyond the header are ignored; missing cells are
treated as empty strings.
"""

import csv
import logging

from structgen.errors import ParseError
from structgen.schemas.base import (
    FieldSpec,
    InputFormat,
    SourceParser,
    StructSpec,
    TypeDescriptor,
)
from structgen.schemas.inference import infer_literal_type
from structgen.utils.helpers import NameRegistry, to_identifier

logger = logging.getLogger(__name__)


class CsvParser(SourceParser):
    """Parser for CSV samples."""

    input_format = InputFormat.CSV

    def _sample_lines(self) -> tuple[list[str], list[str]]:
        lines = [line for line in self.content.splitlines() if line.strip()]
        if len(lines) < 2:
            raise ParseError("CSV needs a header line and at least one data line")

        rows = list(csv.reader(lines[:2], skipinitialspace=True))
        if len(rows) < 2:
            raise ParseError("CSV header has an unterminated quoted field")
        header, row = rows
        return [h.strip() for h in header], [v.strip() for v in row]

    def parse(self) -> list[StructSpec]:
        headers, values = self._sample_lines()
        struct = StructSpec(name=self.names.claim(self.options.root_name))
        field_names = NameRegistry()

        for index, header in enumerate(headers):
            value = values[index] if index < len(values) else ""
            kind = infer_literal_type(value)
            struct.fields.append(
                FieldSpec(
                    name=field_names.claim(to_identifier(header)),
                    source_name=header,
                    raw_type_token=kind.value,
                    descriptor=TypeDescriptor.scalar(kind),
                )
            )

        logger.debug("Mapped %d CSV column(s)", len(struct.fields))
        return [struct]
