"""Per-dialect SQL type mapping tables.

Each dialect has its own read-only table from a normalized base type
(upper-cased, whitespace collapsed) to a canonical type. Tables are built once
at import time and never mutated.

Lookup order:
    1. exact match on the normalized base type
    2. dialect special cases (MySQL TINYINT(1), Oracle NUMBER)
    3. whole-word match against known keys, longest key first
       (handles DOUBLE PRECISION in dialects that only know DOUBLE)
    4. unknown
Signed integer results are swapped for their unsigned counterpart when the
column is UNSIGNED.
"""

import logging
import re
from types import MappingProxyType
from typing import Mapping

from structgen.errors import UnsupportedTypeError
from structgen.options.base import Dialect
from structgen.schemas.base import CanonicalType

logger = logging.getLogger(__name__)

C = CanonicalType

MYSQL_TYPES: Mapping[str, CanonicalType] = MappingProxyType({
    # Integers
    "TINYINT": C.INT8,
    "SMALLINT": C.INT16,
    "MEDIUMINT": C.INT32,
    "INT": C.INT32,
    "INTEGER": C.INT32,
    "BIGINT": C.INT64,
    "YEAR": C.INT16,
    # Floats
    "FLOAT": C.FLOAT32,
    "DOUBLE": C.FLOAT64,
    "REAL": C.FLOAT64,
    "DECIMAL": C.FLOAT64,
    "NUMERIC": C.FLOAT64,
    # Strings
    "CHAR": C.STRING,
    "VARCHAR": C.STRING,
    "TINYTEXT": C.STRING,
    "TEXT": C.STRING,
    "MEDIUMTEXT": C.STRING,
    "LONGTEXT": C.STRING,
    "ENUM": C.STRING,
    "SET": C.STRING,
    # Boolean
    "BOOL": C.BOOL,
    "BOOLEAN": C.BOOL,
    "BIT": C.BOOL,
    # Date/Time
    "DATE": C.TIMESTAMP,
    "TIME": C.TIMESTAMP,
    "DATETIME": C.TIMESTAMP,
    "TIMESTAMP": C.TIMESTAMP,
    # Binary
    "BINARY": C.BYTES,
    "VARBINARY": C.BYTES,
    "TINYBLOB": C.BYTES,
    "BLOB": C.BYTES,
    "MEDIUMBLOB": C.BYTES,
    "LONGBLOB": C.BYTES,
    # JSON
    "JSON": C.JSON,
})

POSTGRES_TYPES: Mapping[str, CanonicalType] = MappingProxyType({
    # Integers
    "SMALLINT": C.INT16,
    "INT2": C.INT16,
    "SMALLSERIAL": C.INT16,
    "INTEGER": C.INT32,
    "INT": C.INT32,
    "INT4": C.INT32,
    "SERIAL": C.INT32,
    "BIGINT": C.INT64,
    "INT8": C.INT64,
    "BIGSERIAL": C.INT64,
    # Floats
    "REAL": C.FLOAT32,
    "FLOAT4": C.FLOAT32,
    "DOUBLE PRECISION": C.FLOAT64,
    "FLOAT8": C.FLOAT64,
    "FLOAT": C.FLOAT64,
    "DECIMAL": C.FLOAT64,
    "NUMERIC": C.FLOAT64,
    "MONEY": C.FLOAT64,
    # Strings
    "CHAR": C.STRING,
    "CHARACTER": C.STRING,
    "VARCHAR": C.STRING,
    "CHARACTER VARYING": C.STRING,
    "TEXT": C.STRING,
    "CITEXT": C.STRING,
    "UUID": C.STRING,
    "INET": C.STRING,
    "CIDR": C.STRING,
    # Boolean
    "BOOLEAN": C.BOOL,
    "BOOL": C.BOOL,
    # Date/Time
    "DATE": C.TIMESTAMP,
    "TIME": C.TIMESTAMP,
    "TIMETZ": C.TIMESTAMP,
    "TIMESTAMP": C.TIMESTAMP,
    "TIMESTAMPTZ": C.TIMESTAMP,
    "TIMESTAMP WITH TIME ZONE": C.TIMESTAMP,
    "TIMESTAMP WITHOUT TIME ZONE": C.TIMESTAMP,
    # Binary
    "BYTEA": C.BYTES,
    # JSON
    "JSON": C.JSON,
    "JSONB": C.JSON,
})

SQLITE_TYPES: Mapping[str, CanonicalType] = MappingProxyType({
    "INTEGER": C.INT64,
    "INT": C.INT64,
    "BIGINT": C.INT64,
    "REAL": C.FLOAT64,
    "DOUBLE": C.FLOAT64,
    "FLOAT": C.FLOAT64,
    "NUMERIC": C.FLOAT64,
    "DECIMAL": C.FLOAT64,
    "TEXT": C.STRING,
    "VARCHAR": C.STRING,
    "CHAR": C.STRING,
    "CLOB": C.STRING,
    "BOOLEAN": C.BOOL,
    "DATE": C.TIMESTAMP,
    "DATETIME": C.TIMESTAMP,
    "TIMESTAMP": C.TIMESTAMP,
    "BLOB": C.BYTES,
})

ORACLE_TYPES: Mapping[str, CanonicalType] = MappingProxyType({
    # NUMBER without a scale; NUMBER(p,s) is handled as a special case
    "NUMBER": C.INT64,
    "INTEGER": C.INT64,
    "INT": C.INT64,
    "SMALLINT": C.INT64,
    "FLOAT": C.FLOAT64,
    "BINARY_FLOAT": C.FLOAT32,
    "BINARY_DOUBLE": C.FLOAT64,
    "CHAR": C.STRING,
    "NCHAR": C.STRING,
    "VARCHAR": C.STRING,
    "VARCHAR2": C.STRING,
    "NVARCHAR2": C.STRING,
    "CLOB": C.STRING,
    "NCLOB": C.STRING,
    "LONG": C.STRING,
    "DATE": C.TIMESTAMP,
    "TIMESTAMP": C.TIMESTAMP,
    "TIMESTAMP WITH TIME ZONE": C.TIMESTAMP,
    "TIMESTAMP WITH LOCAL TIME ZONE": C.TIMESTAMP,
    "RAW": C.BYTES,
    "LONG RAW": C.BYTES,
    "BLOB": C.BYTES,
})

DIALECT_TABLES: Mapping[Dialect, Mapping[str, CanonicalType]] = MappingProxyType({
    Dialect.MYSQL: MYSQL_TYPES,
    Dialect.POSTGRES: POSTGRES_TYPES,
    Dialect.SQLITE: SQLITE_TYPES,
    Dialect.ORACLE: ORACLE_TYPES,
})

UNSIGNED_COUNTERPARTS: Mapping[CanonicalType, CanonicalType] = MappingProxyType({
    C.INT8: C.UINT8,
    C.INT16: C.UINT16,
    C.INT32: C.UINT32,
    C.INT64: C.UINT64,
})

# Keys sorted longest first so "DOUBLE PRECISION" wins over "DOUBLE"
_KEYS_BY_LENGTH: Mapping[Dialect, tuple[str, ...]] = MappingProxyType({
    dialect: tuple(sorted(table, key=lambda k: (-len(k), k)))
    for dialect, table in DIALECT_TABLES.items()
})

_WHITESPACE = re.compile(r"\s+")


def normalize_type(sql_type: str) -> str:
    """Upper-case a type name and collapse internal whitespace."""
    return _WHITESPACE.sub(" ", sql_type.strip()).upper()


def _split_args(args: str | None) -> list[str]:
    if not args:
        return []
    return [a.strip() for a in args.split(",") if a.strip()]


def resolve_sql_type(
    dialect: Dialect | str,
    sql_type: str,
    unsigned: bool = False,
    args: str | None = None,
) -> CanonicalType:
    """Resolve a SQL base type to a canonical type.

    Args:
        dialect: Dialect whose vocabulary is used
        sql_type: Base type token(s), e.g. "int" or "double precision"
        unsigned: Whether the column was declared UNSIGNED
        args: Raw text between the type's parentheses, e.g. "10,2"

    Returns:
        The canonical type

    Raises:
        UnsupportedTypeError: If the dialect does not know the type
    """
    dialect = Dialect(dialect)
    normalized = normalize_type(sql_type)
    arg_list = _split_args(args)

    special = _special_case(dialect, normalized, unsigned, arg_list)
    if special is not None:
        return special

    table = DIALECT_TABLES[dialect]
    canonical = table.get(normalized)

    if canonical is None:
        words = f" {normalized} "
        for key in _KEYS_BY_LENGTH[dialect]:
            if f" {key} " in words:
                canonical = table[key]
                break

    if canonical is None:
        raise UnsupportedTypeError(sql_type, f"not in the {dialect.value} vocabulary")

    if unsigned and canonical in UNSIGNED_COUNTERPARTS:
        canonical = UNSIGNED_COUNTERPARTS[canonical]
    return canonical


def _special_case(
    dialect: Dialect,
    normalized: str,
    unsigned: bool,
    args: list[str],
) -> CanonicalType | None:
    if dialect == Dialect.MYSQL and normalized == "TINYINT" and args == ["1"]:
        return C.BOOL

    if dialect == Dialect.ORACLE and normalized == "NUMBER":
        if len(args) >= 2:
            return C.FLOAT64
        return C.UINT64 if unsigned else C.INT64

    return None


def map_sql_type(
    dialect: Dialect | str,
    sql_type: str,
    unsigned: bool = False,
    args: str | None = None,
) -> CanonicalType:
    """Resolve a SQL type, degrading to unknown when it is not supported."""
    try:
        return resolve_sql_type(dialect, sql_type, unsigned, args)
    except UnsupportedTypeError as e:
        logger.warning("%s; falling back to unknown", e)
        return C.UNKNOWN


def known_types(dialect: Dialect | str) -> Mapping[str, CanonicalType]:
    """Read-only view of one dialect's table."""
    return DIALECT_TABLES[Dialect(dialect)]
