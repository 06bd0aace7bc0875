"""Conversion options - the knobs a caller can turn.

Options declare which SQL dialect vocabulary to use, which tag style to emit
and how nullable fields are rendered. They contain no conversion logic.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Dialect(str, Enum):
    """Relational database type vocabularies."""

    MYSQL = "mysql"
    POSTGRES = "postgres"
    SQLITE = "sqlite"
    ORACLE = "oracle"


class TagStyle(str, Enum):
    """Persistence tag conventions appended after the serialization tags."""

    PLAIN = "plain"
    DB = "db"
    GORM = "gorm"
    XORM = "xorm"


DEFAULT_ROOT_NAME = "AutoGen"


class ConversionOptions(BaseModel):
    """Options for a single conversion call."""

    model_config = ConfigDict(frozen=True)

    dialect: Dialect = Field(default=Dialect.MYSQL, description="SQL dialect for type mapping")
    tag_style: TagStyle = Field(default=TagStyle.PLAIN, description="Tag style for rendered fields")
    use_pointer_for_nullable: bool = Field(
        default=False,
        description="Render every non-array field as a pointer",
    )
    root_name: str = Field(
        default=DEFAULT_ROOT_NAME,
        min_length=1,
        pattern=r"^[A-Za-z_]\w*$",
        description="Struct name for formats without a natural name (JSON, YAML, CSV)",
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "dialect": self.dialect.value,
            "tag_style": self.tag_style.value,
            "use_pointer_for_nullable": self.use_pointer_for_nullable,
            "root_name": self.root_name,
        }
