"""Shared configuration models for SCD-tracked tables."""

import re

from pydantic import BaseModel, Field, field_validator, model_validator

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class VersionedTable(BaseModel, frozen=True):
    """Immutable description of one SCD Type 2 table.

    Shared by the read and write paths. The table must carry a unique
    constraint on (id_column, version_column).
    """

    table_name: str = Field(..., min_length=1)
    id_column: str = Field(..., min_length=1)
    version_column: str = Field(
        ..., min_length=1,
        description="Integer column; current row has the highest value.",
    )

    @field_validator("table_name", "id_column", "version_column")
    @classmethod
    def _identifier(cls, value: str) -> str:
        if not _IDENTIFIER.match(value):
            msg = f"{value!r} is not a valid SQL identifier"
            raise ValueError(msg)
        return value

    @model_validator(mode="after")
    def _distinct_columns(self) -> "VersionedTable":
        if self.id_column == self.version_column:
            msg = "id_column and version_column must differ"
            raise ValueError(msg)
        return self
