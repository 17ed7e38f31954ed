"""scd_store - SCD Type 2 tables over SQLAlchemy.

Append-only versioned rows: read the current row per identity under arbitrary
filters, and write new versions with transactionally assigned numbers.
"""

from scd_store.errors import (
    ColumnNotMappedError,
    ConfigurationError,
    FieldAccessError,
    FieldNotFoundError,
    PersistedRecordError,
    SCDError,
    StorageError,
    UnassignableFieldError,
)
from scd_store.models.common import VersionedTable
from scd_store.repositories.base import QueryFilter, Reader, Writer
from scd_store.repositories.scd import SCDRepository, new_scd, where

__all__ = [
    "ColumnNotMappedError",
    "ConfigurationError",
    "FieldAccessError",
    "FieldNotFoundError",
    "PersistedRecordError",
    "QueryFilter",
    "Reader",
    "SCDError",
    "SCDRepository",
    "StorageError",
    "UnassignableFieldError",
    "VersionedTable",
    "Writer",
    "new_scd",
    "where",
]
__version__ = "0.1.0"
