"""Error taxonomy for the SCD store.

Nothing is retried or suppressed internally. Storage failures are re-raised
as StorageError with the original SQLAlchemy exception chained as __cause__.
"""


class SCDError(Exception):
    """Base class for all SCD store errors."""


class ConfigurationError(SCDError):
    """Configured table/column does not match the record type."""


class FieldAccessError(SCDError):
    """A record field cannot be read or written."""

    def __init__(self, field_name: str, message: str) -> None:
        super().__init__(message)
        self.field_name = field_name


class FieldNotFoundError(FieldAccessError):
    """The record has no field with the requested name."""

    def __init__(self, field_name: str, message: str | None = None) -> None:
        super().__init__(field_name, message or f"field {field_name} not found")


class UnassignableFieldError(FieldAccessError):
    """The field exists but is read-only or the value type is incompatible."""

    def __init__(self, field_name: str, message: str | None = None) -> None:
        super().__init__(field_name, message or f"field {field_name} cannot be set")


class ColumnNotMappedError(ConfigurationError, FieldNotFoundError):
    """No field on the record type maps to the configured column."""

    def __init__(self, column_name: str, record_type: type) -> None:
        FieldNotFoundError.__init__(
            self,
            column_name,
            f"column {column_name} not found in model {record_type.__name__}",
        )
        self.column_name = column_name
        self.record_type = record_type


class PersistedRecordError(SCDError):
    """Record already has a database identity; versions are insert-only."""


class StorageError(SCDError):
    """Any failure raised by the database layer."""

    def __init__(self, message: str, *, operation: str, table_name: str) -> None:
        super().__init__(message)
        self.operation = operation
        self.table_name = table_name
