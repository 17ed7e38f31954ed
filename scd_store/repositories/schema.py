"""Field access on ORM records by storage column name.

Column -> field resolution comes from the SQLAlchemy mapper and is memoized
per (record type, column), so repeated writes never re-inspect the mapper.
"""

from functools import lru_cache
from typing import Any

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapper

from scd_store.errors import (
    ColumnNotMappedError,
    ConfigurationError,
    FieldNotFoundError,
    UnassignableFieldError,
)

_MISSING = object()


def mapper_for(record_type: type) -> Mapper:
    """Return the ORM mapper of *record_type*, or raise ConfigurationError."""
    mapper = sa_inspect(record_type, raiseerr=False)
    if not isinstance(mapper, Mapper):
        raise ConfigurationError(
            f"{record_type.__name__} is not a mapped ORM class",
        )
    return mapper


@lru_cache(maxsize=None)
def field_columns(record_type: type) -> tuple[tuple[str, str], ...]:
    """(field name, column name) pairs for every mapped column of a type."""
    return tuple(
        (attr.key, attr.columns[0].name)
        for attr in mapper_for(record_type).column_attrs
    )


@lru_cache(maxsize=None)
def _field_for_column(record_type: type, column_name: str) -> str:
    for field_name, mapped_column_name in field_columns(record_type):
        if mapped_column_name == column_name:
            return field_name
    raise ColumnNotMappedError(column_name, record_type)


def resolve_field_name(record: Any, column_name: str) -> str:
    """Map a storage column name to the attribute name on *record*'s type."""
    return _field_for_column(type(record), column_name)


def get_field_value(record: Any, field_name: str) -> Any:
    value = getattr(record, field_name, _MISSING)
    if value is _MISSING:
        raise FieldNotFoundError(field_name)
    return value


def _column_python_type(record_type: type, field_name: str) -> type | None:
    mapper = sa_inspect(record_type, raiseerr=False)
    if not isinstance(mapper, Mapper) or field_name not in mapper.column_attrs:
        return None
    column = mapper.column_attrs[field_name].columns[0]
    try:
        return column.type.python_type
    except NotImplementedError:
        return None


def set_field_value(record: Any, field_name: str, value: Any) -> None:
    """Assign *value* to *field_name* on *record*.

    Raises FieldNotFoundError when the field does not exist, and
    UnassignableFieldError when it is read-only or *value* does not match
    the mapped column's Python type.
    """
    if not hasattr(record, field_name):
        raise FieldNotFoundError(field_name)

    expected = _column_python_type(type(record), field_name)
    mismatched = expected is not None and (
        not isinstance(value, expected)
        or (isinstance(value, bool) and expected is not bool)
    )
    if value is not None and mismatched:
        raise UnassignableFieldError(
            field_name,
            f"field {field_name} expects {expected.__name__}, "
            f"got {type(value).__name__}",
        )

    try:
        setattr(record, field_name, value)
    except AttributeError as exc:
        raise UnassignableFieldError(field_name) from exc
