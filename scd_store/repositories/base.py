"""Abstract read/write interfaces for SCD Type 2 tables.

Readers only ever see current rows. Writers only ever insert; rows are never
updated or deleted once written.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, TypeVar

from sqlalchemy import Select

T = TypeVar("T")

QueryFilter = Callable[[Select], Select]


class Reader(ABC):
    """Resolves the current row per identity."""

    @abstractmethod
    async def read(self, model: type[T], *filters: QueryFilter) -> list[T]:
        ...


class Writer(ABC):
    """Appends new versions."""

    @abstractmethod
    async def write(self, record: Any) -> int:
        ...
