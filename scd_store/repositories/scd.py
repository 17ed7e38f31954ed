"""SCD Type 2 repository: current-row reads and versioned appends.

Read joins the caller's filtered query to a per-identity MAX(version) view,
so filters only ever match current rows. Write computes MAX(version) + 1 and
inserts inside one transaction scope.

Write safety under concurrency comes from the table's unique constraint on
(identity, version) and the engine's isolation level. The losing writer of
a race gets a StorageError; nothing is retried here.
"""

from typing import Any, TypeVar

import structlog
from sqlalchemy import Column, Select, Table, and_, func, select
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction

from scd_store.errors import (
    ColumnNotMappedError,
    ConfigurationError,
    PersistedRecordError,
    StorageError,
)
from scd_store.models.common import VersionedTable
from scd_store.repositories.base import QueryFilter, Reader, Writer
from scd_store.repositories.schema import (
    get_field_value,
    mapper_for,
    resolve_field_name,
    set_field_value,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def where(*criteria: Any) -> QueryFilter:
    """Build a filter that adds *criteria* to the query's WHERE clause."""

    def _apply(stmt: Select) -> Select:
        return stmt.where(*criteria)

    return _apply


class SCDRepository(Reader, Writer):
    """Reader and Writer for one SCD Type 2 table.

    Never commits a caller's unit of work: when the session is already in
    a transaction, write() runs in a SAVEPOINT and the caller commits.
    Otherwise write() owns the transaction and commits it.
    """

    def __init__(self, session: AsyncSession, config: VersionedTable) -> None:
        self._session = session
        self._config = config

    @property
    def config(self) -> VersionedTable:
        return self._config

    # --- Read ---

    async def read(self, model: type[T], *filters: QueryFilter) -> list[T]:
        """Return the current row of every identity that passes all *filters*.

        Filters are applied in order, conjunctively, before the join to the
        latest-version view. An identity whose current row fails a filter
        is absent even if an older version would have matched.
        """
        id_column, version_column = self._columns(model)

        try:
            latest = (
                select(
                    id_column.label("identity"),
                    func.max(version_column).label("max_version"),
                )
                .group_by(id_column)
                .subquery("latest")
            )

            stmt = select(model)
            for apply_filter in filters:
                stmt = apply_filter(stmt)

            stmt = stmt.join(
                latest,
                and_(
                    id_column == latest.c.identity,
                    version_column == latest.c.max_version,
                ),
            )
            result = await self._session.execute(stmt)
            rows = list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise self._storage_error("read", exc) from exc

        logger.debug(
            "scd_read",
            table=self._config.table_name,
            filters=len(filters),
            rows=len(rows),
        )
        return rows

    async def get_latest(self, model: type[T], identity: Any) -> T | None:
        """Current row for one identity, or None if it was never written."""
        id_column, _ = self._columns(model)
        rows = await self.read(model, where(id_column == identity))
        return rows[0] if rows else None

    async def get_versions(self, model: type[T], identity: Any) -> list[T]:
        """Every version of one identity, oldest first."""
        id_column, version_column = self._columns(model)
        try:
            result = await self._session.execute(
                select(model)
                .where(id_column == identity)
                .order_by(version_column.asc())
            )
            return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise self._storage_error("get_versions", exc) from exc

    # --- Write ---

    async def write(self, record: Any) -> int:
        """Insert *record* as the next version of its identity.

        The record's version field is overwritten in place with the assigned
        version, which is also returned. After a failed write the version
        field holds the attempted value; do not reuse the record.
        """
        id_field = resolve_field_name(record, self._config.id_column)
        version_field = resolve_field_name(record, self._config.version_column)
        id_column, version_column = self._columns(type(record))
        identity = get_field_value(record, id_field)

        if sa_inspect(record).has_identity:
            raise PersistedRecordError(
                f"{type(record).__name__} for {identity!r} is already persisted; "
                "write a new instance",
            )

        owns_transaction = not self._session.in_transaction()
        try:
            async with self._transaction():
                result = await self._session.execute(
                    select(func.coalesce(func.max(version_column), 0))
                    .where(id_column == identity)
                )
                version = self._next_version(result.scalar_one())
                set_field_value(record, version_field, version)
                self._session.add(record)
                await self._session.flush()
            # Commit expired the record; reload so the caller can read its version.
            if owns_transaction and self._session.sync_session.expire_on_commit:
                await self._session.refresh(record)
        except SQLAlchemyError as exc:
            logger.warning(
                "scd_write_failed",
                table=self._config.table_name,
                identity=identity,
                error=type(exc).__name__,
            )
            raise self._storage_error("write", exc) from exc

        logger.info(
            "scd_version_written",
            table=self._config.table_name,
            identity=identity,
            version=version,
        )
        return version

    @staticmethod
    def _next_version(max_version: int) -> int:
        return max_version + 1

    def _transaction(self) -> AsyncSessionTransaction:
        if self._session.in_transaction():
            return self._session.begin_nested()
        return self._session.begin()

    # --- Helpers ---

    def _columns(self, model: type) -> tuple[Column, Column]:
        """(identity, version) columns of *model*'s table."""
        table = mapper_for(model).local_table
        if not isinstance(table, Table) or table.name != self._config.table_name:
            raise ConfigurationError(
                f"{model.__name__} is not mapped to table "
                f"{self._config.table_name}",
            )
        by_name = {column.name: column for column in table.columns}
        try:
            return (
                by_name[self._config.id_column],
                by_name[self._config.version_column],
            )
        except KeyError as exc:
            raise ColumnNotMappedError(exc.args[0], model) from None

    def _storage_error(self, operation: str, exc: SQLAlchemyError) -> StorageError:
        return StorageError(
            f"{operation} on {self._config.table_name} failed: {exc}",
            operation=operation,
            table_name=self._config.table_name,
        )


def new_scd(session: AsyncSession, config: VersionedTable) -> SCDRepository:
    """Create a repository bound to *session* for the table in *config*."""
    return SCDRepository(session, config)
