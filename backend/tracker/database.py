"""
Behavior Tracker Backend: Database Client
==========================================

What:  Async SQLAlchemy engine factory, declarative Base, and the
       DatabaseClient that routes use for row CRUD against named tables.
How:   The client resolves table names through `Base.metadata`, builds
       SQLAlchemy Core statements, and returns plain dict rows. Driver
       failures are wrapped in DatabaseError.
Who:   Built once in the application lifespan (main.py), stored on
       `app.state.db`, and injected into routes through `get_db_client`.

Connection Pooling:
    pool_size / max_overflow / pool_pre_ping come from settings and only
    apply to server databases. SQLite URLs (used by the test suite) get
    SQLAlchemy's default pool for the dialect.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from fastapi import Request
from sqlalchemy import Table, event, func, insert, or_, select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from tracker.config import Settings
from tracker.exceptions import ConflictError, DatabaseError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all ORM table models; its metadata drives Alembic."""
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores REFERENCES clauses unless asked per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Creates the process-wide async engine for the configured database URL."""
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not settings.database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    engine = create_async_engine(settings.database_url, **options)
    if settings.database_url.startswith("sqlite"):
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


@dataclass
class RowQuery:
    """
    Declarative description of a row selection.

    Attributes:
        match:           column → value equality filters (AND-ed)
        search:          case-insensitive substring matched against
                         `search_columns` (OR-ed)
        range_column:    column that `lower` / `upper` bound (inclusive)
        order_by:        column to sort by; `descending` flips direction
        limit / offset:  page window
    """

    match: Dict[str, Any] = field(default_factory=dict)
    search: Optional[str] = None
    search_columns: Tuple[str, ...] = ()
    range_column: Optional[str] = None
    lower: Optional[datetime] = None
    upper: Optional[datetime] = None
    order_by: Optional[str] = None
    descending: bool = False
    limit: Optional[int] = None
    offset: int = 0


class DatabaseClient:
    """
    Thin row-CRUD facade over an AsyncEngine.

    Every method opens its own connection (`engine.begin()` for writes) so
    a request never holds a connection between calls.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    # ── Helpers ───────────────────────────────────────────────────────────

    def table(self, name: str) -> Table:
        try:
            return Base.metadata.tables[name]
        except KeyError:
            raise DatabaseError(
                message=f"Unknown table '{name}'",
                context={"table": name},
            ) from None

    def _where(self, table: Table, query: RowQuery) -> List[Any]:
        clauses = [table.c[column] == value for column, value in query.match.items()]
        if query.search and query.search_columns:
            # autoescape: a user-typed % or _ matches itself, not any text
            term = query.search.lower()
            clauses.append(
                or_(
                    *(
                        func.lower(table.c[column]).contains(term, autoescape=True)
                        for column in query.search_columns
                    )
                )
            )
        if query.range_column:
            column = table.c[query.range_column]
            if query.lower is not None:
                clauses.append(column >= query.lower)
            if query.upper is not None:
                clauses.append(column <= query.upper)
        return clauses

    @staticmethod
    def _wrap(operation: str, table: str, exc: SQLAlchemyError) -> DatabaseError:
        logger.error("Database %s on '%s' failed: %s", operation, table, exc)
        return DatabaseError(
            context={
                "operation": operation,
                "table": table,
                "error_type": type(exc).__name__,
                "detail": str(getattr(exc, "orig", None) or exc),
            }
        )

    # ── Reads ─────────────────────────────────────────────────────────────

    async def select(self, table_name: str, query: Optional[RowQuery] = None) -> List[Dict[str, Any]]:
        """Returns rows of `table_name` matching `query` as dicts."""
        query = query or RowQuery()
        table = self.table(table_name)
        statement = select(table).where(*self._where(table, query))
        if query.order_by:
            column = table.c[query.order_by]
            statement = statement.order_by(column.desc() if query.descending else column.asc())
        if query.limit is not None:
            statement = statement.limit(query.limit)
        if query.offset:
            statement = statement.offset(query.offset)
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(statement)
                return [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as exc:
            raise self._wrap("select", table_name, exc) from exc

    async def select_one(self, table_name: str, **match: Any) -> Optional[Dict[str, Any]]:
        rows = await self.select(table_name, RowQuery(match=match, limit=1))
        return rows[0] if rows else None

    async def count(self, table_name: str, query: Optional[RowQuery] = None) -> int:
        query = query or RowQuery()
        table = self.table(table_name)
        statement = select(func.count()).select_from(table).where(*self._where(table, query))
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(statement)
                return int(result.scalar() or 0)
        except SQLAlchemyError as exc:
            raise self._wrap("count", table_name, exc) from exc

    # ── Writes ────────────────────────────────────────────────────────────

    async def insert(
        self, table_name: str, rows: Sequence[Mapping[str, Any]]
    ) -> List[Dict[str, Any]]:
        """
        Inserts `rows` in one transaction and returns them as stored.

        Unique-constraint violations surface as ConflictError; every other
        driver error as DatabaseError.
        """
        if not rows:
            return []
        table = self.table(table_name)
        statement = insert(table).returning(*table.c)
        try:
            async with self.engine.begin() as conn:
                stored = []
                for row in rows:
                    result = await conn.execute(statement, dict(row))
                    stored.append(dict(result.mappings().one()))
                return stored
        except IntegrityError as exc:
            logger.warning("Insert into '%s' violated a constraint: %s", table_name, exc.orig)
            raise ConflictError(
                message=f"Row for '{table_name}' conflicts with existing data "
                "or references a missing row",
                context={"table": table_name, "detail": str(exc.orig)},
            ) from exc
        except SQLAlchemyError as exc:
            raise self._wrap("insert", table_name, exc) from exc

    async def update(
        self, table_name: str, values: Mapping[str, Any], **match: Any
    ) -> List[Dict[str, Any]]:
        """Applies `values` to rows equal on `match`; returns the updated rows."""
        table = self.table(table_name)
        statement = (
            update(table)
            .where(*(table.c[column] == value for column, value in match.items()))
            .values(**values)
            .returning(*table.c)
        )
        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(statement)
                return [dict(row) for row in result.mappings().all()]
        except IntegrityError as exc:
            logger.warning("Update of '%s' violated a constraint: %s", table_name, exc.orig)
            raise ConflictError(
                message="The update conflicts with existing data",
                context={"table": table_name, "detail": str(exc.orig)},
            ) from exc
        except SQLAlchemyError as exc:
            raise self._wrap("update", table_name, exc) from exc

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def ping(self) -> None:
        """Connectivity probe used by the health check; raises DatabaseError."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise self._wrap("ping", "-", exc) from exc
        except OSError as exc:
            raise DatabaseError(
                context={"operation": "ping", "error_type": type(exc).__name__, "detail": str(exc)}
            ) from exc

    async def create_tables(self) -> None:
        """Creates every registered table. Used by tests and local bootstrap."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Closes all pooled connections (application shutdown)."""
        await self.engine.dispose()


def get_db_client(request: Request) -> DatabaseClient:
    """FastAPI dependency returning the client built by the lifespan handler."""
    client = getattr(request.app.state, "db", None)
    if client is None:
        raise DatabaseError(message="Database client is not initialised")
    return client
