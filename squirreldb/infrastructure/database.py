"""Storage Engine — async SQLAlchemy engine wrapper exposing execute/query_one/query_all.

Invariants:
    - Exactly one connection per engine (StaticPool) for the store's lifetime
    - Every call runs in its own transaction: committed on success, rolled back on error
    - All SQLAlchemy exceptions, and the binding errors sqlite3 raises unwrapped
      (OverflowError, UnicodeEncodeError), mapped to InvalidTypeError
      (core/errors.py) with the driver message embedded in the error text

Design Decisions:
    - StaticPool over a real pool: one logical owner per store, and an in-memory
      database must keep seeing the same connection
    - An asyncio.Lock serializes statements on that single connection; it is held
      for one statement only, never across mirror replication
    - Results are buffered before the transaction closes, so UPDATE ... RETURNING
      rows are safe to read after commit
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import AsyncConnection, create_async_engine
from sqlalchemy.pool import StaticPool

from squirreldb.core.errors import ErrorContext, InvalidTypeError

logger = logging.getLogger(__name__)


def _driver_message(e: SQLAlchemyError) -> str:
    orig = getattr(e, "orig", None)
    return str(orig) if orig is not None else str(e)


class StorageEngine:
    """Single-connection async SQLite engine with error mapping."""

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.engine = create_async_engine(
            database_url, echo=echo, poolclass=StaticPool,
        )
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def _transaction(
        self, operation: str, sql: str,
    ) -> AsyncGenerator[AsyncConnection, None]:
        """Provide a connection inside a transaction, mapping driver errors."""
        ctx = ErrorContext(operation=operation, debug_info={"sql": sql})
        try:
            async with self._lock, self.engine.begin() as conn:
                yield conn
        except IntegrityError as e:
            logger.error(f"Storage integrity error: {e}")
            raise InvalidTypeError(
                f"Integrity constraint violated: {_driver_message(e)}", ctx,
            ) from e
        except OperationalError as e:
            logger.error(f"Storage operational error: {e}")
            raise InvalidTypeError(
                f"Statement failed: {_driver_message(e)}", ctx,
            ) from e
        except DBAPIError as e:
            logger.error(f"Storage driver error: {e}")
            raise InvalidTypeError(
                f"Database driver error: {_driver_message(e)}", ctx,
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"SQLAlchemy error: {e}")
            raise InvalidTypeError(
                f"Database operation failed: {_driver_message(e)}", ctx,
            ) from e
        except (OverflowError, UnicodeEncodeError, ValueError) as e:
            # raised by the sqlite3 binding itself, never wrapped by SQLAlchemy
            logger.error(f"Storage parameter binding failed: {e}")
            raise InvalidTypeError(f"Statement failed: {e}", ctx) from e

    async def execute(self, sql: str, params: dict[str, Any] | None = None) -> int:
        """Run one mutating statement; returns affected rows (-1 for DDL)."""
        async with self._transaction("execute", sql) as conn:
            result = await conn.execute(text(sql), params or {})
            return result.rowcount

    async def query_one(
        self, sql: str, params: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        async with self._transaction("query_one", sql) as conn:
            result = await conn.execute(text(sql), params or {})
            row = result.mappings().first()
            return dict(row) if row is not None else None

    async def query_all(
        self, sql: str, params: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        async with self._transaction("query_all", sql) as conn:
            result = await conn.execute(text(sql), params or {})
            return [dict(row) for row in result.mappings().all()]

    async def health_check(self) -> bool:
        """Check storage connectivity."""
        try:
            await self.query_one("SELECT 1 AS ok")
            return True
        except InvalidTypeError as e:
            logger.error(f"Storage health check failed: {e}")
            return False

    async def close(self) -> None:
        await self.engine.dispose()
