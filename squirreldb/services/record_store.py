"""Record Store — SquirrelDB, the schema-typed record store and its public operations.

Invariants:
    - Every write is validated against the registered schema before any SQL runs
    - Values cross the storage boundary only through core/coercion.py
    - Mutating operations replicate to mirrors only after the local statement succeeded
    - Reads (get, all, has, starts_with) never replicate
    - Re-registering a table may only append columns; memory and storage never diverge

Design Decisions:
    - Storage engine injected as StorageEngineLike: tests and callers may pass any
      object with execute/query_one/query_all/health_check, default is a SQLite
      file via aiosqlite
    - increment is one UPDATE ... RETURNING, replicated to mirrors as an add of the
      returned row so mirrors converge on the primary's value
    - No cross-record transactions and no rollback on mirror failure
"""

import logging
from typing import Any

from squirreldb.config import Settings, database_url_for, get_settings
from squirreldb.core import statements
from squirreldb.core.coercion import from_storage
from squirreldb.core.domain_types import (
    ColumnType, Record, RecordId, TableName, TableSchema,
)
from squirreldb.core.errors import (
    ErrorContext, InvalidTypeError, MissingValueError, ParseExceptionError,
)
from squirreldb.core.schema_registry import (
    SchemaRegistry, check_identifier, normalize_schema, plan_migration,
)
from squirreldb.core.storage_protocols import StorageEngineLike
from squirreldb.core.validation import validate_record
from squirreldb.infrastructure.database import StorageEngine
from squirreldb.infrastructure.observability import setup_logging
from squirreldb.schemas.table import parse_table_schema
from squirreldb.services.mirror_coordinator import MirrorCoordinator

logger = logging.getLogger(__name__)


def _require_str(value: Any, what: str, ctx: ErrorContext | None = None) -> str:
    if not isinstance(value, str):
        raise InvalidTypeError(
            f"{what} must be a string, received \"{type(value).__name__}\"", ctx,
        )
    return value


class SquirrelDB:
    """Schema-typed record store over one storage engine, with optional mirrors.

    `tables` are reserved table names kept for the caller's reference; each
    still needs init_table() before use. `file_path` defaults to
    Settings.file_path ("db.sqlite"); ":memory:" gives a private database.
    `configure_logging` installs the package log handler from
    Settings.log_level and Settings.log_format.
    """

    def __init__(
        self,
        tables: list[str] | None = None,
        file_path: str | None = None,
        *,
        settings: Settings | None = None,
        engine: StorageEngineLike | None = None,
        configure_logging: bool = False,
    ):
        self.settings = settings or get_settings()
        if configure_logging:
            setup_logging(self.settings.log_level, self.settings.log_format)
        self.tables: list[str] = list(tables or [])
        self.file_path = file_path or self.settings.file_path
        self._engine: StorageEngineLike = engine or StorageEngine(
            database_url_for(self.file_path), echo=self.settings.echo_sql,
        )
        self._registry = SchemaRegistry()
        self.mirrors = MirrorCoordinator(self, self.settings.mirror_policy)

    # ─── Lifecycle ───────────────────────────────────────────────

    async def close(self) -> None:
        await self._engine.close()

    async def __aenter__(self) -> "SquirrelDB":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def health_check(self) -> bool:
        return await self._engine.health_check()

    @property
    def engine(self) -> StorageEngineLike:
        return self._engine

    def schema(self, table_name: TableName) -> TableSchema | None:
        """Registered schema for a table, or None."""
        return self._registry.lookup(table_name)

    # ─── Schema ──────────────────────────────────────────────────

    async def init_table(self, table_name: TableName, schema: Any) -> TableSchema:
        """Register a schema and create (or extend) its storage table."""
        check_identifier(table_name, "Table name")
        self._registry.ensure_unaliased(table_name)
        normalized = normalize_schema(
            table_name, parse_table_schema(table_name, schema),
        )

        previous = self._registry.lookup(table_name)
        if previous is not None:
            added = plan_migration(table_name, previous, normalized)
            logger.warning(
                f"Table {table_name} already exists. "
                + (f"Adding {len(added)} column(s)." if added else "Schema unchanged."),
                extra={"table": table_name, "operation": "init_table"},
            )

        await self._engine.execute(*statements.create_table(table_name, normalized))
        await self._add_missing_columns(table_name, normalized)
        self._registry.register(table_name, normalized)
        logger.info(
            f"Table {table_name} ready with {len(normalized.columns)} column(s)",
            extra={"table": table_name, "operation": "init_table"},
        )

        await self.mirrors.replicate("init_table", table_name, schema)
        return normalized

    async def _add_missing_columns(self, table_name: str, schema: TableSchema) -> None:
        """ALTER TABLE for schema columns the physical table does not have yet."""
        rows = await self._engine.query_all(*statements.table_info(table_name))
        existing = {row["name"] for row in rows}
        for col in schema.columns:
            if col.name not in existing:
                await self._engine.execute(*statements.add_column(table_name, col))
                logger.info(
                    f"Added column {col.name} to {table_name}",
                    extra={"table": table_name, "operation": "init_table"},
                )

    # ─── Writes ──────────────────────────────────────────────────

    async def add(self, table_name: TableName, record: Record) -> Record:
        """Insert or fully replace the row with record['id']; returns `record`."""
        _require_str(table_name, "Table name")
        schema = self._registry.lookup(table_name)
        validate_record(table_name, schema, record)

        ctx = ErrorContext(
            table=table_name, record_id=record["id"], operation="add",
        )
        try:
            await self._engine.execute(*statements.upsert(table_name, schema, record))
        except InvalidTypeError as e:
            raise InvalidTypeError(
                f"Failed to insert data into table {table_name}: {e.message}", ctx,
            ) from e
        logger.debug(
            "Record written",
            extra={"table": table_name, "record_id": record["id"], "operation": "add"},
        )

        await self.mirrors.replicate("add", table_name, record)
        return record

    async def delete(self, table_name: TableName, record_id: RecordId) -> int:
        """Delete one row by id. Returns 1 if a row was removed, else 0."""
        check_identifier(table_name, "Table name")
        _require_str(record_id, "ID")

        removed = await self._engine.execute(
            *statements.delete_by_id(table_name, record_id),
        )
        await self.mirrors.replicate("delete", table_name, record_id)
        return 1 if removed > 0 else 0

    async def delete_all(self, table_name: TableName) -> int:
        """Delete every row of a table. Returns the number of rows removed."""
        check_identifier(table_name, "Table name")

        removed = await self._engine.execute(*statements.delete_all(table_name))
        await self.mirrors.replicate("delete_all", table_name)
        return max(removed, 0)

    async def increment(
        self, table_name: TableName, record_id: RecordId, column: str, delta: int | float,
    ) -> int | float:
        """Add `delta` to a numeric column of an existing record; returns the new value.

        An absent value counts as 0. A present non-numeric value is an
        InvalidTypeError, a missing record a MissingValueError.
        """
        _require_str(table_name, "Table name")
        _require_str(record_id, "ID")
        _require_str(column, "Column name")
        ctx = ErrorContext(
            table=table_name, record_id=record_id, column=column,
            operation="increment",
        )
        if isinstance(delta, bool) or not isinstance(delta, (int, float)):
            raise InvalidTypeError(
                f"Increment must be a number, received \"{type(delta).__name__}\"", ctx,
            )

        schema = self._registry.require(table_name)
        col = schema.column(column)
        if col is None:
            raise InvalidTypeError(
                f"Column '{column}' is not defined in table {table_name}", ctx,
            )
        if col.type is not ColumnType.NUMBER:
            raise InvalidTypeError(f"Column '{column}' is not a number", ctx)

        row = await self._engine.query_one(
            *statements.increment(table_name, schema, record_id, column, delta),
        )
        if row is None:
            existing = await self._engine.query_one(
                *statements.select_by_id(table_name, schema, record_id),
            )
            if existing is None:
                raise MissingValueError(
                    f"Record with id '{record_id}' not found in table '{table_name}'",
                    ctx,
                )
            raise InvalidTypeError(f"Column '{column}' is not a number", ctx)

        record = self._decode(table_name, schema, row)
        await self.mirrors.replicate("add", table_name, record)
        return record[column]

    # ─── Reads ───────────────────────────────────────────────────

    async def get(self, table_name: TableName, record_id: RecordId) -> Record | None:
        """Single record by id, or None when no row matches."""
        _require_str(table_name, "Table name")
        _require_str(record_id, "ID")
        schema = self._registry.require(table_name)

        row = await self._engine.query_one(
            *statements.select_by_id(table_name, schema, record_id),
        )
        if row is None:
            return None
        return self._decode(table_name, schema, row)

    async def all(self, table_name: TableName) -> list[Record]:
        """Every record of a table, in storage order."""
        _require_str(table_name, "Table name")
        schema = self._registry.require(table_name)

        rows = await self._engine.query_all(*statements.select_all(table_name, schema))
        return [self._decode(table_name, schema, row) for row in rows]

    async def has(self, table_name: TableName, record_id: RecordId) -> bool:
        return (await self.get(table_name, record_id)) is not None

    async def starts_with(self, table_name: TableName, prefix: str) -> list[Record]:
        """Records whose id begins with `prefix` (case-sensitive, no wildcards)."""
        _require_str(table_name, "Table name")
        _require_str(prefix, "Query")
        schema = self._registry.require(table_name)

        rows = await self._engine.query_all(
            *statements.select_by_prefix(table_name, schema, prefix),
        )
        return [self._decode(table_name, schema, row) for row in rows]

    def _decode(
        self, table_name: str, schema: TableSchema, row: dict[str, Any],
    ) -> Record:
        result: Record = {}
        for col in schema.columns:
            if col.name not in row:
                continue
            try:
                result[col.name] = from_storage(row[col.name], col.type)
            except ParseExceptionError as e:
                e.context.table = table_name
                e.context.record_id = row.get("id")
                e.context.column = col.name
                raise
        return result
