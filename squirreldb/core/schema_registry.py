"""Schema Registry — in-memory map of table name to its registered TableSchema.

Invariants:
    - Every registered schema has exactly one `id` column of type text
    - `id` is prepended at index 0 when missing, otherwise keeps its position
    - Table and column names are plain SQL identifiers (interpolated into statements)
    - At most one registered name per case-insensitive table name, as storage sees it
    - register() never touches storage; the record store issues DDL afterwards

Design Decisions:
    - plan_migration() is pure: it decides what DDL a re-registration needs and
      rejects anything that would let memory and storage disagree
"""

import re

from squirreldb.core.domain_types import (
    ColumnDefinition, ColumnType, TableName, TableSchema, ID_COLUMN,
)
from squirreldb.core.errors import ErrorContext, InvalidTypeError

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def check_identifier(name: object, what: str) -> str:
    """Reject names that cannot be safely interpolated into SQL."""
    if not isinstance(name, str):
        raise InvalidTypeError(
            f"{what} must be a string, received \"{type(name).__name__}\"",
        )
    if not _IDENTIFIER.match(name):
        raise InvalidTypeError(f"{what} {name!r} is not a valid identifier")
    return name


def normalize_schema(table_name: str, schema: TableSchema) -> TableSchema:
    """Validate column names and enforce the `id: text` invariant."""
    ctx = ErrorContext(table=table_name, operation="init_table")
    if not schema.columns:
        raise InvalidTypeError("Schema must contain at least one column", ctx)

    seen: set[str] = set()
    for col in schema.columns:
        check_identifier(col.name, "Column name")
        if col.name in seen:
            raise InvalidTypeError(f"Duplicate column '{col.name}'", ctx)
        seen.add(col.name)

    id_col = schema.column(ID_COLUMN)
    if id_col is None:
        return TableSchema(
            (ColumnDefinition(ID_COLUMN, ColumnType.TEXT),) + schema.columns,
        )
    if id_col.type is not ColumnType.TEXT:
        raise InvalidTypeError(
            f"Column 'id' must be of type text, got {id_col.type.value}", ctx,
        )
    return schema


def plan_migration(
    table_name: str, old: TableSchema, new: TableSchema,
) -> list[ColumnDefinition]:
    """Columns to add when `new` replaces `old`. Empty list means identical."""
    old_cols = old.columns
    if new.columns[:len(old_cols)] != old_cols:
        raise InvalidTypeError(
            f"Schema for table {table_name} conflicts with the registered one; "
            f"only appending columns is supported",
            ErrorContext(table=table_name, operation="init_table"),
        )
    return list(new.columns[len(old_cols):])


class SchemaRegistry:
    """Table name -> TableSchema. One per store instance."""

    def __init__(self):
        self._schemas: dict[str, TableSchema] = {}

    def register(self, table_name: TableName, schema: TableSchema) -> TableSchema:
        check_identifier(table_name, "Table name")
        self.ensure_unaliased(table_name)
        normalized = normalize_schema(table_name, schema)
        self._schemas[table_name] = normalized
        return normalized

    def ensure_unaliased(self, table_name: TableName) -> None:
        """Reject a name that differs from a registered one only by case."""
        folded = table_name.lower()
        for name in self._schemas:
            if name != table_name and name.lower() == folded:
                raise InvalidTypeError(
                    f"Table {table_name} collides with registered table {name}; "
                    f"table names are case-insensitive in storage",
                    ErrorContext(table=table_name, operation="init_table"),
                )

    def lookup(self, table_name: TableName) -> TableSchema | None:
        return self._schemas.get(table_name)

    def require(self, table_name: TableName) -> TableSchema:
        schema = self._schemas.get(table_name)
        if schema is None:
            raise InvalidTypeError(
                f"Table {table_name} does not exist or has no schema defined",
                ErrorContext(table=table_name),
            )
        return schema

    def names(self) -> list[str]:
        return list(self._schemas)

    def clear(self) -> None:
        self._schemas.clear()

    def __contains__(self, table_name: object) -> bool:
        return table_name in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)
