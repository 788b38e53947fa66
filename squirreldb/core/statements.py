"""Statement Builder — SQL text and bound parameters for every record store operation.

Invariants:
    - Every builder is PURE: returns (sql, params), executes nothing
    - Identifiers are interpolated only after check_identifier() accepted them
    - Values are always bound parameters, never interpolated
    - Prefix matching is case-sensitive and treats % and _ literally (no LIKE)

Design Decisions:
    - Named parameters (:p0, :p1, ...) instead of column names: a column called
      `delta` or `prefix` cannot collide with an internal parameter
    - increment() is one UPDATE ... RETURNING so read-modify-write cannot race
"""

from typing import Any

from squirreldb.core.coercion import storage_type, to_storage
from squirreldb.core.domain_types import (
    ColumnDefinition, TableSchema, ID_COLUMN,
)

Statement = tuple[str, dict[str, Any]]


def _q(identifier: str) -> str:
    return f'"{identifier}"'


def _projection(schema: TableSchema) -> str:
    return ", ".join(_q(name) for name in schema.column_names)


def create_table(table_name: str, schema: TableSchema) -> Statement:
    defs = []
    for col in schema.columns:
        sql_type = storage_type(col.type)
        if col.name == ID_COLUMN:
            defs.append(f"{_q(col.name)} {sql_type} PRIMARY KEY")
        else:
            defs.append(f"{_q(col.name)} {sql_type}")
    return f"CREATE TABLE IF NOT EXISTS {_q(table_name)} ({', '.join(defs)})", {}


def add_column(table_name: str, column: ColumnDefinition) -> Statement:
    return (
        f"ALTER TABLE {_q(table_name)} ADD COLUMN "
        f"{_q(column.name)} {storage_type(column.type)}",
        {},
    )


def upsert(
    table_name: str, schema: TableSchema, record: dict[str, Any],
) -> Statement:
    """INSERT OR REPLACE of every schema column the record carries."""
    names, placeholders, params = [], [], {}
    for i, col in enumerate(schema.columns):
        if col.name not in record:
            continue
        key = f"p{i}"
        names.append(_q(col.name))
        placeholders.append(f":{key}")
        params[key] = to_storage(record[col.name], col.type)
    sql = (
        f"INSERT OR REPLACE INTO {_q(table_name)} "
        f"({', '.join(names)}) VALUES ({', '.join(placeholders)})"
    )
    return sql, params


def select_by_id(
    table_name: str, schema: TableSchema, record_id: str,
) -> Statement:
    return (
        f"SELECT {_projection(schema)} FROM {_q(table_name)} "
        f"WHERE {_q(ID_COLUMN)} = :id",
        {"id": record_id},
    )


def select_all(table_name: str, schema: TableSchema) -> Statement:
    return f"SELECT {_projection(schema)} FROM {_q(table_name)}", {}


def select_by_prefix(
    table_name: str, schema: TableSchema, prefix: str,
) -> Statement:
    return (
        f"SELECT {_projection(schema)} FROM {_q(table_name)} "
        f"WHERE substr({_q(ID_COLUMN)}, 1, length(:prefix)) = :prefix",
        {"prefix": prefix},
    )


def delete_by_id(table_name: str, record_id: str) -> Statement:
    return (
        f"DELETE FROM {_q(table_name)} WHERE {_q(ID_COLUMN)} = :id",
        {"id": record_id},
    )


def delete_all(table_name: str) -> Statement:
    return f"DELETE FROM {_q(table_name)}", {}


def increment(
    table_name: str, schema: TableSchema, record_id: str,
    column: str, delta: int | float,
) -> Statement:
    """Add `delta` to a numeric column in place, returning the whole row.

    Rows whose current value is present but not numeric are left untouched
    and return nothing, same as a missing row; the caller tells them apart.
    """
    col = _q(column)
    return (
        f"UPDATE {_q(table_name)} SET {col} = COALESCE({col}, 0) + :delta "
        f"WHERE {_q(ID_COLUMN)} = :id "
        f"AND ({col} IS NULL OR typeof({col}) IN ('integer', 'real')) "
        f"RETURNING {_projection(schema)}",
        {"id": record_id, "delta": delta},
    )


def table_info(table_name: str) -> Statement:
    """Physical columns of a table (one row per column, `name` key)."""
    return f"PRAGMA table_info({_q(table_name)})", {}
