"""Statement Builder — tests for generated SQL text and parameters.

Tests cover:
    - CREATE TABLE uses storage types and marks id as primary key
    - Upsert writes only keys the record carries, coerced
    - Prefix lookup avoids LIKE
    - Increment is a single UPDATE ... RETURNING
"""

from squirreldb.core import statements
from squirreldb.core.domain_types import ColumnDefinition, ColumnType, TableSchema

SCHEMA = TableSchema((
    ColumnDefinition("id", ColumnType.TEXT),
    ColumnDefinition("age", ColumnType.NUMBER),
    ColumnDefinition("active", ColumnType.BOOLEAN),
    ColumnDefinition("profile", ColumnType.JSON),
))


def test_create_table_statement():
    sql, params = statements.create_table("users", SCHEMA)
    assert sql == (
        'CREATE TABLE IF NOT EXISTS "users" ('
        '"id" TEXT PRIMARY KEY, "age" REAL, "active" INTEGER, "profile" TEXT)'
    )
    assert params == {}


def test_add_column_statement():
    sql, _ = statements.add_column("users", ColumnDefinition("score", ColumnType.NUMBER))
    assert sql == 'ALTER TABLE "users" ADD COLUMN "score" REAL'


def test_upsert_only_writes_present_keys():
    sql, params = statements.upsert("users", SCHEMA, {"id": "u1", "active": True})
    assert sql == 'INSERT OR REPLACE INTO "users" ("id", "active") VALUES (:p0, :p2)'
    assert params == {"p0": "u1", "p2": 1}


def test_upsert_writes_explicit_none_as_null():
    _, params = statements.upsert("users", SCHEMA, {"id": "u1", "age": None})
    assert params == {"p0": "u1", "p1": None}


def test_upsert_serializes_json():
    _, params = statements.upsert("users", SCHEMA, {"id": "u1", "profile": {"b": 2, "a": 1}})
    assert params["p3"] == '{"a":1,"b":2}'


def test_upsert_ignores_keys_outside_schema():
    sql, params = statements.upsert("users", SCHEMA, {"id": "u1", "nickname": "x"})
    assert "nickname" not in sql
    assert params == {"p0": "u1"}


def test_select_by_id_projects_schema_columns():
    sql, params = statements.select_by_id("users", SCHEMA, "u1")
    assert sql.startswith('SELECT "id", "age", "active", "profile" FROM "users"')
    assert params == {"id": "u1"}


def test_prefix_lookup_does_not_use_like():
    sql, params = statements.select_by_prefix("users", SCHEMA, "a_")
    assert "LIKE" not in sql
    assert "substr" in sql
    assert params == {"prefix": "a_"}


def test_increment_is_single_returning_update():
    sql, params = statements.increment("users", SCHEMA, "u1", "age", 5)
    assert sql.startswith('UPDATE "users" SET "age" = COALESCE("age", 0) + :delta')
    assert "RETURNING" in sql
    assert params == {"id": "u1", "delta": 5}


def test_delete_statements():
    assert statements.delete_by_id("users", "u1") == (
        'DELETE FROM "users" WHERE "id" = :id', {"id": "u1"},
    )
    assert statements.delete_all("users") == ('DELETE FROM "users"', {})


def test_table_info_statement():
    assert statements.table_info("users") == ('PRAGMA table_info("users")', {})
