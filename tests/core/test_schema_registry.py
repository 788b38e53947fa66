"""Schema Registry — tests for registration, the id invariant and migration planning.

Tests cover:
    - id: text prepended when absent, kept in place when supplied
    - Invalid table / column names, duplicates, empty schemas, non-text id
    - Re-registration overwrites; case-only aliases rejected; lookup/require/clear
    - plan_migration: identical, append-only, conflicting
"""

import pytest

from squirreldb.core.domain_types import ColumnDefinition, ColumnType, TableSchema
from squirreldb.core.errors import InvalidTypeError
from squirreldb.core.schema_registry import (
    SchemaRegistry, check_identifier, normalize_schema, plan_migration,
)


def _schema(*pairs):
    return TableSchema(tuple(ColumnDefinition(n, t) for n, t in pairs))


NAME_AGE = _schema(("name", ColumnType.TEXT), ("age", ColumnType.NUMBER))


def test_id_prepended_when_missing():
    registry = SchemaRegistry()
    schema = registry.register("users", NAME_AGE)
    assert schema.column_names == ["id", "name", "age"]
    assert schema.columns[0].type is ColumnType.TEXT


def test_id_keeps_its_position_when_supplied():
    registry = SchemaRegistry()
    schema = registry.register("users", _schema(
        ("name", ColumnType.TEXT), ("id", ColumnType.TEXT),
    ))
    assert schema.column_names == ["name", "id"]


def test_exactly_one_id_column():
    schema = SchemaRegistry().register("users", NAME_AGE)
    assert [c.name for c in schema.columns].count("id") == 1


def test_non_text_id_rejected():
    with pytest.raises(InvalidTypeError, match="id"):
        normalize_schema("users", _schema(("id", ColumnType.NUMBER)))


def test_empty_schema_rejected():
    with pytest.raises(InvalidTypeError, match="at least one column"):
        normalize_schema("users", TableSchema(()))


def test_duplicate_column_rejected():
    with pytest.raises(InvalidTypeError, match="Duplicate"):
        normalize_schema("users", _schema(
            ("name", ColumnType.TEXT), ("name", ColumnType.NUMBER),
        ))


@pytest.mark.parametrize("name", ["", "1abc", "drop table", "a;b", 'x"y'])
def test_invalid_identifiers_rejected(name):
    with pytest.raises(InvalidTypeError):
        check_identifier(name, "Table name")


def test_non_string_identifier_rejected():
    with pytest.raises(InvalidTypeError, match="must be a string"):
        check_identifier(42, "Table name")


def test_registration_never_mutates_input():
    SchemaRegistry().register("users", NAME_AGE)
    assert NAME_AGE.column_names == ["name", "age"]


def test_reregistration_overwrites():
    registry = SchemaRegistry()
    registry.register("users", NAME_AGE)
    registry.register("users", _schema(("email", ColumnType.TEXT)))
    assert registry.lookup("users").column_names == ["id", "email"]
    assert len(registry) == 1


def test_case_only_alias_rejected():
    registry = SchemaRegistry()
    registry.register("users", NAME_AGE)
    with pytest.raises(InvalidTypeError, match="collides"):
        registry.register("USERS", NAME_AGE)
    assert registry.names() == ["users"]


def test_lookup_and_require():
    registry = SchemaRegistry()
    assert registry.lookup("users") is None
    with pytest.raises(InvalidTypeError, match="does not exist"):
        registry.require("users")
    registry.register("users", NAME_AGE)
    assert "users" in registry
    assert registry.require("users") is registry.lookup("users")


def test_clear_forgets_everything():
    registry = SchemaRegistry()
    registry.register("users", NAME_AGE)
    registry.clear()
    assert registry.names() == []


# ─── plan_migration ──────────────────────────────────────────────

def test_identical_schema_needs_no_migration():
    old = normalize_schema("users", NAME_AGE)
    assert plan_migration("users", old, old) == []


def test_appended_columns_are_planned():
    old = normalize_schema("users", NAME_AGE)
    new = normalize_schema("users", _schema(
        ("name", ColumnType.TEXT), ("age", ColumnType.NUMBER),
        ("active", ColumnType.BOOLEAN),
    ))
    assert plan_migration("users", old, new) == [
        ColumnDefinition("active", ColumnType.BOOLEAN),
    ]


def test_retyped_column_conflicts():
    old = normalize_schema("users", NAME_AGE)
    new = normalize_schema("users", _schema(
        ("name", ColumnType.TEXT), ("age", ColumnType.TEXT),
    ))
    with pytest.raises(InvalidTypeError, match="conflicts"):
        plan_migration("users", old, new)


def test_removed_column_conflicts():
    old = normalize_schema("users", NAME_AGE)
    new = normalize_schema("users", _schema(("name", ColumnType.TEXT)))
    with pytest.raises(InvalidTypeError):
        plan_migration("users", old, new)
