"""Record Validation — checks a record against its table schema before any write.

Invariants:
    - validate_record is PURE: raises or returns None, never mutates the record
    - All-or-nothing: the first violated constraint aborts the write
    - Only schema columns are checked; extra record keys are ignored
    - id is missing when absent, None or "" (0 and False fail the text check instead)
"""

from collections.abc import Mapping
from typing import Any

from squirreldb.core.coercion import encode_json
from squirreldb.core.domain_types import ColumnType, TableSchema, ID_COLUMN
from squirreldb.core.errors import (
    ErrorContext, InvalidTypeError, MissingValueError,
)


def is_missing_id(value: Any) -> bool:
    return value is None or value == ""


def matches_type(value: Any, column_type: ColumnType) -> bool:
    """Runtime type check for one non-None value. JSON is checked separately."""
    if column_type is ColumnType.TEXT:
        return isinstance(value, str)
    if column_type is ColumnType.NUMBER:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if column_type is ColumnType.BOOLEAN:
        return isinstance(value, bool)
    return True


def validate_record(
    table_name: str, schema: TableSchema | None, record: Any,
) -> None:
    """Raise InvalidTypeError / MissingValueError if `record` cannot be written."""
    ctx = ErrorContext(table=table_name, operation="add")
    if schema is None:
        raise InvalidTypeError(
            f"Table {table_name} does not exist or has no schema defined", ctx,
        )
    if not isinstance(record, Mapping):
        raise InvalidTypeError(
            f"Record must be a mapping, received \"{type(record).__name__}\"", ctx,
        )
    if is_missing_id(record.get(ID_COLUMN)):
        raise MissingValueError("Field 'id' is required for all operations", ctx)

    ctx.record_id = str(record[ID_COLUMN])
    for col in schema.columns:
        value = record.get(col.name)
        if value is None:
            continue
        ctx.column = col.name
        if col.type is ColumnType.JSON:
            try:
                encode_json(value)
            except InvalidTypeError as e:
                raise InvalidTypeError(
                    f"Column '{col.name}' contains non-serializable JSON data", ctx,
                ) from e
        elif not matches_type(value, col.type):
            raise InvalidTypeError(
                f"Column '{col.name}' expects {col.type.value}, "
                f"got {type(value).__name__}",
                ctx,
            )
