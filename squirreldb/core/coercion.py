"""Type Coercion Engine — converts values between logical column types and storage primitives.

Invariants:
    - None maps to None in both directions, before any type branch
    - Pure value transforms: no IO, no state
    - JSON encoding is canonical (sorted keys, compact separators, no NaN)

Design Decisions:
    - Module-level functions over a class: nothing to configure, nothing to hold
"""

import json
from typing import Any

from squirreldb.core.domain_types import ColumnType, STORAGE_TYPES
from squirreldb.core.errors import InvalidTypeError, ParseExceptionError


def storage_type(column_type: ColumnType) -> str:
    """SQL type name used in CREATE TABLE for a logical type."""
    return STORAGE_TYPES[column_type]


def encode_json(value: Any) -> str:
    try:
        return json.dumps(
            value, sort_keys=True, separators=(",", ":"), allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise InvalidTypeError(f"Value is not JSON-serializable: {e}") from e


def to_storage(value: Any, column_type: ColumnType) -> Any:
    """Application value -> storage primitive."""
    if value is None:
        return None
    if column_type is ColumnType.BOOLEAN:
        return 1 if value else 0
    if column_type is ColumnType.JSON:
        return encode_json(value)
    return value


def from_storage(value: Any, column_type: ColumnType) -> Any:
    """Storage primitive -> application value."""
    if value is None:
        return None
    if column_type is ColumnType.BOOLEAN:
        return value == 1
    if column_type is ColumnType.NUMBER:
        return _to_number(value)
    if column_type is ColumnType.JSON:
        try:
            return json.loads(value)
        except (TypeError, ValueError) as e:
            raise ParseExceptionError(f"Stored JSON could not be parsed: {e}") from e
    return value


def _to_number(value: Any) -> int | float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ParseExceptionError(
            f"Stored value {value!r} is not numeric",
        ) from e
