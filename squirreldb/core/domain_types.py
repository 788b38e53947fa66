"""Domain Types — column types, table schemas and policies shared across the codebase.

Invariants:
    - ColumnType maps 1:1 to a storage primitive (see STORAGE_TYPES)
    - TableSchema is immutable once built (frozen dataclass, tuple of columns)
    - All valid states encoded as Enums, no raw string matching

Design Decisions:
    - NewType over wrappers for names and ids: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (error responses, logs)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, NewType


# ─── Identity Types ──────────────────────────────────────────────

TableName = NewType("TableName", str)
RecordId = NewType("RecordId", str)

Record = dict[str, Any]

ID_COLUMN = "id"


# ─── Enums ───────────────────────────────────────────────────────

class ColumnType(str, Enum):
    """Logical, application-facing column type."""
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    JSON = "json"


class MirrorPolicy(str, Enum):
    """How a primary fans writes out to its mirrors."""
    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"


STORAGE_TYPES: dict[ColumnType, str] = {
    ColumnType.TEXT: "TEXT",
    ColumnType.NUMBER: "REAL",
    ColumnType.BOOLEAN: "INTEGER",
    ColumnType.JSON: "TEXT",
}


# ─── Schema Types ────────────────────────────────────────────────

@dataclass(frozen=True)
class ColumnDefinition:
    """One named, typed column."""
    name: str
    type: ColumnType


@dataclass(frozen=True)
class TableSchema:
    """Ordered column definitions for one table."""
    columns: tuple[ColumnDefinition, ...]

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    def column(self, name: str) -> ColumnDefinition | None:
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def __contains__(self, name: object) -> bool:
        return any(c.name == name for c in self.columns)
