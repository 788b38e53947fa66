"""Table Schema Input — Pydantic models that parse user-supplied schemas into core types.

Invariants:
    - A schema has at least one column; every column has a non-empty name
    - Column types accept the enum values plus the alias "string" for text
    - Parsing failures surface as InvalidTypeError, never as pydantic.ValidationError

Design Decisions:
    - Loose input shapes accepted: {"columns": [...]} or a bare column list, each
      column as [name, type], (name, type), {"name", "type"} or ColumnDefinition
    - Pydantic at the boundary, frozen dataclasses inside core
"""

from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from squirreldb.core.domain_types import ColumnDefinition, ColumnType, TableSchema
from squirreldb.core.errors import ErrorContext, InvalidTypeError

TYPE_ALIASES = {"string": ColumnType.TEXT.value}


class ColumnSpec(BaseModel):
    """One column as supplied by the caller."""
    name: str = Field(min_length=1)
    type: ColumnType

    @model_validator(mode="before")
    @classmethod
    def accept_pairs(cls, data: Any) -> Any:
        if isinstance(data, ColumnDefinition):
            return {"name": data.name, "type": data.type}
        if isinstance(data, (list, tuple)):
            if len(data) != 2:
                raise ValueError("column must be a (name, type) pair")
            return {"name": data[0], "type": data[1]}
        return data

    @field_validator("type", mode="before")
    @classmethod
    def resolve_alias(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().lower()
            return TYPE_ALIASES.get(v, v)
        return v


class TableSchemaIn(BaseModel):
    """Whole-table schema as supplied to init_table."""
    columns: list[ColumnSpec] = Field(min_length=1)

    def to_domain(self) -> TableSchema:
        return TableSchema(
            tuple(ColumnDefinition(c.name, c.type) for c in self.columns),
        )


def parse_table_schema(table_name: str, raw: Any) -> TableSchema:
    """Turn any accepted schema shape into a core TableSchema."""
    if isinstance(raw, TableSchema):
        return raw
    if isinstance(raw, (list, tuple)):
        raw = {"columns": list(raw)}
    try:
        return TableSchemaIn.model_validate(raw).to_domain()
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidTypeError(
            f"Schema must contain a 'columns' array of (name, type) pairs: {details}",
            ErrorContext(table=table_name, operation="init_table"),
        ) from e
