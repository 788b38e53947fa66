"""Boundary Protocols — contract between the record store and the storage engine.

Invariants:
    - Services depend on StorageEngineLike; the SQLAlchemy engine is only the default
    - Each call is one statement, atomic on its own
    - Rows come back as plain dicts of column name -> storage primitive

Design Decisions:
    - Protocol over ABC: structural subtyping, tests can pass any fake engine
    - Async in Protocol: implementations do IO, core functions feeding them stay sync
"""

from typing import Any, Protocol


class StorageEngineLike(Protocol):
    """Capability interface of the relational engine under a store."""

    async def execute(self, sql: str, params: dict[str, Any] | None = None) -> int:
        """Run a mutating statement; returns the affected row count."""
        ...

    async def query_one(
        self, sql: str, params: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None: ...

    async def query_all(
        self, sql: str, params: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]: ...

    async def health_check(self) -> bool:
        """True when the engine can still run a trivial statement."""
        ...

    async def close(self) -> None: ...
