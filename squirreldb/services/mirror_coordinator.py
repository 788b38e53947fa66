"""Mirror Coordinator — replays mutating store operations on attached mirror stores.

Invariants:
    - Replication happens only after the primary's local write succeeded
    - Operations are replayed by argument, never re-derived from the local row
    - SEQUENTIAL policy: attachment order, each mirror (and its subtree) awaited
      before the next, depth-first through the mirror tree
    - Mirror failures propagate unchanged; the primary is never rolled back
    - The mirror graph stays acyclic: self-attachment, duplicates and cycles are rejected
    - No detach, no timeouts

Design Decisions:
    - Explicit operation table over getattr: every replicated operation visible in one place
    - PARALLEL policy settles every mirror before raising the first failure,
      so no mirror write is left running unobserved
"""

import asyncio
import logging
from collections.abc import Iterator
from typing import Any

from squirreldb.core.domain_types import MirrorPolicy
from squirreldb.core.errors import ErrorContext, InvalidTypeError, SquirrelError

logger = logging.getLogger(__name__)

# operation name -> how to invoke it on a mirror store
_OPERATIONS = {
    "init_table": lambda store, args: store.init_table(*args),
    "add": lambda store, args: store.add(*args),
    "delete": lambda store, args: store.delete(*args),
    "delete_all": lambda store, args: store.delete_all(*args),
}

REPLICATED_OPERATIONS = frozenset(_OPERATIONS)


def _reaches(start: Any, target: Any) -> bool:
    """True if `target` is `start` or sits anywhere in start's mirror tree."""
    stack, seen = [start], set()
    while stack:
        node = stack.pop()
        if node is target:
            return True
        if id(node) in seen:
            continue
        seen.add(id(node))
        stack.extend(node.mirrors)
    return False


class MirrorCoordinator:
    """Ordered, append-only list of mirror stores owned by one primary."""

    def __init__(self, owner: Any, policy: MirrorPolicy = MirrorPolicy.SEQUENTIAL):
        self._owner = owner
        self._mirrors: list[Any] = []
        self.policy = MirrorPolicy(policy)

    # ─── List-like surface ───────────────────────────────────────

    def attach(self, mirror: Any) -> None:
        """Attach a mirror store. Refuses anything that would create a cycle."""
        if not isinstance(getattr(mirror, "mirrors", None), MirrorCoordinator):
            raise InvalidTypeError(
                f"Mirror must be a store instance, received \"{type(mirror).__name__}\"",
            )
        ctx = ErrorContext(operation="attach_mirror")
        if mirror is self._owner:
            raise InvalidTypeError("A store cannot mirror itself", ctx)
        if any(m is mirror for m in self._mirrors):
            raise InvalidTypeError("Mirror is already attached", ctx)
        if _reaches(mirror, self._owner):
            raise InvalidTypeError(
                "Attaching this mirror would create a replication cycle", ctx,
            )
        self._mirrors.append(mirror)
        logger.info(
            "Mirror attached", extra={"mirror_count": len(self._mirrors)},
        )

    append = attach

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._mirrors))

    def __len__(self) -> int:
        return len(self._mirrors)

    def __getitem__(self, index: int) -> Any:
        return self._mirrors[index]

    def __bool__(self) -> bool:
        return bool(self._mirrors)

    # ─── Replication ─────────────────────────────────────────────

    async def replicate(self, operation: str, *args: Any) -> None:
        """Replay `operation(*args)` on every mirror according to the policy."""
        invoke = _OPERATIONS.get(operation)
        if invoke is None:
            raise InvalidTypeError(f"Operation '{operation}' is not replicated")
        if not self._mirrors:
            return

        mirrors = list(self._mirrors)
        logger.debug(
            f"Replicating {operation} to {len(mirrors)} mirror(s)",
            extra={
                "operation": operation,
                "table": args[0] if args else None,
                "mirror_count": len(mirrors),
            },
        )

        if self.policy is MirrorPolicy.PARALLEL:
            results = await asyncio.gather(
                *(invoke(m, args) for m in mirrors), return_exceptions=True,
            )
            for result in results:
                if isinstance(result, BaseException):
                    self._log_failure(operation, result)
                    raise result
            return

        for mirror in mirrors:
            try:
                await invoke(mirror, args)
            except SquirrelError as e:
                self._log_failure(operation, e)
                raise

    def _log_failure(self, operation: str, error: BaseException) -> None:
        kind = error.kind.value if isinstance(error, SquirrelError) else None
        logger.error(
            f"Mirror replication of {operation} failed: {error}",
            extra={"operation": operation, "error_kind": kind},
        )
