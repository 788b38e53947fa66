"""SquirrelDB Package — schema-typed record store with synchronous mirroring.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, e.g.
      `from squirreldb.services.record_store import SquirrelDB`
"""
