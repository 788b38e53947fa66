"""Infrastructure Layer — storage engine client and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/
    - Every SQLAlchemy failure is mapped to a SquirrelError before leaving this layer
"""
