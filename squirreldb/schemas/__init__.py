"""Pydantic Schemas — validation of user-supplied table schemas.

Invariants:
    - Schemas validate at the system boundary (init_table input)
    - Domain types from core/ used for enum fields

Design Decisions:
    - Separate from core: pydantic models parse loose input, core works on
      frozen dataclasses only
"""
