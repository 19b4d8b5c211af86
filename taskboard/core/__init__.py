"""Core Layer — pure validation and metrics, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, infrastructure/, models/ or db/
    - All functions are pure and deterministic ("now" is always passed in)

Design Decisions:
    - Functional core separated from imperative shell: validators and metrics
      are testable without constructing an ORM-backed record
"""
