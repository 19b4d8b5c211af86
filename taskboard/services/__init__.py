"""Service Layer — async orchestration around the pure core.

Invariants:
    - Services own transactions (one DatabaseSessionManager.session() per operation)
    - Validation and metric decisions are delegated to core/, never re-implemented here

Design Decisions:
    - Impure shell, pure core: fetch rows, call pure functions, persist, notify
"""
