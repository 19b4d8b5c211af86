"""Database Infrastructure — SQLAlchemy declarative base and async session factory.

Invariants:
    - All sessions are async (AsyncSession)
    - Foreign keys are enforced on SQLite so ON DELETE CASCADE matches PostgreSQL
"""
