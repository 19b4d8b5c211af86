"""Infrastructure Layer — database session management, logging and the clock.

Invariants:
    - Infrastructure never imports core validation or metrics logic
    - All SQLAlchemy failures are mapped to TaskboardError subclasses here

Design Decisions:
    - Resilient wrappers over raw clients (single responsibility per module)
"""
