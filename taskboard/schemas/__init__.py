"""Pydantic Schemas — candidate field sets and read models for records.

Invariants:
    - Schemas only coerce shape (str, datetime, int); value rules live in core/validation.py
    - Create schemas leave every field optional so a missing value reaches its validator

Design Decisions:
    - Separate from models: schemas are boundary contracts, models are persistence
"""
