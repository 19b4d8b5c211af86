"""Field Validation — registry of pure validators keyed by (entity, field).

Invariants:
    - All validators are PURE: no IO, no DB, no clock — "now" arrives in FieldContext
    - A validator returns FieldViolation on rejection, None on success
    - Validators of one field run in registration order — first violation wins
    - check_fields stops at the first failing field (fail fast, no accumulation)
    - Uniqueness is NOT checked here (storage layer raises ConflictError)

Design Decisions:
    - Registry over per-column callbacks: every rule is importable and testable
      without constructing an ORM-backed record
    - Return values (not exceptions) from validators; validate_fields is the single
      place that turns a violation into a raised FieldValidationError
    - Email lower-casing lives in normalize_fields: a write-time transform, not a rule
"""

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from taskboard.core.domain_types import (
    Entity, ErrorKind, TaskStatus, TaskPriority, ProjectStatus,
    USERNAME_LENGTH, PASSWORD_LENGTH, PERSON_NAME_LENGTH,
    TASK_TITLE_LENGTH, PROJECT_NAME_LENGTH, TAG_NAME_LENGTH,
)
from taskboard.core.errors import FieldViolation, FieldValidationError

SPECIAL_CHARACTERS = re.compile(r"""[!@#$%^&*()_\-+=\[\]{};':"\\|,.<>/?]""")
_UPPERCASE = re.compile(r"[A-Z]")
_DIGIT = re.compile(r"[0-9]")
_EMAIL = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


@dataclass(frozen=True)
class FieldContext:
    """What a validator may look at: its own key, the candidate record, the clock."""
    entity: Entity
    field: str
    record: Mapping[str, Any]
    now: datetime

    def reject(self, kind: ErrorKind, message: str) -> FieldViolation:
        return FieldViolation(self.entity.value, self.field, kind, message)


Validator = Callable[[Any, FieldContext], FieldViolation | None]

_REGISTRY: dict[tuple[Entity, str], list[Validator]] = {}


def register(entity: Entity, field_name: str) -> Callable[[Validator], Validator]:
    """Attach a validator to (entity, field). Order of registration is order of checks."""
    def decorator(fn: Validator) -> Validator:
        _REGISTRY.setdefault((entity, field_name), []).append(fn)
        return fn
    return decorator


def validators_for(entity: Entity, field_name: str) -> tuple[Validator, ...]:
    return tuple(_REGISTRY.get((entity, field_name), ()))


def fields_for(entity: Entity) -> tuple[str, ...]:
    """Validated fields of an entity, in registration order."""
    return tuple(f for (e, f) in _REGISTRY if e == entity)


# ─── Rule Factories ──────────────────────────────────────────────

def _length(bounds: tuple[int, int], kind: ErrorKind) -> Validator:
    low, high = bounds

    def check_length(value: Any, ctx: FieldContext) -> FieldViolation | None:
        if value is None:
            return ctx.reject(kind, f"{ctx.field} is required")
        if not isinstance(value, str):
            return ctx.reject(kind, f"{ctx.field} must be a string")
        if not low <= len(value) <= high:
            return ctx.reject(
                kind, f"{ctx.field} must be between {low} and {high} characters",
            )
        return None
    return check_length


def _one_of(enum_cls: type[Enum], label: str) -> Validator:
    allowed = tuple(member.value for member in enum_cls)

    def check_enum(value: Any, ctx: FieldContext) -> FieldViolation | None:
        if value is None:
            return ctx.reject(ErrorKind.INVALID_ENUM, f"{label} is null")
        if value not in allowed:
            return ctx.reject(
                ErrorKind.INVALID_ENUM,
                f"{label} had unexpected value. "
                f"Look to {enum_cls.__name__} for correct values",
            )
        return None
    return check_enum


def _no_digits_or_specials(value: Any, ctx: FieldContext) -> FieldViolation | None:
    if _DIGIT.search(value):
        return ctx.reject(
            ErrorKind.INVALID_FORMAT, f"{ctx.field} should not contain any numbers",
        )
    if SPECIAL_CHARACTERS.search(value):
        return ctx.reject(
            ErrorKind.INVALID_FORMAT,
            f"{ctx.field} should not contain any special characters",
        )
    return None


def _as_utc(value: datetime) -> datetime:
    """Naive datetimes are treated as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ─── User ────────────────────────────────────────────────────────

register(Entity.USER, "username")(_length(USERNAME_LENGTH, ErrorKind.INVALID_FORMAT))


@register(Entity.USER, "username")
def check_username_characters(value: str, ctx: FieldContext) -> FieldViolation | None:
    if SPECIAL_CHARACTERS.search(value):
        return ctx.reject(
            ErrorKind.INVALID_FORMAT,
            "User name should not contain any special characters",
        )
    return None


@register(Entity.USER, "email")
def check_email_format(value: Any, ctx: FieldContext) -> FieldViolation | None:
    if not isinstance(value, str) or not _EMAIL.match(value):
        return ctx.reject(ErrorKind.INVALID_FORMAT, "Email is not in a valid format")
    return None


register(Entity.USER, "password")(_length(PASSWORD_LENGTH, ErrorKind.INVALID_FORMAT))


@register(Entity.USER, "password")
def check_password_strength(value: str, ctx: FieldContext) -> FieldViolation | None:
    """Three independent checks; the first one missing is reported."""
    if not _UPPERCASE.search(value):
        return ctx.reject(
            ErrorKind.INVALID_FORMAT,
            "Password does not contain at least one uppercase letter",
        )
    if not _DIGIT.search(value):
        return ctx.reject(
            ErrorKind.INVALID_FORMAT, "Password does not contain at least one number",
        )
    if not SPECIAL_CHARACTERS.search(value):
        return ctx.reject(
            ErrorKind.INVALID_FORMAT,
            "Password does not contain at least one special character",
        )
    return None


for _name_field in ("first_name", "last_name"):
    register(Entity.USER, _name_field)(
        _length(PERSON_NAME_LENGTH, ErrorKind.INVALID_FORMAT),
    )
    register(Entity.USER, _name_field)(_no_digits_or_specials)


# ─── Project ─────────────────────────────────────────────────────

register(Entity.PROJECT, "name")(_length(PROJECT_NAME_LENGTH, ErrorKind.OUT_OF_RANGE))
register(Entity.PROJECT, "status")(_one_of(ProjectStatus, "Status"))


@register(Entity.PROJECT, "start_date")
def check_start_date(value: Any, ctx: FieldContext) -> FieldViolation | None:
    if not isinstance(value, datetime):
        return ctx.reject(ErrorKind.INVALID_FORMAT, "Start date is not a valid date")
    return None


@register(Entity.PROJECT, "end_date")
def check_end_after_start(value: Any, ctx: FieldContext) -> FieldViolation | None:
    if value is None:
        return ctx.reject(ErrorKind.OUT_OF_RANGE, "End date is required")
    if not isinstance(value, datetime):
        return ctx.reject(ErrorKind.INVALID_FORMAT, "End date is not a valid date")
    start = ctx.record.get("start_date")
    if not isinstance(start, datetime):
        start = ctx.now
    if _as_utc(value) <= _as_utc(start):
        return ctx.reject(ErrorKind.OUT_OF_RANGE, "End date must be after start date")
    return None


# ─── Task ────────────────────────────────────────────────────────

register(Entity.TASK, "title")(_length(TASK_TITLE_LENGTH, ErrorKind.OUT_OF_RANGE))
register(Entity.TASK, "status")(_one_of(TaskStatus, "Status"))


@register(Entity.TASK, "due_date")
def check_due_in_future(value: Any, ctx: FieldContext) -> FieldViolation | None:
    if value is None:
        return ctx.reject(ErrorKind.OUT_OF_RANGE, "Due date is required")
    if not isinstance(value, datetime):
        return ctx.reject(ErrorKind.INVALID_FORMAT, "Due date is not a valid date")
    if _as_utc(value) <= _as_utc(ctx.now):
        return ctx.reject(ErrorKind.OUT_OF_RANGE, "Due date must be in the future")
    return None


register(Entity.TASK, "priority")(_one_of(TaskPriority, "Priority"))


# ─── Tag ─────────────────────────────────────────────────────────

@register(Entity.TAG, "name")
def check_tag_name_not_empty(value: Any, ctx: FieldContext) -> FieldViolation | None:
    if value is None:
        return ctx.reject(ErrorKind.OUT_OF_RANGE, "name is required")
    if isinstance(value, str) and not value.strip():
        return ctx.reject(ErrorKind.OUT_OF_RANGE, "name cannot be empty")
    return None


register(Entity.TAG, "name")(_length(TAG_NAME_LENGTH, ErrorKind.OUT_OF_RANGE))


@register(Entity.TAG, "color")
def check_hex_color(value: Any, ctx: FieldContext) -> FieldViolation | None:
    if value is None:
        return ctx.reject(ErrorKind.INVALID_FORMAT, "Color is null")
    if not isinstance(value, str) or not _HEX_COLOR.match(value):
        return ctx.reject(ErrorKind.INVALID_FORMAT, "Color is not a valid hex code")
    return None


# ─── Entry Points ────────────────────────────────────────────────

def check_field(
    entity: Entity, field_name: str, record: Mapping[str, Any], now: datetime,
) -> FieldViolation | None:
    """Run every validator of one field. Returns first violation or None."""
    ctx = FieldContext(entity, field_name, record, now)
    value = record.get(field_name)
    for validator in validators_for(entity, field_name):
        violation = validator(value, ctx)
        if violation is not None:
            return violation
    return None


def check_fields(
    entity: Entity,
    record: Mapping[str, Any],
    now: datetime,
    fields: Iterable[str] | None = None,
) -> FieldViolation | None:
    """Validate a candidate record. fields=None checks every registered field
    (create); an explicit list checks only those (update)."""
    names = fields_for(entity) if fields is None else tuple(fields)
    for field_name in names:
        violation = check_field(entity, field_name, record, now)
        if violation is not None:
            return violation
    return None


def validate_fields(
    entity: Entity,
    record: Mapping[str, Any],
    now: datetime,
    fields: Iterable[str] | None = None,
) -> None:
    """Raise the FieldValidationError subclass matching the first violation."""
    violation = check_fields(entity, record, now, fields)
    if violation is not None:
        raise FieldValidationError.from_violation(violation)


def normalize_email(value: str | None) -> str | None:
    return None if value is None else value.lower()


def normalize_fields(entity: Entity, record: Mapping[str, Any]) -> dict[str, Any]:
    """Write-time transforms applied after validation passes."""
    normalized = dict(record)
    if entity == Entity.USER and "email" in normalized:
        normalized["email"] = normalize_email(normalized["email"])
    return normalized


# Fields whose validators read another field: changing the key re-checks the values.
_DEPENDENT_FIELDS: dict[tuple[Entity, str], tuple[str, ...]] = {
    (Entity.PROJECT, "start_date"): ("end_date",),
}


def fields_affected_by(entity: Entity, changed: Iterable[str]) -> tuple[str, ...]:
    """Validated fields to re-check on update: the changed ones plus their dependents."""
    affected: list[str] = []
    for name in changed:
        for candidate in (name, *_DEPENDENT_FIELDS.get((entity, name), ())):
            if (entity, candidate) in _REGISTRY and candidate not in affected:
                affected.append(candidate)
    return tuple(affected)
