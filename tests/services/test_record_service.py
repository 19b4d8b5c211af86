"""Record Service — validated writes against an in-memory database.

Invariants:
    - Invalid fields abort the write: nothing stored, no observer event
    - Unique violations surface as ConflictError with the offending field
    - Deleting a user or project deletes its tasks; tags survive task deletion
    - Updates re-check only the changed fields (due_date is a creation-time rule)
"""

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from taskboard.core.domain_types import ErrorKind
from taskboard.core.errors import (
    ConflictError,
    InvalidEnumError,
    InvalidFormatError,
    OutOfRangeError,
    ResourceNotFoundError,
)
from taskboard.infrastructure.observability import REDACTED
from taskboard.models import Project, Tag, Task, User, task_tags
from taskboard.schemas.records import (
    ProjectCreate, ProjectRead, ProjectUpdate, TagCreate, TagRead, TagUpdate,
    TaskCreate, TaskRead, TaskUpdate, UserCreate, UserRead, UserUpdate,
)
from tests.services.conftest import NOW, TOMORROW, VALID_USER


async def _count(db_manager, table) -> int:
    async with db_manager.session() as db:
        return await db.scalar(select(func.count()).select_from(table))


# ─── users ───────────────────────────────────────────────────────

async def test_create_user_stores_lowercased_email(records):
    user = await records.create_user(UserCreate(**{**VALID_USER, "email": "Bob@Bob.COM"}))
    assert user.id is not None
    assert user.email == "bob@bob.com"
    stored = await records.get_user(user.id)
    assert stored.email == "bob@bob.com"


async def test_invalid_user_is_not_stored(records, db_manager, observer):
    with pytest.raises(InvalidFormatError) as exc:
        await records.create_user(UserCreate(**{**VALID_USER, "username": "aa"}))
    assert exc.value.field == "username"
    assert await _count(db_manager, User) == 0
    assert observer.events == []


async def test_missing_user_fields_rejected(records):
    with pytest.raises(InvalidFormatError) as exc:
        await records.create_user(UserCreate(username="testuser"))
    assert exc.value.field == "email"


async def test_duplicate_username_is_conflict(records, user):
    with pytest.raises(ConflictError) as exc:
        await records.create_user(UserCreate(**{**VALID_USER, "email": "other@example.com"}))
    assert exc.value.kind == ErrorKind.CONFLICT
    assert exc.value.entity == "user"
    assert exc.value.field == "username"


async def test_duplicate_email_differing_only_in_case_is_conflict(records, user):
    payload = {**VALID_USER, "username": "another", "email": "TEST@example.com"}
    with pytest.raises(ConflictError) as exc:
        await records.create_user(UserCreate(**payload))
    assert exc.value.field == "email"


async def test_update_user_checks_only_changed_fields(records, user):
    updated = await records.update_user(user.id, UserUpdate(first_name="Anna"))
    assert updated.first_name == "Anna"
    with pytest.raises(InvalidFormatError) as exc:
        await records.update_user(user.id, UserUpdate(last_name="L33t"))
    assert exc.value.message == "last_name should not contain any numbers"
    assert (await records.get_user(user.id)).last_name == "User"


async def test_update_user_normalizes_email(records, user):
    updated = await records.update_user(user.id, UserUpdate(email="NEW@Example.com"))
    assert updated.email == "new@example.com"


async def test_get_missing_user_raises_not_found(records):
    with pytest.raises(ResourceNotFoundError):
        await records.get_user(999)


# ─── projects ────────────────────────────────────────────────────

async def test_project_defaults(records, user):
    project = await records.create_project(ProjectCreate(
        name="Project", end_date=TOMORROW, user_id=user.id,
    ))
    assert project.status == "active"
    assert project.start_date.replace(tzinfo=None) == NOW.replace(tzinfo=None)


async def test_project_end_date_must_follow_start_date(records, user, db_manager):
    with pytest.raises(OutOfRangeError) as exc:
        await records.create_project(ProjectCreate(
            name="Project", start_date=NOW, end_date=NOW, user_id=user.id,
        ))
    assert exc.value.message == "End date must be after start date"
    assert await _count(db_manager, Project) == 0


async def test_project_requires_existing_owner(records):
    with pytest.raises(ResourceNotFoundError) as exc:
        await records.create_project(ProjectCreate(
            name="Project", end_date=TOMORROW, user_id=42,
        ))
    assert exc.value.resource_type == "user"


async def test_project_status_null_rejected(records, user):
    with pytest.raises(InvalidEnumError) as exc:
        await records.create_project(ProjectCreate(
            name="Project", status=None, end_date=TOMORROW, user_id=user.id,
        ))
    assert exc.value.message == "Status is null"


async def test_moving_start_date_past_end_date_rejected(records, project):
    with pytest.raises(OutOfRangeError):
        await records.update_project(
            project.id, ProjectUpdate(start_date=TOMORROW + timedelta(days=1)),
        )


async def test_update_project_end_date(records, project):
    later = TOMORROW + timedelta(days=30)
    updated = await records.update_project(project.id, ProjectUpdate(end_date=later))
    assert updated.end_date.replace(tzinfo=None) == later.replace(tzinfo=None)


# ─── tasks ───────────────────────────────────────────────────────

async def test_task_defaults(make_task):
    task = await make_task()
    assert task.status == "pending"
    assert task.priority == "medium"


async def test_task_due_date_in_past_rejected(make_task, db_manager):
    with pytest.raises(OutOfRangeError) as exc:
        await make_task(due_date=NOW - timedelta(minutes=1))
    assert exc.value.message == "Due date must be in the future"
    assert await _count(db_manager, Task) == 0


async def test_task_accepts_iso_due_date(make_task):
    task = await make_task(due_date="2026-03-05T09:30:00+00:00")
    assert task.due_date.day == 5


async def test_task_unknown_status_rejected(make_task):
    with pytest.raises(InvalidEnumError):
        await make_task(status="done")


async def test_task_requires_existing_project(records, user):
    with pytest.raises(ResourceNotFoundError) as exc:
        await records.create_task(TaskCreate(
            title="Orphan", due_date=TOMORROW, user_id=user.id, project_id=404,
        ))
    assert exc.value.resource_type == "project"


async def test_task_without_project_id_rejected(records, user):
    with pytest.raises(ResourceNotFoundError):
        await records.create_task(TaskCreate(
            title="Orphan", due_date=TOMORROW, user_id=user.id,
        ))


async def test_past_due_task_can_still_be_updated(records, make_task, clock):
    task = await make_task()
    clock.advance(timedelta(days=3))
    updated = await records.update_task(task.id, TaskUpdate(status="completed"))
    assert updated.status == "completed"


async def test_updating_due_date_rechecks_future(records, make_task):
    task = await make_task()
    with pytest.raises(OutOfRangeError):
        await records.update_task(task.id, TaskUpdate(due_date=NOW))


async def test_update_task_null_priority_rejected(records, make_task):
    task = await make_task()
    with pytest.raises(InvalidEnumError) as exc:
        await records.update_task(task.id, TaskUpdate(priority=None))
    assert exc.value.message == "Priority is null"


# ─── tags ────────────────────────────────────────────────────────

async def test_tag_default_color(records):
    tag = await records.create_tag(TagCreate(name="urgent"))
    assert tag.color == "#3498db"


@pytest.mark.parametrize("color", ["#000000", "#FA0"])
async def test_tag_valid_colors(records, color):
    tag = await records.create_tag(TagCreate(name=f"tag{color}", color=color))
    assert tag.color == color


@pytest.mark.parametrize("color", ["000000", "#00", "#00FFFFF", "#00000T"])
async def test_tag_invalid_colors(records, color):
    with pytest.raises(InvalidFormatError):
        await records.create_tag(TagCreate(name="bad", color=color))


async def test_duplicate_tag_name_is_conflict(records):
    await records.create_tag(TagCreate(name="urgent"))
    with pytest.raises(ConflictError) as exc:
        await records.create_tag(TagCreate(name="urgent", color="#FFF"))
    assert exc.value.entity == "tag"
    assert exc.value.field == "name"


async def test_update_tag_color(records):
    tag = await records.create_tag(TagCreate(name="urgent"))
    updated = await records.update_tag(tag.id, TagUpdate(color="#ABCDEF"))
    assert updated.color == "#ABCDEF"


async def test_add_and_remove_tags(records, make_task):
    task = await make_task()
    red = await records.create_tag(TagCreate(name="red", color="#F00"))
    blue = await records.create_tag(TagCreate(name="blue", color="#00F"))

    tags = await records.add_tags(task.id, [red.id, blue.id, red.id])
    assert sorted(t.name for t in tags) == ["blue", "red"]

    remaining = await records.remove_tags(task.id, [red.id])
    assert [t.name for t in remaining] == ["blue"]
    assert [t.name for t in await records.list_tags(task.id)] == ["blue"]


async def test_add_missing_tag_raises_not_found(records, make_task):
    task = await make_task()
    with pytest.raises(ResourceNotFoundError):
        await records.add_tags(task.id, [123])


# ─── cascades ────────────────────────────────────────────────────

async def test_delete_user_cascades_to_tasks_and_projects(records, user, make_task, db_manager):
    await make_task()
    await make_task(title="Second task")

    await records.delete_user(user.id)

    assert await _count(db_manager, User) == 0
    assert await _count(db_manager, Task) == 0
    assert await _count(db_manager, Project) == 0


async def test_delete_project_cascades_only_its_tasks(records, user, project, make_task, db_manager):
    await make_task()
    other = await records.create_project(ProjectCreate(
        name="Other", end_date=TOMORROW, user_id=user.id,
    ))
    kept = await make_task(title="Other task", project_id=other.id)

    await records.delete_project(project.id)

    async with db_manager.session() as db:
        task_ids = (await db.scalars(select(Task.id))).all()
    assert task_ids == [kept.id]
    assert await _count(db_manager, User) == 1


async def test_delete_task_keeps_tags(records, make_task, db_manager):
    task = await make_task()
    tag = await records.create_tag(TagCreate(name="keep"))
    await records.add_tags(task.id, [tag.id])

    await records.delete_task(task.id)

    assert await _count(db_manager, Tag) == 1
    assert await _count(db_manager, task_tags) == 0


async def test_delete_tag_keeps_tasks(records, make_task, db_manager):
    task = await make_task()
    tag = await records.create_tag(TagCreate(name="drop"))
    await records.add_tags(task.id, [tag.id])

    await records.delete_tag(tag.id)

    assert await _count(db_manager, Task) == 1
    assert await records.list_tags(task.id) == []


async def test_delete_missing_record_raises_not_found(records):
    with pytest.raises(ResourceNotFoundError):
        await records.delete_task(1)


# ─── observer ────────────────────────────────────────────────────

async def test_observer_sees_create_update_delete(records, observer):
    tag = await records.create_tag(TagCreate(name="seen"))
    await records.update_tag(tag.id, TagUpdate(color="#111"))
    await records.delete_tag(tag.id)

    assert [(e[0], e[1], e[2]) for e in observer.events] == [
        ("created", "tag", tag.id),
        ("updated", "tag", tag.id),
        ("deleted", "tag", tag.id),
    ]
    assert observer.events[1][3] == {"color": "#111"}


async def test_observer_never_sees_password(records, user, observer):
    created = observer.events[0]
    assert created[3]["password"] == REDACTED
    await records.update_user(user.id, UserUpdate(password="N3wPassword!"))
    assert observer.events[-1][3] == {"password": REDACTED}


async def test_observer_silent_on_failed_update(records, user, observer):
    before = list(observer.events)
    with pytest.raises(InvalidFormatError):
        await records.update_user(user.id, UserUpdate(email="broken"))
    assert observer.events == before


# ─── wrong-typed values ──────────────────────────────────────────

async def test_non_string_status_is_invalid_enum(make_task, db_manager):
    with pytest.raises(InvalidEnumError) as exc:
        await make_task(status=5)
    assert exc.value.field == "status"
    assert await _count(db_manager, Task) == 0


async def test_unparseable_due_date_is_field_error(make_task):
    with pytest.raises(InvalidFormatError) as exc:
        await make_task(due_date="not a date")
    assert exc.value.field == "due_date"
    assert exc.value.message == "Due date is not a valid date"


async def test_unparseable_project_start_date_is_field_error(records, user):
    with pytest.raises(InvalidFormatError) as exc:
        await records.create_project(ProjectCreate(
            name="Project", start_date="someday", end_date=TOMORROW, user_id=user.id,
        ))
    assert exc.value.field == "start_date"


async def test_non_string_username_is_invalid_format(records):
    with pytest.raises(InvalidFormatError) as exc:
        await records.create_user(UserCreate(**{**VALID_USER, "username": 12345}))
    assert exc.value.message == "username must be a string"


async def test_non_string_tag_color_on_update(records):
    tag = await records.create_tag(TagCreate(name="typed"))
    with pytest.raises(InvalidFormatError):
        await records.update_tag(tag.id, TagUpdate(color=0xFFFFFF))


# ─── read models ─────────────────────────────────────────────────

async def test_created_records_fit_read_models(records, user, project, make_task):
    task = await make_task(priority="high")
    tag = await records.create_tag(TagCreate(name="read", color="#ABC"))

    assert "password" not in UserRead.model_validate(user).model_dump()
    assert ProjectRead.model_validate(project).user_id == user.id
    task_read = TaskRead.model_validate(task)
    assert (task_read.status, task_read.priority) == ("pending", "high")
    assert task_read.project_id == project.id
    assert TagRead.model_validate(tag).model_dump() == {
        "id": tag.id, "name": "read", "color": "#ABC",
    }


async def test_observer_silent_when_tags_unchanged(records, make_task, observer):
    task = await make_task()
    tag = await records.create_tag(TagCreate(name="once"))
    await records.add_tags(task.id, [tag.id])
    before = list(observer.events)

    await records.add_tags(task.id, [tag.id])
    await records.remove_tags(task.id, [999])

    assert observer.events == before
    assert before[-1] == ("updated", "task", task.id, {"tag_ids": [tag.id]})
