"""Domain Types — verifies the closed value sets and defaults."""

from taskboard.core.domain_types import (
    DEFAULT_PROJECT_STATUS, DEFAULT_TAG_COLOR, DEFAULT_TASK_PRIORITY,
    DEFAULT_TASK_STATUS, Entity, ProjectStatus, TaskPriority, TaskStatus,
    TagId, UserId,
)


def test_identity_types_wrap_int():
    assert UserId(3) == 3
    assert TagId(9) == 9


def test_task_status_has_four_states():
    assert [s.value for s in TaskStatus] == [
        "pending", "in_progress", "completed", "cancelled",
    ]


def test_project_status_has_four_states():
    assert [s.value for s in ProjectStatus] == [
        "active", "completed", "on_hold", "cancelled",
    ]


def test_priority_values():
    assert [p.value for p in TaskPriority] == ["low", "medium", "high"]


def test_str_enums_compare_equal_to_raw_strings():
    assert TaskStatus.COMPLETED == "completed"
    assert Entity.TAG == "tag"


def test_defaults():
    assert DEFAULT_TASK_STATUS == TaskStatus.PENDING
    assert DEFAULT_TASK_PRIORITY == TaskPriority.MEDIUM
    assert DEFAULT_PROJECT_STATUS == ProjectStatus.ACTIVE
    assert DEFAULT_TAG_COLOR == "#3498db"
