from __future__ import annotations

import pytest

from app.notifications.preferences import NotificationPreferences

ALL_TYPES = [
    "todo_due_reminder",
    "todo_overdue",
    "stage_starting",
    "stage_completed",
    "budget_warning",
    "budget_exceeded",
]


@pytest.mark.parametrize("notification_type", ALL_TYPES + ["project_invite"])
def test_missing_record_enables_everything(notification_type: str) -> None:
    prefs = NotificationPreferences.from_blob(None)

    assert prefs.is_category_enabled(notification_type) is True
    assert prefs.push_channel_enabled is True
    assert prefs.email_channel_enabled is True


def test_stage_updates_is_fallback_for_stage_categories() -> None:
    prefs = NotificationPreferences.from_blob({"stageUpdates": False})

    assert prefs.is_category_enabled("stage_starting") is False
    assert prefs.is_category_enabled("stage_completed") is False
    assert prefs.is_category_enabled("budget_warning") is True


def test_specific_flag_wins_over_fallback() -> None:
    prefs = NotificationPreferences.from_blob(
        {"stageUpdates": False, "stageStarting": True, "budgetAlerts": True, "budgetExceeded": False}
    )

    assert prefs.is_category_enabled("stage_starting") is True
    assert prefs.is_category_enabled("stage_completed") is False
    assert prefs.is_category_enabled("budget_warning") is True
    assert prefs.is_category_enabled("budget_exceeded") is False


def test_todo_flags_have_no_fallback() -> None:
    prefs = NotificationPreferences.from_blob(
        {"todoReminders": False, "stageUpdates": False, "budgetAlerts": False}
    )

    assert prefs.is_category_enabled("todo_due_reminder") is False
    assert prefs.is_category_enabled("todo_overdue") is True


def test_unknown_types_are_always_enabled() -> None:
    prefs = NotificationPreferences.from_blob(
        {key: False for key in ("todoReminders", "overdueReminders", "stageUpdates", "budgetAlerts")}
    )

    assert prefs.is_category_enabled("team_member_joined") is True


def test_non_boolean_values_are_treated_as_missing() -> None:
    prefs = NotificationPreferences.from_blob(
        {"pushEnabled": "false", "emailEnabled": 0, "budgetAlerts": None}
    )

    assert prefs.push_enabled is None
    assert prefs.push_channel_enabled is True
    assert prefs.email_channel_enabled is True
    assert prefs.is_category_enabled("budget_exceeded") is True


def test_channel_flags() -> None:
    prefs = NotificationPreferences.from_blob({"pushEnabled": False, "emailEnabled": True})

    assert prefs.push_channel_enabled is False
    assert prefs.email_channel_enabled is True
