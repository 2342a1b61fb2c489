"""Per-user notification preferences.

The mobile client stores preferences as a loosely typed JSON blob under
``user_profiles.preferences["notifications"]``. Older clients only wrote the
broad ``stageUpdates`` and ``budgetAlerts`` flags, newer ones write one flag per
category. Every flag is therefore optional and resolved in this order:

1. the category-specific flag (e.g. ``stageStarting``),
2. the broad fallback flag (e.g. ``stageUpdates``),
3. enabled.

A missing preference never suppresses a notification.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from app.db.models import NotificationType

_BLOB_KEYS = {
    "push_enabled": "pushEnabled",
    "email_enabled": "emailEnabled",
    "todo_reminders": "todoReminders",
    "overdue_reminders": "overdueReminders",
    "stage_updates": "stageUpdates",
    "stage_starting": "stageStarting",
    "stage_completed": "stageCompleted",
    "budget_alerts": "budgetAlerts",
    "budget_warning": "budgetWarning",
    "budget_exceeded": "budgetExceeded",
}


@dataclass(frozen=True)
class NotificationPreferences:
    push_enabled: bool | None = None
    email_enabled: bool | None = None
    todo_reminders: bool | None = None
    overdue_reminders: bool | None = None
    stage_updates: bool | None = None
    stage_starting: bool | None = None
    stage_completed: bool | None = None
    budget_alerts: bool | None = None
    budget_warning: bool | None = None
    budget_exceeded: bool | None = None

    @classmethod
    def from_blob(cls, blob: Mapping[str, Any] | None) -> NotificationPreferences:
        if not isinstance(blob, Mapping):
            return cls()

        values: dict[str, bool] = {}
        for field in fields(cls):
            raw = blob.get(_BLOB_KEYS[field.name])
            if isinstance(raw, bool):
                values[field.name] = raw
        return cls(**values)

    @property
    def push_channel_enabled(self) -> bool:
        return self.push_enabled is not False

    @property
    def email_channel_enabled(self) -> bool:
        return self.email_enabled is not False

    def is_category_enabled(self, notification_type: str) -> bool:
        flags = self._category_flags(notification_type)
        for flag in flags:
            if flag is not None:
                return flag
        return True

    def _category_flags(self, notification_type: str) -> tuple[bool | None, ...]:
        if notification_type == NotificationType.todo_due_reminder.value:
            return (self.todo_reminders,)
        if notification_type == NotificationType.todo_overdue.value:
            return (self.overdue_reminders,)
        if notification_type == NotificationType.stage_starting.value:
            return (self.stage_starting, self.stage_updates)
        if notification_type == NotificationType.stage_completed.value:
            return (self.stage_completed, self.stage_updates)
        if notification_type == NotificationType.budget_warning.value:
            return (self.budget_warning, self.budget_alerts)
        if notification_type == NotificationType.budget_exceeded.value:
            return (self.budget_exceeded, self.budget_alerts)
        return ()
