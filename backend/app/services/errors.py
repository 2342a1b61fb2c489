from __future__ import annotations


class ApiError(Exception):
    def __init__(self, *, status_code: int, code: str, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message


class NotificationPipelineError(Exception):
    """Base class for notification pipeline failures."""


class QueueReadError(NotificationPipelineError):
    """Raised when a batch cannot be read from the notification queue."""


class UserNotFoundError(NotificationPipelineError):
    """Raised when a queued event references an unknown user."""

    def __init__(self, user_id: str) -> None:
        super().__init__("User not found")
        self.user_id = user_id
