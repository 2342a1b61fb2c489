from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_EXPO_PUSH_URL = "https://exp.host/--/api/v2/push/send"
DEFAULT_RESEND_API_URL = "https://api.resend.com/emails"
DEFAULT_FROM_EMAIL = "HomeNest <notifications@gethomenest.com>"


@dataclass(frozen=True)
class NotificationConfig:
    app_base_url: str
    from_email: str
    expo_access_token: str
    expo_push_url: str
    resend_api_key: str
    resend_api_url: str
    batch_size: int = 10
    max_retries: int = 3
    visibility_timeout_seconds: int = 30
    http_timeout_seconds: float = 10.0
    dry_run: bool = False


def load_notification_config() -> NotificationConfig:
    return NotificationConfig(
        app_base_url=os.getenv("APP_BASE_URL", "homenest://"),
        from_email=os.getenv("FROM_EMAIL") or DEFAULT_FROM_EMAIL,
        expo_access_token=os.getenv("EXPO_ACCESS_TOKEN", ""),
        expo_push_url=os.getenv("EXPO_PUSH_URL", DEFAULT_EXPO_PUSH_URL),
        resend_api_key=os.getenv("RESEND_API_KEY", ""),
        resend_api_url=os.getenv("RESEND_API_URL", DEFAULT_RESEND_API_URL),
        batch_size=int(os.getenv("NOTIFICATION_QUEUE_BATCH_SIZE", "10")),
        max_retries=int(os.getenv("NOTIFICATION_QUEUE_MAX_RETRIES", "3")),
        visibility_timeout_seconds=int(
            os.getenv("NOTIFICATION_QUEUE_VISIBILITY_TIMEOUT", "30")
        ),
        http_timeout_seconds=float(os.getenv("NOTIFICATION_HTTP_TIMEOUT", "10.0")),
        dry_run=os.getenv("NOTIFICATIONS_DRY_RUN", "false").lower() == "true",
    )
