from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from app.db.models import NotificationChannel
from app.notifications.time_utils import start_of_utc_day


@dataclass(frozen=True)
class DedupeKey:
    user_id: str
    type: str
    related_id: str | None
    channel: NotificationChannel

    @property
    def is_dedupable(self) -> bool:
        # Events without a related entity cannot be matched against earlier sends.
        return bool(self.related_id)

    def raw(self) -> str:
        return (
            f"{self.type}|{self.channel.value}|user:{self.user_id}"
            f"|related:{self.related_id or '-'}"
        )


def dedupe_window_start(now: datetime) -> datetime:
    return start_of_utc_day(now)
