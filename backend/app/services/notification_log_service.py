from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models import NotificationLog, NotificationLogStatus
from app.notifications.dedupe import DedupeKey, dedupe_window_start
from app.notifications.events import NotificationEvent
from app.notifications.results import ProviderSendResult


class NotificationLogService:
    def has_sent_today(
        self, session: Session, *, key: DedupeKey, now: datetime
    ) -> bool:
        if not key.is_dedupable:
            return False

        stmt = (
            select(NotificationLog.id)
            .where(
                NotificationLog.user_id == key.user_id,
                NotificationLog.type == key.type,
                NotificationLog.related_id == key.related_id,
                NotificationLog.channel == key.channel.value,
                NotificationLog.status == NotificationLogStatus.sent.value,
                NotificationLog.created_at >= dedupe_window_start(now),
            )
            .limit(1)
        )
        return session.scalar(stmt) is not None

    def record_attempt(
        self,
        session: Session,
        *,
        event: NotificationEvent,
        key: DedupeKey,
        result: ProviderSendResult,
        now: datetime,
    ) -> NotificationLog:
        entry = NotificationLog(
            user_id=event.user_id,
            type=event.type,
            title=event.title,
            body=event.body,
            data=event.data,
            channel=key.channel.value,
            status=result.status,
            sent_at=now if result.succeeded else None,
            error_message=result.error_message,
            provider_message_id=result.provider_message_id,
            related_type=event.related_type,
            related_id=event.related_id,
            created_at=now,
        )
        session.add(entry)
        session.commit()
        return entry
