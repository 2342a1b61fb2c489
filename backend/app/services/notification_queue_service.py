from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.models import NotificationQueueArchive, NotificationQueueMessage
from app.notifications.time_utils import visible_after
from app.services.errors import QueueReadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueueMessage:
    msg_id: int
    read_ct: int
    enqueued_at: datetime
    message: Any


class NotificationQueueService:
    """Durable at-least-once queue backed by the ``notification_queue`` table.

    ``read`` claims messages by pushing their visibility timestamp forward.
    A claimed message that is neither deleted nor archived becomes visible
    again once that timestamp passes, with ``read_ct`` incremented on the
    next read.
    """

    def send(
        self,
        session: Session,
        *,
        payload: dict[str, Any],
        now: datetime,
        delay_seconds: int = 0,
    ) -> int:
        row = NotificationQueueMessage(
            read_ct=0,
            enqueued_at=now,
            vt=visible_after(now, delay_seconds),
            message=payload,
        )
        session.add(row)
        session.commit()
        return row.msg_id

    def read(
        self,
        session: Session,
        *,
        now: datetime,
        visibility_timeout: int,
        limit: int,
    ) -> list[QueueMessage]:
        stmt = (
            select(NotificationQueueMessage)
            .where(NotificationQueueMessage.vt <= now)
            .order_by(NotificationQueueMessage.msg_id.asc())
            .limit(limit)
            .with_for_update(skip_locked=True)
            .execution_options(populate_existing=True)
        )
        try:
            rows = list(session.scalars(stmt).all())
            for row in rows:
                row.read_ct += 1
                row.vt = visible_after(now, visibility_timeout)
                session.add(row)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("notification_queue_read_failed", extra={"error": str(exc)})
            raise QueueReadError(str(exc)) from exc

        return [
            QueueMessage(
                msg_id=row.msg_id,
                read_ct=row.read_ct,
                enqueued_at=row.enqueued_at,
                message=row.message,
            )
            for row in rows
        ]

    def delete(self, session: Session, *, msg_id: int) -> bool:
        row = session.get(NotificationQueueMessage, msg_id)
        if row is None:
            return False
        session.delete(row)
        session.commit()
        return True

    def archive(self, session: Session, *, msg_id: int, now: datetime) -> bool:
        row = session.get(NotificationQueueMessage, msg_id)
        if row is None:
            return False
        session.add(
            NotificationQueueArchive(
                msg_id=row.msg_id,
                read_ct=row.read_ct,
                enqueued_at=row.enqueued_at,
                vt=row.vt,
                message=row.message,
                archived_at=now,
            )
        )
        session.delete(row)
        session.commit()
        return True
