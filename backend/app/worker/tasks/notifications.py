from __future__ import annotations

import logging
from typing import Any

from app.db.session import get_session_factory
from app.notifications.config import load_notification_config
from app.notifications.time_utils import now_utc
from app.services.notification_queue_processor import NotificationQueueProcessor
from app.worker.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="app.worker.tasks.process_notification_queue")
def process_notification_queue() -> dict[str, Any]:
    session_factory = get_session_factory()
    config = load_notification_config()

    with session_factory() as session:
        summary = NotificationQueueProcessor(config).process_batch(
            session,
            now=now_utc(),
        )

    logger.info(
        "process_notification_queue_summary",
        extra={
            "processed": summary.processed,
            "success": summary.success,
            "failed": summary.failed,
        },
    )
    return summary.as_dict()
