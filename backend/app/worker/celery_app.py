from __future__ import annotations

import os

from celery import Celery

BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", BROKER_URL)
QUEUE_POLL_SECONDS = float(os.getenv("NOTIFICATION_QUEUE_POLL_SECONDS", "60"))

celery_app = Celery(
    "homenest_notifications_worker",
    broker=BROKER_URL,
    backend=RESULT_BACKEND,
    include=[
        "app.worker.tasks.notifications",
    ],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    beat_schedule={
        "process-notification-queue": {
            "task": "app.worker.tasks.process_notification_queue",
            "schedule": QUEUE_POLL_SECONDS,
        },
    },
)
