from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.schemas import MessageResultResponse, ProcessQueueResponse
from app.db.session import get_db_session
from app.notifications.config import load_notification_config
from app.notifications.time_utils import now_utc
from app.services.errors import ApiError, QueueReadError
from app.services.notification_queue_processor import NotificationQueueProcessor

router = APIRouter(tags=["notifications"])


def get_queue_processor() -> NotificationQueueProcessor:
    return NotificationQueueProcessor(load_notification_config())


@router.post(
    "/functions/process-notification-queue",
    response_model=ProcessQueueResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
def process_notification_queue(
    session: Session = Depends(get_db_session),
    processor: NotificationQueueProcessor = Depends(get_queue_processor),
) -> ProcessQueueResponse:
    try:
        summary = processor.process_batch(session, now=now_utc())
    except QueueReadError as exc:
        raise ApiError(
            status_code=500,
            code="QUEUE_READ_FAILED",
            message=f"Failed to read queue: {exc}",
        ) from exc

    return ProcessQueueResponse(
        processed=summary.processed,
        success=summary.success,
        failed=summary.failed,
        results=[
            MessageResultResponse(
                msg_id=result.msg_id,
                success=result.success,
                error=result.error,
            )
            for result in summary.results
        ],
        message="No messages to process" if summary.processed == 0 else None,
    )
