from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.db.models import NotificationChannel
from app.notifications.config import NotificationConfig
from app.notifications.dedupe import DedupeKey
from app.notifications.events import NotificationEvent
from app.notifications.expo_provider import ExpoPushProvider
from app.notifications.resend_provider import ResendEmailProvider
from app.notifications.results import ProviderSendResult
from app.notifications.templates import render_notification_email
from app.services.errors import UserNotFoundError
from app.services.notification_log_service import NotificationLogService
from app.services.notification_profile_service import NotificationProfileService
from app.services.notification_queue_service import (
    NotificationQueueService,
    QueueMessage,
)

logger = logging.getLogger(__name__)

MAX_RETRIES_EXCEEDED = "Max retries exceeded"


@dataclass(frozen=True)
class MessageResult:
    msg_id: int
    success: bool
    error: str | None = None


@dataclass(frozen=True)
class ProcessSummary:
    processed: int
    success: int
    failed: int
    results: list[MessageResult] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "processed": self.processed,
            "success": self.success,
            "failed": self.failed,
            "results": [asdict(result) for result in self.results],
        }


class NotificationQueueProcessor:
    """Runs one pass over the notification queue.

    Each message goes through the retry gate, the user's preferences and then
    push and email independently. A message is deleted only when every channel
    that was attempted succeeded; otherwise it stays in the queue and becomes
    visible again after the visibility timeout. Channels that already sent
    today are skipped on the retry, so only the failed ones go out again.
    """

    def __init__(
        self,
        config: NotificationConfig,
        *,
        queue_service: NotificationQueueService | None = None,
        profile_service: NotificationProfileService | None = None,
        log_service: NotificationLogService | None = None,
        push_provider: ExpoPushProvider | None = None,
        email_provider: ResendEmailProvider | None = None,
    ) -> None:
        self.config = config
        self.queue_service = queue_service or NotificationQueueService()
        self.profile_service = profile_service or NotificationProfileService()
        self.log_service = log_service or NotificationLogService()
        self.push_provider = push_provider or ExpoPushProvider(config)
        self.email_provider = email_provider or ResendEmailProvider(config)

    def process_batch(self, session: Session, *, now: datetime) -> ProcessSummary:
        # QueueReadError propagates: nothing has been claimed yet.
        messages = self.queue_service.read(
            session,
            now=now,
            visibility_timeout=self.config.visibility_timeout_seconds,
            limit=self.config.batch_size,
        )

        results = [
            self.process_message(session, message, now=now) for message in messages
        ]
        succeeded = sum(1 for result in results if result.success)
        return ProcessSummary(
            processed=len(messages),
            success=succeeded,
            failed=len(results) - succeeded,
            results=results,
        )

    def process_message(
        self, session: Session, message: QueueMessage, *, now: datetime
    ) -> MessageResult:
        log_extra = {"msg_id": message.msg_id, "read_ct": message.read_ct}
        try:
            # read_ct includes the current read, so attempt max_retries still runs.
            if message.read_ct > self.config.max_retries:
                self.queue_service.archive(session, msg_id=message.msg_id, now=now)
                logger.warning("notification_message_archived", extra=log_extra)
                return MessageResult(
                    msg_id=message.msg_id, success=False, error=MAX_RETRIES_EXCEEDED
                )

            error = self._deliver(session, message.message, now=now)
            if error is not None:
                return MessageResult(msg_id=message.msg_id, success=False, error=error)

            self.queue_service.delete(session, msg_id=message.msg_id)
            return MessageResult(msg_id=message.msg_id, success=True)
        except ValidationError as exc:
            error = _describe_validation_error(exc)
            logger.warning(
                "notification_payload_invalid", extra={**log_extra, "error": error}
            )
            return MessageResult(msg_id=message.msg_id, success=False, error=error)
        except UserNotFoundError as exc:
            logger.warning(
                "notification_user_not_found",
                extra={**log_extra, "user_id": exc.user_id},
            )
            return MessageResult(msg_id=message.msg_id, success=False, error=str(exc))
        except Exception as exc:
            session.rollback()
            logger.exception("notification_message_failed", extra=log_extra)
            return MessageResult(msg_id=message.msg_id, success=False, error=str(exc))

    def _deliver(self, session: Session, payload: Any, *, now: datetime) -> str | None:
        event = NotificationEvent.model_validate(payload)
        user = self.profile_service.get_account(session, user_id=event.user_id)
        preferences = self.profile_service.load_preferences(
            session, user_id=event.user_id
        )

        if not preferences.is_category_enabled(event.type):
            logger.info(
                "notification_category_disabled",
                extra={"user_id": event.user_id, "type": event.type},
            )
            return None

        failures: list[str] = []

        if preferences.push_channel_enabled:
            result = self._dispatch_push(session, event, now=now)
            if result is not None and not result.succeeded:
                failures.append(f"push: {result.error_message}")

        to_email = self.profile_service.resolve_email(user)
        if preferences.email_channel_enabled and to_email:
            result = self._dispatch_email(session, event, to_email=to_email, now=now)
            if result is not None and not result.succeeded:
                failures.append(f"email: {result.error_message}")

        return "; ".join(failures) if failures else None

    def _dispatch_push(
        self, session: Session, event: NotificationEvent, *, now: datetime
    ) -> ProviderSendResult | None:
        key = self._dedupe_key(event, NotificationChannel.push)
        if self.log_service.has_sent_today(session, key=key, now=now):
            logger.info("notification_channel_deduplicated", extra={"key": key.raw()})
            return None

        tokens = self.profile_service.list_active_push_tokens(
            session, user_id=event.user_id
        )
        if not tokens:
            return None

        result = self.push_provider.send(
            tokens=tokens, title=event.title, body=event.body, data=event.data
        )
        return self._record(session, event, key=key, result=result, now=now)

    def _dispatch_email(
        self,
        session: Session,
        event: NotificationEvent,
        *,
        to_email: str,
        now: datetime,
    ) -> ProviderSendResult | None:
        key = self._dedupe_key(event, NotificationChannel.email)
        if self.log_service.has_sent_today(session, key=key, now=now):
            logger.info("notification_channel_deduplicated", extra={"key": key.raw()})
            return None

        rendered = render_notification_email(
            title=event.title,
            body=event.body,
            data=event.data,
            app_base_url=self.config.app_base_url,
        )
        result = self.email_provider.send(to_email=to_email, rendered=rendered)
        return self._record(session, event, key=key, result=result, now=now)

    def _record(
        self,
        session: Session,
        event: NotificationEvent,
        *,
        key: DedupeKey,
        result: ProviderSendResult,
        now: datetime,
    ) -> ProviderSendResult:
        self.log_service.record_attempt(
            session, event=event, key=key, result=result, now=now
        )
        if result.succeeded:
            logger.info(
                "notification_channel_sent",
                extra={
                    "key": key.raw(),
                    "provider_message_id": result.provider_message_id,
                },
            )
        else:
            logger.warning(
                "notification_channel_failed",
                extra={
                    "key": key.raw(),
                    "error_code": result.error_code,
                    "error": result.error_message,
                },
            )
        return result

    def _dedupe_key(
        self, event: NotificationEvent, channel: NotificationChannel
    ) -> DedupeKey:
        return DedupeKey(
            user_id=event.user_id,
            type=event.type,
            related_id=event.related_id,
            channel=channel,
        )


def _describe_validation_error(exc: ValidationError) -> str:
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or 'payload'}: {error['msg']}"
        for error in exc.errors()
    )
    return f"Malformed payload: {details}"
