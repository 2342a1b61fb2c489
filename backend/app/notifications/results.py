from __future__ import annotations

from dataclasses import dataclass

from app.db.models import NotificationLogStatus


@dataclass(frozen=True)
class ProviderSendResult:
    status: str
    error_code: str | None = None
    error_message: str | None = None
    provider_message_id: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == NotificationLogStatus.sent.value

    @classmethod
    def sent(cls, provider_message_id: str | None = None) -> ProviderSendResult:
        return cls(
            status=NotificationLogStatus.sent.value,
            provider_message_id=provider_message_id,
        )

    @classmethod
    def failed(cls, error_code: str, error_message: str) -> ProviderSendResult:
        return cls(
            status=NotificationLogStatus.failed.value,
            error_code=error_code,
            error_message=error_message,
        )
