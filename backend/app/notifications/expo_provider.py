from __future__ import annotations

from typing import Any

import httpx

from app.notifications.config import NotificationConfig
from app.notifications.results import ProviderSendResult


class ExpoPushProvider:
    def __init__(
        self,
        config: NotificationConfig,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport

    def build_messages(
        self,
        *,
        tokens: list[str],
        title: str,
        body: str,
        data: dict[str, Any] | None,
    ) -> list[dict[str, Any]]:
        return [
            {
                "to": token,
                "sound": "default",
                "title": title,
                "body": body,
                "data": data,
                "priority": "high",
                "channelId": "default",
            }
            for token in tokens
        ]

    def send(
        self,
        *,
        tokens: list[str],
        title: str,
        body: str,
        data: dict[str, Any] | None,
    ) -> ProviderSendResult:
        if self.config.dry_run:
            return ProviderSendResult.sent(provider_message_id="dry-run")

        if not self.config.expo_access_token:
            return ProviderSendResult.failed(
                "EXPO_ACCESS_TOKEN_MISSING", "EXPO_ACCESS_TOKEN not configured"
            )

        headers = {
            "Authorization": f"Bearer {self.config.expo_access_token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        messages = self.build_messages(tokens=tokens, title=title, body=body, data=data)

        try:
            with httpx.Client(
                timeout=self.config.http_timeout_seconds, transport=self._transport
            ) as client:
                response = client.post(
                    self.config.expo_push_url,
                    headers=headers,
                    json=messages,
                )
        except httpx.TimeoutException as exc:
            return ProviderSendResult.failed("TIMEOUT", f"Push failed: {exc}")
        except httpx.HTTPError as exc:
            return ProviderSendResult.failed("HTTP_ERROR", f"Push failed: {exc}")

        if response.is_success:
            return ProviderSendResult.sent()

        return ProviderSendResult.failed(
            f"HTTP_{response.status_code}", f"Expo API error: {response.text}"
        )
