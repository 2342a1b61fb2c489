from __future__ import annotations

import httpx

from app.notifications.config import NotificationConfig
from app.notifications.results import ProviderSendResult
from app.notifications.templates import RenderedEmail


class ResendEmailProvider:
    def __init__(
        self,
        config: NotificationConfig,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport

    def send(
        self,
        *,
        to_email: str,
        rendered: RenderedEmail,
    ) -> ProviderSendResult:
        if self.config.dry_run:
            return ProviderSendResult.sent(provider_message_id="dry-run")

        if not self.config.resend_api_key:
            return ProviderSendResult.failed(
                "RESEND_API_KEY_MISSING", "RESEND_API_KEY not configured"
            )

        request_payload = {
            "from": self.config.from_email,
            "to": [to_email],
            "subject": rendered.subject,
            "html": rendered.html_body,
            "text": rendered.text_body,
        }

        headers = {
            "Authorization": f"Bearer {self.config.resend_api_key}",
            "Content-Type": "application/json",
        }

        try:
            with httpx.Client(
                timeout=self.config.http_timeout_seconds, transport=self._transport
            ) as client:
                response = client.post(
                    self.config.resend_api_url,
                    headers=headers,
                    json=request_payload,
                )
        except httpx.TimeoutException as exc:
            return ProviderSendResult.failed("TIMEOUT", f"Email failed: {exc}")
        except httpx.HTTPError as exc:
            return ProviderSendResult.failed("HTTP_ERROR", f"Email failed: {exc}")

        if not response.is_success:
            return ProviderSendResult.failed(
                f"HTTP_{response.status_code}", f"Resend API error: {response.text}"
            )

        provider_message_id = None
        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = {}
        if isinstance(body, dict):
            provider_message_id = body.get("id")
        return ProviderSendResult.sent(provider_message_id=provider_message_id)
