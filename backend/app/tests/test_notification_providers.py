from __future__ import annotations

import json
from dataclasses import replace

import httpx
import pytest

from app.notifications.config import (
    DEFAULT_EXPO_PUSH_URL,
    DEFAULT_RESEND_API_URL,
    NotificationConfig,
)
from app.notifications.expo_provider import ExpoPushProvider
from app.notifications.resend_provider import ResendEmailProvider
from app.notifications.templates import RenderedEmail

CONFIG = NotificationConfig(
    app_base_url="homenest://",
    from_email="HomeNest <notifications@gethomenest.com>",
    expo_access_token="expo-secret",
    expo_push_url=DEFAULT_EXPO_PUSH_URL,
    resend_api_key="re_secret",
    resend_api_url=DEFAULT_RESEND_API_URL,
)

RENDERED = RenderedEmail(
    subject="Budget exceeded",
    text_body="Kitchen is over budget",
    html_body="<p>Kitchen is over budget</p>",
)


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected request to {request.url}")


def test_expo_sends_one_message_per_token() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"data": [{"status": "ok"}, {"status": "ok"}]})

    provider = ExpoPushProvider(CONFIG, transport=httpx.MockTransport(handler))
    result = provider.send(
        tokens=["ExponentPushToken[a]", "ExponentPushToken[b]"],
        title="Stage completed",
        body="Demolition is done",
        data={"projectId": "proj-42"},
    )

    assert result.succeeded
    assert len(captured) == 1
    request = captured[0]
    assert str(request.url) == DEFAULT_EXPO_PUSH_URL
    assert request.headers["Authorization"] == "Bearer expo-secret"
    messages = json.loads(request.content)
    assert [message["to"] for message in messages] == [
        "ExponentPushToken[a]",
        "ExponentPushToken[b]",
    ]
    assert messages[0] == {
        "to": "ExponentPushToken[a]",
        "sound": "default",
        "title": "Stage completed",
        "body": "Demolition is done",
        "data": {"projectId": "proj-42"},
        "priority": "high",
        "channelId": "default",
    }


def test_expo_non_2xx_keeps_error_text() -> None:
    provider = ExpoPushProvider(
        CONFIG,
        transport=httpx.MockTransport(
            lambda request: httpx.Response(400, text='{"errors":["invalid token"]}')
        ),
    )

    result = provider.send(tokens=["t"], title="t", body="b", data=None)

    assert not result.succeeded
    assert result.error_code == "HTTP_400"
    assert result.error_message == 'Expo API error: {"errors":["invalid token"]}'


def test_expo_network_error_is_a_failed_result() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    provider = ExpoPushProvider(CONFIG, transport=httpx.MockTransport(handler))
    result = provider.send(tokens=["t"], title="t", body="b", data=None)

    assert result.status == "failed"
    assert result.error_message == "Push failed: connection refused"


def test_expo_missing_credential_fails_without_request() -> None:
    provider = ExpoPushProvider(
        replace(CONFIG, expo_access_token=""),
        transport=httpx.MockTransport(_unreachable),
    )

    result = provider.send(tokens=["t"], title="t", body="b", data=None)

    assert result.status == "failed"
    assert result.error_message == "EXPO_ACCESS_TOKEN not configured"


def test_resend_posts_rendered_email() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"id": "em_123"})

    provider = ResendEmailProvider(CONFIG, transport=httpx.MockTransport(handler))
    result = provider.send(to_email="owner@example.com", rendered=RENDERED)

    assert result.succeeded
    assert result.provider_message_id == "em_123"
    request = captured[0]
    assert str(request.url) == DEFAULT_RESEND_API_URL
    assert request.headers["Authorization"] == "Bearer re_secret"
    payload = json.loads(request.content)
    assert payload["from"] == "HomeNest <notifications@gethomenest.com>"
    assert payload["to"] == ["owner@example.com"]
    assert payload["subject"] == "Budget exceeded"
    assert payload["html"] == "<p>Kitchen is over budget</p>"


def test_resend_non_2xx_keeps_error_text() -> None:
    provider = ResendEmailProvider(
        CONFIG,
        transport=httpx.MockTransport(
            lambda request: httpx.Response(422, text="invalid `to` field")
        ),
    )

    result = provider.send(to_email="owner@example.com", rendered=RENDERED)

    assert result.status == "failed"
    assert result.error_message == "Resend API error: invalid `to` field"


def test_resend_timeout_is_a_failed_result() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    provider = ResendEmailProvider(CONFIG, transport=httpx.MockTransport(handler))
    result = provider.send(to_email="owner@example.com", rendered=RENDERED)

    assert result.error_code == "TIMEOUT"
    assert result.error_message == "Email failed: timed out"


def test_resend_missing_credential_fails_without_request() -> None:
    provider = ResendEmailProvider(
        replace(CONFIG, resend_api_key=""),
        transport=httpx.MockTransport(_unreachable),
    )

    result = provider.send(to_email="owner@example.com", rendered=RENDERED)

    assert result.status == "failed"
    assert result.error_message == "RESEND_API_KEY not configured"


@pytest.mark.parametrize("provider_cls", [ExpoPushProvider, ResendEmailProvider])
def test_dry_run_never_calls_out(provider_cls: type) -> None:
    provider = provider_cls(
        replace(CONFIG, dry_run=True, expo_access_token="", resend_api_key=""),
        transport=httpx.MockTransport(_unreachable),
    )

    if provider_cls is ExpoPushProvider:
        result = provider.send(tokens=["t"], title="t", body="b", data=None)
    else:
        result = provider.send(to_email="owner@example.com", rendered=RENDERED)

    assert result.succeeded
    assert result.provider_message_id == "dry-run"
