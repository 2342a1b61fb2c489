from __future__ import annotations

from dataclasses import dataclass
from html import escape
from typing import Any
from urllib.parse import quote

BRAND_NAME = "HomeNest"
BRAND_COLOR = "#6366f1"


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    text_body: str
    html_body: str


def _optional_text(data: dict[str, Any] | None, key: str) -> str | None:
    if not isinstance(data, dict):
        return None
    value = data.get(key)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def build_open_url(app_base_url: str, data: dict[str, Any] | None) -> str:
    project_id = _optional_text(data, "projectId")
    if project_id:
        return f"{app_base_url}projects/{quote(project_id, safe='')}"
    return f"{app_base_url}open"


def build_settings_url(app_base_url: str) -> str:
    return f"{app_base_url}settings/notifications"


def render_notification_email(
    *,
    title: str,
    body: str,
    data: dict[str, Any] | None,
    app_base_url: str,
) -> RenderedEmail:
    project_name = _optional_text(data, "projectName")
    open_url = build_open_url(app_base_url, data)
    settings_url = build_settings_url(app_base_url)

    safe_title = escape(title)
    safe_body = escape(body)

    text_lines = []
    if project_name:
        text_lines.extend([project_name.upper(), ""])
    text_lines.extend(
        [
            title,
            "",
            body,
            "",
            f"Open in App: {open_url}",
            "",
            f"You received this email because you have notifications enabled in {BRAND_NAME}.",
            f"Manage notification settings: {settings_url}",
        ]
    )

    html_lines = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '<meta charset="utf-8">',
        '<meta name="viewport" content="width=device-width, initial-scale=1.0">',
        f"<title>{safe_title}</title>",
        "</head>",
        '<body style="margin: 0; padding: 0; font-family: -apple-system, '
        "BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; "
        'background-color: #f5f5f5;">',
        '<table role="presentation" style="width: 100%; border-collapse: collapse;">',
        '<tr><td style="padding: 40px 20px;">',
        '<table role="presentation" style="max-width: 600px; margin: 0 auto; '
        'background-color: #ffffff; border-radius: 16px; overflow: hidden;">',
        f'<tr><td style="background-color: {BRAND_COLOR}; padding: 32px 40px; '
        'text-align: center;">',
        f'<h1 style="margin: 0; color: #ffffff; font-size: 28px;">{BRAND_NAME}</h1>',
        "</td></tr>",
        '<tr><td style="padding: 40px;">',
    ]
    if project_name:
        html_lines.append(
            f'<p style="margin: 0 0 8px 0; color: {BRAND_COLOR}; font-size: 14px; '
            f'font-weight: 600; text-transform: uppercase;">{escape(project_name)}</p>'
        )
    html_lines.extend(
        [
            f'<h2 style="margin: 0 0 16px 0; color: #1f2937; font-size: 24px;">'
            f"{safe_title}</h2>",
            f'<p style="margin: 0 0 24px 0; color: #4b5563; font-size: 16px; '
            f'line-height: 1.6;">{safe_body}</p>',
            f'<a href="{escape(open_url)}" style="display: inline-block; '
            f"background-color: {BRAND_COLOR}; color: #ffffff; text-decoration: none; "
            'padding: 14px 28px; border-radius: 8px; font-weight: 600;">Open in App</a>',
            "</td></tr>",
            '<tr><td style="background-color: #f9fafb; padding: 24px 40px; '
            'border-top: 1px solid #e5e7eb;">',
            '<p style="margin: 0; color: #9ca3af; font-size: 14px; text-align: center;">',
            f"You received this email because you have notifications enabled in {BRAND_NAME}.",
            "<br>",
            f'<a href="{escape(settings_url)}" style="color: {BRAND_COLOR}; '
            'text-decoration: none;">Manage notification settings</a>',
            "</p>",
            "</td></tr>",
            "</table>",
            "</td></tr>",
            "</table>",
            "</body>",
            "</html>",
        ]
    )

    return RenderedEmail(
        subject=title,
        text_body="\n".join(text_lines),
        html_body="\n".join(html_lines),
    )
