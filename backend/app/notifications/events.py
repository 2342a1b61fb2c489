from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class NotificationEvent(BaseModel):
    """Queue payload as written by the event producers (camelCase keys)."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId", min_length=1)
    type: str = Field(min_length=1)
    title: str
    body: str
    data: dict[str, Any] | None = None
    related_type: str | None = Field(default=None, alias="relatedType")
    related_id: str | None = Field(default=None, alias="relatedId")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
