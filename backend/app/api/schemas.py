from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MessageResultResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    msg_id: int = Field(alias="msgId")
    success: bool
    error: str | None = None


class ProcessQueueResponse(BaseModel):
    processed: int
    success: int
    failed: int
    results: list[MessageResultResponse]
    message: str | None = None
