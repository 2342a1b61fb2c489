from __future__ import annotations

import os
import uuid
from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class NotificationChannel(str, Enum):
    push = "push"
    email = "email"


class NotificationLogStatus(str, Enum):
    sent = "sent"
    failed = "failed"


class NotificationType(str, Enum):
    todo_due_reminder = "todo_due_reminder"
    todo_overdue = "todo_overdue"
    stage_starting = "stage_starting"
    stage_completed = "stage_completed"
    budget_warning = "budget_warning"
    budget_exceeded = "budget_exceeded"


JSON_TYPE = JSON().with_variant(JSONB(), "postgresql")
JSON_EMPTY_DEFAULT = (
    text("'{}'::jsonb")
    if os.getenv("DATABASE_URL", "").startswith("postgresql")
    else text("'{}'")
)
# SQLite only autoincrements INTEGER PRIMARY KEY columns.
MSG_ID_TYPE = BigInteger().with_variant(Integer(), "sqlite")


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    preferences: Mapped[dict[str, Any]] = mapped_column(
        JSON_TYPE,
        nullable=False,
        server_default=JSON_EMPTY_DEFAULT,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class PushToken(Base):
    __tablename__ = "push_tokens"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    token: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class NotificationLog(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        Index(
            "ix_notifications_dedupe",
            "user_id",
            "type",
            "related_id",
            "channel",
            "created_at",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    data: Mapped[dict[str, Any] | None] = mapped_column(JSON_TYPE, nullable=True)
    channel: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    sent_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    provider_message_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    related_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    related_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class NotificationQueueMessage(Base):
    __tablename__ = "notification_queue"
    # Without AUTOINCREMENT SQLite reuses the highest deleted rowid, which
    # would collide with archived msg_ids.
    __table_args__ = {"sqlite_autoincrement": True}

    msg_id: Mapped[int] = mapped_column(
        MSG_ID_TYPE, primary_key=True, autoincrement=True
    )
    read_ct: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    enqueued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    vt: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    message: Mapped[dict[str, Any]] = mapped_column(
        JSON_TYPE,
        nullable=False,
        server_default=JSON_EMPTY_DEFAULT,
    )


class NotificationQueueArchive(Base):
    __tablename__ = "notification_queue_archive"

    msg_id: Mapped[int] = mapped_column(
        MSG_ID_TYPE, primary_key=True, autoincrement=False
    )
    read_ct: Mapped[int] = mapped_column(Integer, nullable=False)
    enqueued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    vt: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    message: Mapped[dict[str, Any]] = mapped_column(JSON_TYPE, nullable=False)
    archived_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
