from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from app.db.base import Base
from app.db.models import NotificationQueueArchive, NotificationQueueMessage
from app.db.session import configure_engine, get_engine, get_session_factory
from app.services.errors import QueueReadError
from app.services.notification_queue_service import NotificationQueueService

NOW = datetime(2026, 10, 19, 9, 0, tzinfo=UTC)
PAYLOAD = {"userId": "u1", "type": "todo_overdue", "title": "Overdue", "body": "Order tiles"}


@pytest.fixture()
def session_factory(tmp_path: Path) -> sessionmaker[Session]:
    configure_engine(f"sqlite:///{tmp_path / 'test_queue.db'}")
    engine = get_engine()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    yield get_session_factory()

    Base.metadata.drop_all(bind=engine)


def test_read_claims_messages_until_visibility_timeout(
    session_factory: sessionmaker[Session],
) -> None:
    queue = NotificationQueueService()
    with session_factory() as session:
        msg_id = queue.send(session, payload=PAYLOAD, now=NOW)

    with session_factory() as session:
        first = queue.read(session, now=NOW, visibility_timeout=30, limit=10)
        assert [(m.msg_id, m.read_ct) for m in first] == [(msg_id, 1)]
        assert first[0].message == PAYLOAD

        hidden = queue.read(
            session, now=NOW + timedelta(seconds=10), visibility_timeout=30, limit=10
        )
        assert hidden == []

        again = queue.read(
            session, now=NOW + timedelta(seconds=31), visibility_timeout=30, limit=10
        )
        assert [(m.msg_id, m.read_ct) for m in again] == [(msg_id, 2)]


def test_read_respects_limit_and_order(session_factory: sessionmaker[Session]) -> None:
    queue = NotificationQueueService()
    with session_factory() as session:
        ids = [queue.send(session, payload={**PAYLOAD, "title": str(i)}, now=NOW) for i in range(5)]

    with session_factory() as session:
        batch = queue.read(session, now=NOW, visibility_timeout=30, limit=3)
        assert [m.msg_id for m in batch] == ids[:3]

        rest = queue.read(session, now=NOW, visibility_timeout=30, limit=3)
        assert [m.msg_id for m in rest] == ids[3:]


def test_delayed_message_is_not_visible_yet(session_factory: sessionmaker[Session]) -> None:
    queue = NotificationQueueService()
    with session_factory() as session:
        queue.send(session, payload=PAYLOAD, now=NOW, delay_seconds=60)
        assert queue.read(session, now=NOW, visibility_timeout=30, limit=10) == []
        assert len(
            queue.read(session, now=NOW + timedelta(minutes=2), visibility_timeout=30, limit=10)
        ) == 1


def test_delete_and_archive(session_factory: sessionmaker[Session]) -> None:
    queue = NotificationQueueService()
    with session_factory() as session:
        deleted_id = queue.send(session, payload=PAYLOAD, now=NOW)
        archived_id = queue.send(session, payload=PAYLOAD, now=NOW)
        queue.read(session, now=NOW, visibility_timeout=30, limit=10)

        assert queue.delete(session, msg_id=deleted_id) is True
        assert queue.archive(session, msg_id=archived_id, now=NOW) is True
        assert queue.delete(session, msg_id=deleted_id) is False
        assert queue.archive(session, msg_id=archived_id, now=NOW) is False

    with session_factory() as session:
        assert list(session.scalars(select(NotificationQueueMessage)).all()) == []
        archived = session.scalar(select(NotificationQueueArchive))
        assert archived is not None
        assert archived.msg_id == archived_id
        assert archived.read_ct == 1
        assert archived.message == PAYLOAD


def test_read_failure_raises_queue_read_error(
    session_factory: sessionmaker[Session],
) -> None:
    Base.metadata.drop_all(bind=get_engine())

    with session_factory() as session:
        with pytest.raises(QueueReadError):
            NotificationQueueService().read(
                session, now=NOW, visibility_timeout=30, limit=10
            )


def test_msg_ids_are_not_reused_after_archive(
    session_factory: sessionmaker[Session],
) -> None:
    queue = NotificationQueueService()
    with session_factory() as session:
        first_id = queue.send(session, payload=PAYLOAD, now=NOW)
        queue.read(session, now=NOW, visibility_timeout=30, limit=10)
        assert queue.archive(session, msg_id=first_id, now=NOW) is True

        second_id = queue.send(session, payload={**PAYLOAD, "title": "again"}, now=NOW)
        assert second_id != first_id

        queue.read(session, now=NOW, visibility_timeout=30, limit=10)
        assert queue.archive(session, msg_id=second_id, now=NOW) is True

    with session_factory() as session:
        archived_ids = sorted(
            session.scalars(select(NotificationQueueArchive.msg_id)).all()
        )
        assert archived_ids == sorted([first_id, second_id])
        assert list(session.scalars(select(NotificationQueueMessage)).all()) == []


def test_msg_ids_are_not_reused_after_delete(
    session_factory: sessionmaker[Session],
) -> None:
    queue = NotificationQueueService()
    with session_factory() as session:
        first_id = queue.send(session, payload=PAYLOAD, now=NOW)
        assert queue.delete(session, msg_id=first_id) is True

        assert queue.send(session, payload=PAYLOAD, now=NOW) > first_id
