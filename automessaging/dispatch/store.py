from __future__ import annotations

from datetime import datetime
from typing import Callable

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from automessaging.dispatch.errors import MessageNotFound
from automessaging.dispatch.ports import PendingMessage
from automessaging.models.tables import Message
from automessaging.util.time import as_utc


def _to_record(m: Message) -> PendingMessage:
    return PendingMessage(
        id=m.id,
        to=m.to,
        content=m.content,
        sent=bool(m.sent),
        sent_at=as_utc(m.sent_at) if m.sent_at is not None else None,
        created_at=as_utc(m.created_at),
    )


class SqlMessageStore:
    """Message store backed by the ``messages`` table; one session per call."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def fetch_next_unsent(self, limit: int) -> list[PendingMessage]:
        stmt = (
            select(Message)
            .where(Message.sent.is_(False))
            .order_by(Message.created_at.asc(), Message.id.asc())
            .limit(limit)
        )
        with self._session_factory() as db:
            return [_to_record(m) for m in db.scalars(stmt).all()]

    def mark_as_sent(self, message_id: str, sent_at: datetime) -> None:
        stmt = (
            update(Message)
            .where(Message.id == message_id, Message.sent.is_(False))
            .values(sent=True, sent_at=sent_at)
        )
        with self._session_factory() as db:
            res = db.execute(stmt)
            if res.rowcount == 0:
                db.rollback()
                raise MessageNotFound(f"no unsent message with id {message_id}")
            db.commit()

    def list_sent(self, offset: int, limit: int) -> tuple[list[PendingMessage], int]:
        stmt = (
            select(Message)
            .where(Message.sent.is_(True))
            .order_by(Message.sent_at.desc().nulls_last(), Message.created_at.desc(), Message.id.asc())
            .offset(offset)
            .limit(limit)
        )
        count_stmt = select(func.count()).select_from(Message).where(Message.sent.is_(True))
        with self._session_factory() as db:
            items = [_to_record(m) for m in db.scalars(stmt).all()]
            total = db.scalar(count_stmt) or 0
        return items, int(total)
