"""Contracts consumed by the dispatcher.

Each port carries exactly the operations the dispatch cycle needs so that
in-memory fakes can stand in for PostgreSQL, Redis and the webhook.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from automessaging.dispatch.cancel import CancelScope


@dataclass(frozen=True)
class PendingMessage:
    id: str
    to: str
    content: str
    sent: bool
    sent_at: datetime | None
    created_at: datetime


@dataclass(frozen=True)
class DeliveryResponse:
    status_code: int
    body: str


class MessageStore(Protocol):
    def fetch_next_unsent(self, limit: int) -> list[PendingMessage]: ...

    def mark_as_sent(self, message_id: str, sent_at: datetime) -> None: ...

    def list_sent(self, offset: int, limit: int) -> tuple[list[PendingMessage], int]: ...


class MetadataRecorder(Protocol):
    def upsert(self, key: str, fields: dict[str, str]) -> None: ...


class DeliveryClient(Protocol):
    def send(self, url: str, payload: dict, *, timeout: float, cancel: CancelScope | None = None) -> DeliveryResponse: ...
