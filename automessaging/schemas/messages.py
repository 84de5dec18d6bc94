from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class MessageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    to: str
    content: str
    sent: bool
    sent_at: datetime | None = None
    created_at: datetime


class SentMessagesPage(BaseModel):
    messages: list[MessageOut]
    total: int
    page: int
    limit: int
