from __future__ import annotations

from fastapi import APIRouter, Depends

from automessaging.api.deps import get_store
from automessaging.dispatch.history import DEFAULT_PAGE_LIMIT, list_sent_messages, parse_int_default
from automessaging.dispatch.ports import MessageStore
from automessaging.schemas.messages import SentMessagesPage

router = APIRouter()


@router.get("/sent", response_model=SentMessagesPage)
def list_sent(page: str | None = None, limit: str | None = None, store: MessageStore = Depends(get_store)) -> SentMessagesPage:
    """Sent messages, newest first.

    Missing or non-integer ``page``/``limit`` fall back to 1 and 20; then
    ``page`` < 1 reads as 1 and ``limit`` is clamped to [1, 100].
    """

    return list_sent_messages(
        store,
        page=parse_int_default(page, 1),
        limit=parse_int_default(limit, DEFAULT_PAGE_LIMIT),
    )
