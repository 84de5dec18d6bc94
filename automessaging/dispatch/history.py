from __future__ import annotations

from automessaging.dispatch.ports import MessageStore
from automessaging.schemas.messages import MessageOut, SentMessagesPage

DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100


def parse_int_default(value: str | None, default: int) -> int:
    """Parse a query value as an int, falling back to ``default`` when it is missing or malformed."""

    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def normalize_page(page: int, limit: int) -> tuple[int, int, int]:
    """Return (page, limit, offset) with page >= 1 and limit in [1, MAX_PAGE_LIMIT]."""

    if page <= 0:
        page = 1
    if limit <= 0:
        limit = DEFAULT_PAGE_LIMIT
    if limit > MAX_PAGE_LIMIT:
        limit = MAX_PAGE_LIMIT
    return page, limit, (page - 1) * limit


def list_sent_messages(store: MessageStore, *, page: int, limit: int) -> SentMessagesPage:
    page, limit, offset = normalize_page(page, limit)
    items, total = store.list_sent(offset, limit)
    return SentMessagesPage(
        messages=[MessageOut.model_validate(m) for m in items],
        total=total,
        page=page,
        limit=limit,
    )
