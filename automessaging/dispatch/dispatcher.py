from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Callable

from pydantic import ValidationError

from automessaging.dispatch.cancel import CancelScope
from automessaging.dispatch.errors import (
    CycleCancelled,
    DeliveryFailedError,
    FetchFailedError,
    MarkFailedError,
    MessageNotFound,
    MetadataWriteFailedError,
    MisconfiguredError,
)
from automessaging.dispatch.ports import DeliveryClient, MessageStore, MetadataRecorder, PendingMessage
from automessaging.dispatch.recorder import sent_message_fields, sent_message_key
from automessaging.schemas.webhook import WebhookAck, WebhookRequest
from automessaging.util.time import now_utc

log = logging.getLogger("dispatcher")

DEFAULT_FETCH_LIMIT = 2
DEFAULT_DELIVERY_TIMEOUT_S = 15.0


@dataclass(frozen=True)
class DispatchReport:
    fetched: int = 0
    sent: int = 0
    failed: int = 0

    def as_dict(self) -> dict:
        return asdict(self)


class MessageDispatcher:
    """Runs one dispatch cycle: fetch the oldest unsent batch, deliver each
    message to the webhook in order, mark accepted ones as sent and index them
    by the remote id.

    Per-message failures are logged and leave the message unsent so the next
    cycle retries it. Only a missing webhook URL or a failed fetch fails the
    cycle as a whole.
    """

    def __init__(
        self,
        *,
        store: MessageStore,
        recorder: MetadataRecorder,
        client: DeliveryClient,
        webhook_url: str,
        fetch_limit: int = DEFAULT_FETCH_LIMIT,
        delivery_timeout: float = DEFAULT_DELIVERY_TIMEOUT_S,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._store = store
        self._recorder = recorder
        self._client = client
        self._webhook_url = webhook_url
        self._fetch_limit = fetch_limit if fetch_limit > 0 else DEFAULT_FETCH_LIMIT
        self._delivery_timeout = delivery_timeout if delivery_timeout > 0 else DEFAULT_DELIVERY_TIMEOUT_S
        self._clock = clock

    @property
    def fetch_limit(self) -> int:
        return self._fetch_limit

    def process_pending_messages(self, cancel: CancelScope | None = None) -> DispatchReport:
        if not self._webhook_url:
            raise MisconfiguredError("webhook URL is not configured")

        _check(cancel)
        try:
            messages = self._store.fetch_next_unsent(self._fetch_limit)
        except Exception as e:
            raise FetchFailedError(f"fetch pending messages: {e}") from e

        if not messages:
            return DispatchReport()

        sent = 0
        failed = 0
        for m in messages:
            _check(cancel)
            try:
                self._send_message(m, cancel)
                sent += 1
            except (DeliveryFailedError, MarkFailedError) as e:
                log.warning("Failed to send message %s: %s", m.id, e.reason)
                failed += 1

        return DispatchReport(fetched=len(messages), sent=sent, failed=failed)

    def _send_message(self, m: PendingMessage, cancel: CancelScope | None) -> None:
        ack = self._deliver(m, cancel)

        # Past this point the webhook has accepted the message; the mark and
        # the metadata write run to completion even if the cycle is cancelled.
        sent_at = max(self._clock(), m.created_at)
        try:
            self._store.mark_as_sent(m.id, sent_at)
        except MessageNotFound as e:
            raise MarkFailedError(m.id, str(e)) from e
        except Exception as e:
            raise MarkFailedError(m.id, f"{type(e).__name__}: {e}") from e

        log.info("Message %s delivered (remote id %s)", m.id, ack.message_id)

        try:
            self._recorder.upsert(
                sent_message_key(ack.message_id),
                sent_message_fields(remote_id=ack.message_id, local_id=str(m.id), sent_at=sent_at),
            )
        except Exception as e:
            err = MetadataWriteFailedError(m.id, f"{type(e).__name__}: {e}")
            log.warning("Failed to store sent metadata for %s: %s", m.id, err.reason)

    def _deliver(self, m: PendingMessage, cancel: CancelScope | None) -> WebhookAck:
        payload = WebhookRequest(to=m.to, content=m.content).model_dump()
        try:
            resp = self._client.send(self._webhook_url, payload, timeout=self._delivery_timeout, cancel=cancel)
        except CycleCancelled:
            raise
        except Exception as e:
            raise DeliveryFailedError(m.id, f"{type(e).__name__}: {e}") from e

        if resp.status_code >= 300:
            raise DeliveryFailedError(m.id, f"webhook returned status {resp.status_code}")

        try:
            ack = WebhookAck.model_validate_json(resp.body)
        except ValidationError as e:
            raise DeliveryFailedError(m.id, f"decode webhook response: {e.errors()[0]['msg']}") from e

        if not ack.accepted:
            raise DeliveryFailedError(m.id, f"webhook rejected message (message={ack.message!r})")
        return ack


def _check(cancel: CancelScope | None) -> None:
    if cancel is not None:
        cancel.raise_if_cancelled()
