from __future__ import annotations

import httpx

from automessaging.dispatch.cancel import CancelScope
from automessaging.dispatch.ports import DeliveryResponse

AUTH_HEADER = "x-ins-auth-key"


class WebhookDeliveryClient:
    """POSTs JSON payloads to the webhook.

    The sync transport cannot be interrupted once a request is on the wire, so
    cancellation is observed before sending and the request itself is bounded
    by ``timeout``.
    """

    def __init__(self, *, auth_key: str = "", client: httpx.Client | None = None):
        self._auth_key = auth_key
        self._client = client or httpx.Client()

    def send(self, url: str, payload: dict, *, timeout: float, cancel: CancelScope | None = None) -> DeliveryResponse:
        if cancel is not None:
            cancel.raise_if_cancelled()

        headers = {"Content-Type": "application/json"}
        if self._auth_key:
            headers[AUTH_HEADER] = self._auth_key

        r = self._client.post(url, json=payload, headers=headers, timeout=timeout)
        return DeliveryResponse(status_code=r.status_code, body=r.text)

    def close(self) -> None:
        self._client.close()

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed
