from __future__ import annotations

from automessaging.core.config import Settings
from automessaging.core.db import SessionLocal
from automessaging.core.redis_client import get_redis
from automessaging.dispatch.dispatcher import MessageDispatcher
from automessaging.dispatch.recorder import RedisMetadataRecorder
from automessaging.dispatch.scheduler import Scheduler
from automessaging.dispatch.store import SqlMessageStore
from automessaging.dispatch.webhook import WebhookDeliveryClient


def build_store() -> SqlMessageStore:
    return SqlMessageStore(SessionLocal)


def build_webhook_client(settings: Settings) -> WebhookDeliveryClient:
    return WebhookDeliveryClient(auth_key=settings.WEBHOOK_AUTH_KEY)


def build_dispatcher(settings: Settings, *, client: WebhookDeliveryClient | None = None) -> MessageDispatcher:
    return MessageDispatcher(
        store=build_store(),
        recorder=RedisMetadataRecorder(get_redis(settings.REDIS_URL)),
        client=client or build_webhook_client(settings),
        webhook_url=settings.WEBHOOK_URL,
        fetch_limit=settings.SCHEDULER_FETCH_LIMIT,
        delivery_timeout=settings.WEBHOOK_TIMEOUT,
    )


def build_scheduler(settings: Settings, dispatcher: MessageDispatcher) -> Scheduler:
    return Scheduler(dispatcher, settings.SCHEDULER_INTERVAL)
