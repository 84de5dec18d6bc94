from __future__ import annotations

from redis import Redis

from automessaging.core.config import settings


def get_redis(url: str | None = None) -> Redis:
    # Connections are opened lazily on first command.
    return Redis.from_url(url or settings.REDIS_URL, socket_connect_timeout=2, socket_timeout=5, decode_responses=True)
