from __future__ import annotations

from datetime import datetime

from redis import Redis

from automessaging.util.time import format_iso_nano

SENT_MESSAGE_KEY_PREFIX = "sent_message:"


def sent_message_key(remote_id: str) -> str:
    return f"{SENT_MESSAGE_KEY_PREFIX}{remote_id}"


def sent_message_fields(*, remote_id: str, local_id: str, sent_at: datetime) -> dict[str, str]:
    return {
        "message_id": remote_id,
        "local_id": local_id,
        "sent_at": format_iso_nano(sent_at),
    }


class RedisMetadataRecorder:
    """Writes one hash per delivered message. No retries; callers treat failures as best-effort."""

    def __init__(self, redis: Redis):
        self._redis = redis

    def upsert(self, key: str, fields: dict[str, str]) -> None:
        self._redis.hset(key, mapping=fields)
