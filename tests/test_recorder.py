from __future__ import annotations

from datetime import datetime, timezone

from automessaging.dispatch.recorder import RedisMetadataRecorder, sent_message_fields, sent_message_key
from tests.fakes import FakeRedis


def test_upsert_writes_hash_under_sent_message_key():
    redis = FakeRedis()
    sent_at = datetime(2026, 3, 4, 5, 6, 7, 123456, tzinfo=timezone.utc)

    RedisMetadataRecorder(redis).upsert(
        sent_message_key("remote-1"),
        sent_message_fields(remote_id="remote-1", local_id="0b6f", sent_at=sent_at),
    )

    assert redis.hashes == {
        "sent_message:remote-1": {
            "message_id": "remote-1",
            "local_id": "0b6f",
            "sent_at": "2026-03-04T05:06:07.123456000Z",
        }
    }


def test_sent_at_is_rendered_in_utc():
    naive = datetime(2026, 3, 4, 5, 6, 7)

    fields = sent_message_fields(remote_id="r", local_id="l", sent_at=naive)

    assert fields["sent_at"] == "2026-03-04T05:06:07.000000000Z"
