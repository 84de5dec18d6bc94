from __future__ import annotations

import os

# Settings and the engine are built at import time; point them at test
# backends before anything from the package is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")
os.environ.setdefault("ENSURE_EXTERNAL_DEPS_ON_STARTUP", "0")
os.environ.setdefault("SCHEDULER_AUTOSTART", "0")
os.environ.setdefault("WEBHOOK_URL", "http://webhook.test/send")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "1")

import pytest  # noqa: E402


@pytest.fixture()
def db_schema():
    from automessaging.core.db import engine
    from automessaging.models.base import Base

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
