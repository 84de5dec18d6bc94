from __future__ import annotations

from celery import Celery

from automessaging.core.config import settings

celery = Celery(
    "automessaging",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["automessaging.tasks.dispatch_tasks"],
)

celery.conf.update(
    task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,
    task_eager_propagates=True,
    task_default_queue="default",
)
