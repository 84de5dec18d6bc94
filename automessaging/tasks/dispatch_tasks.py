from __future__ import annotations

import logging

from automessaging.core.celery_app import celery
from automessaging.core.config import settings
from automessaging.dispatch.errors import FetchFailedError, MisconfiguredError

log = logging.getLogger("dispatch_tasks")


@celery.task(name="automessaging.tasks.dispatch_tasks.process_pending_messages")
def process_pending_messages() -> dict:
    """Run a single dispatch cycle on a worker.

    Cycle-level failures are reported in the result rather than raised so the
    broker does not redeliver the task; unsent messages are picked up again by
    the next cycle anyway.

    The task does not share the in-process scheduler's cycle lock. Do not
    schedule it while an app instance runs with SCHEDULER_AUTOSTART, or two
    cycles can deliver the same message twice.
    """

    # Avoid circular imports: wiring pulls in db/redis modules.
    from automessaging.dispatch.factory import build_dispatcher, build_webhook_client

    client = build_webhook_client(settings)
    try:
        report = build_dispatcher(settings, client=client).process_pending_messages()
    except (MisconfiguredError, FetchFailedError) as e:
        log.error("Dispatch cycle failed: %s", e)
        return {"ok": False, "error": str(e)}
    finally:
        client.close()
    return {"ok": True, **report.as_dict()}
