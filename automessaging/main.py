from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from redis import Redis
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from automessaging.api.routers.control import router as control_router
from automessaging.api.routers.messages import router as messages_router
from automessaging.core.config import settings
from automessaging.core.db import engine
from automessaging.core.logging import configure_logging
from automessaging.dispatch.cancel import CancelScope
from automessaging.dispatch.factory import build_dispatcher, build_scheduler, build_store, build_webhook_client
from automessaging.dispatch.scheduler import NotRunningError, SchedulerError

configure_logging(settings.LOG_LEVEL)
log = logging.getLogger("app")

app = FastAPI(title=settings.APP_NAME)


def _retry_backoff(fn, *, attempts: int = 30, base_sleep_s: float = 1.0, max_sleep_s: float = 2.0, what: str) -> bool:
    sleep_s = base_sleep_s
    for i in range(1, attempts + 1):
        try:
            fn()
            return True
        except Exception as e:
            if i == attempts:
                log.error("Startup: %s still not ready after %s attempts: %s", what, attempts, str(e))
                return False
            log.warning("Startup: %s not ready (attempt %s/%s): %s", what, i, attempts, str(e))
            time.sleep(sleep_s)
            sleep_s = min(max_sleep_s, sleep_s * 2.0)
    return False


def _ping_postgres() -> None:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def _ping_redis() -> None:
    Redis.from_url(settings.REDIS_URL, socket_connect_timeout=1, socket_timeout=1).ping()


def _check(fn) -> bool:
    try:
        fn()
        return True
    except Exception:
        return False


@app.on_event("startup")
def _startup() -> None:
    if settings.ENSURE_EXTERNAL_DEPS_ON_STARTUP:
        _retry_backoff(_ping_postgres, what="postgres")
        _retry_backoff(_ping_redis, what="redis")
    else:
        log.info("Startup: ENSURE_EXTERNAL_DEPS_ON_STARTUP=false; skipping postgres/redis checks")

    if not settings.WEBHOOK_URL:
        log.error("Startup: WEBHOOK_URL is not set; every dispatch cycle will fail until it is configured")

    root = CancelScope()
    webhook_client = build_webhook_client(settings)
    dispatcher = build_dispatcher(settings, client=webhook_client)
    scheduler = build_scheduler(settings, dispatcher)

    app.state.root_scope = root
    app.state.store = build_store()
    app.state.scheduler = scheduler
    app.state.webhook_client = webhook_client

    if settings.SCHEDULER_AUTOSTART:
        scheduler.start(root)


@app.on_event("shutdown")
def _shutdown() -> None:
    scheduler = getattr(app.state, "scheduler", None)
    if scheduler is not None:
        try:
            scheduler.stop(wait=settings.SERVER_SHUTDOWN_TIMEOUT)
        except NotRunningError:
            pass
    root = getattr(app.state, "root_scope", None)
    if root is not None:
        root.cancel()
    webhook_client = getattr(app.state, "webhook_client", None)
    if webhook_client is not None:
        webhook_client.close()


@app.exception_handler(SchedulerError)
def _scheduler_error(_: Request, exc: SchedulerError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(SQLAlchemyError)
def _store_error(_: Request, exc: SQLAlchemyError) -> JSONResponse:
    log.error("Store error: %s", exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


api = APIRouter()


@api.get("/healthz", response_class=PlainTextResponse)
def healthz() -> str:
    return "ok"


@api.get("/health")
def health(request: Request) -> dict[str, Any]:
    deps = {
        "postgres": _check(_ping_postgres),
        "redis": _check(_ping_redis),
    }
    scheduler = getattr(request.app.state, "scheduler", None)
    return {
        "ok": all(deps.values()),
        "deps": deps,
        "scheduler_running": bool(scheduler and scheduler.is_running()),
        "app": settings.APP_NAME,
    }


api.include_router(control_router, prefix="/control", tags=["control"])
api.include_router(messages_router, prefix="/messages", tags=["messages"])
app.include_router(api, prefix="/api/v1")
