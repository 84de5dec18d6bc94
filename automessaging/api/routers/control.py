from __future__ import annotations

from fastapi import APIRouter, Depends

from automessaging.api.deps import get_root_scope, get_scheduler
from automessaging.core.security import require_control_token
from automessaging.dispatch.cancel import CancelScope
from automessaging.dispatch.scheduler import Scheduler, SchedulerState

router = APIRouter(dependencies=[Depends(require_control_token)])


@router.post("/start")
def start_scheduler(
    scheduler: Scheduler = Depends(get_scheduler), root: CancelScope = Depends(get_root_scope)
) -> dict:
    # AlreadyRunningError is mapped to 400 by the app-level handler.
    scheduler.start(root)
    return {"status": "started"}


@router.post("/stop")
def stop_scheduler(scheduler: Scheduler = Depends(get_scheduler)) -> dict:
    scheduler.stop()
    return {"status": "stopped"}


@router.get("/status")
def scheduler_status(scheduler: Scheduler = Depends(get_scheduler)) -> dict:
    state = scheduler.state
    return {"running": state is SchedulerState.RUNNING, "state": state.value, "interval_seconds": scheduler.interval}
