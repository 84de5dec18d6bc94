from __future__ import annotations

from fastapi import Request

from automessaging.dispatch.cancel import CancelScope
from automessaging.dispatch.ports import MessageStore
from automessaging.dispatch.scheduler import Scheduler


def get_scheduler(request: Request) -> Scheduler:
    return request.app.state.scheduler


def get_root_scope(request: Request) -> CancelScope:
    return request.app.state.root_scope


def get_store(request: Request) -> MessageStore:
    return request.app.state.store
