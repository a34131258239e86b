"""
Request/Task context helpers.

We keep a small context (request_id, task_id, valuation_id) in ContextVars.
The HTTP middleware and the background pollers both set these values so logs
from one valuation can be correlated from creation to the final poll.

No external dependencies.
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Any, Dict, Optional


_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_task_id: ContextVar[Optional[str]] = ContextVar("task_id", default=None)
_valuation_id: ContextVar[Optional[str]] = ContextVar("valuation_id", default=None)


def set_context(
    *,
    request_id: Optional[str] = None,
    task_id: Optional[str] = None,
    valuation_id: Optional[str] = None,
) -> None:
    if request_id is not None:
        _request_id.set(request_id)
    if task_id is not None:
        _task_id.set(task_id)
    if valuation_id is not None:
        _valuation_id.set(str(valuation_id))


def clear_context() -> None:
    _request_id.set(None)
    _task_id.set(None)
    _valuation_id.set(None)


def get_context() -> Dict[str, Any]:
    ctx: Dict[str, Any] = {}
    rid = _request_id.get()
    tid = _task_id.get()
    vid = _valuation_id.get()

    if rid:
        ctx["request_id"] = rid
    if tid:
        ctx["task_id"] = tid
    if vid:
        ctx["valuation_id"] = vid
    return ctx
