"""
polling.py
- Purpose: Poll one upstream valuation on a fixed interval and feed its status into a tracker.
- Design: One asyncio task per valuation. Stops on its own once the valuation is terminal.
  If the valuation disappears or is rejected upstream, the tracker is disposed and
  `on_abandoned` lets the owner drop it.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable

from landval.clients.errors import (
    ValuationApiNonRetryableError,
    ValuationApiRetryableError,
    ValuationNotFoundError,
)
from landval.clients.valuation_api import ValuationApiClient
from landval.core.config import settings
from landval.core.request_context import clear_context, set_context
from landval.pipeline.derive import coerce_status
from landval.pipeline.step_inference import infer_current_step
from landval.pipeline.tracker import ValuationProgressTracker
from landval.schemas.valuation import ValuationResource

logger = logging.getLogger("landval.services.polling")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ValuationPoller:
    def __init__(
        self,
        client: ValuationApiClient,
        tracker: ValuationProgressTracker,
        valuation_id: str,
        *,
        interval_seconds: float | None = None,
        now: Callable[[], datetime] = _utcnow,
        on_abandoned: Callable[[str], None] | None = None,
    ):
        self.client = client
        self.tracker = tracker
        self.valuation_id = str(valuation_id)
        self.interval_seconds = settings.VALUATION_POLL_INTERVAL_SECONDS if interval_seconds is None else interval_seconds
        self._now = now
        self._on_abandoned = on_abandoned
        self._task: asyncio.Task | None = None
        self.latest: ValuationResource | None = None
        self.polls = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def finished(self) -> bool:
        return self.tracker.status.is_terminal

    async def poll_once(self) -> ValuationResource:
        """Fetch once and feed the tracker. Client errors propagate to the caller."""
        resource = await self.client.get_valuation(self.valuation_id)
        self.polls += 1
        self.latest = resource

        step = infer_current_step(resource, now=self._now())
        self.tracker.update(resource.status, step)
        logger.debug(
            "poller.tick",
            extra={"valuation_id": self.valuation_id, "status": coerce_status(resource.status).value, "stage": step.value},
        )
        return resource

    def start(self) -> asyncio.Task:
        if self.running:
            return self._task
        self._task = asyncio.create_task(self._run(), name=f"valuation-poller-{self.valuation_id}")
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        set_context(task_id=f"poller-{self.valuation_id}", valuation_id=self.valuation_id)
        logger.info("poller.start", extra={"interval_seconds": self.interval_seconds})
        reason = "terminal"
        try:
            while not self.finished:
                await asyncio.sleep(self.interval_seconds)
                try:
                    await self.poll_once()
                except ValuationApiRetryableError as e:
                    logger.warning("poller.retryable_error", extra={"error": e.message})
                except ValuationNotFoundError:
                    reason = "not_found"
                    break
                except ValuationApiNonRetryableError as e:
                    logger.warning("poller.non_retryable_error", extra={"error": e.message})
                    reason = "rejected"
                    break
        except asyncio.CancelledError:
            reason = "cancelled"
            raise
        finally:
            logger.info(
                "poller.stopped",
                extra={"reason": reason, "polls": self.polls, "status": self.tracker.status.value},
            )
            if reason in ("not_found", "rejected"):
                # Nothing will feed this tracker again
                self.tracker.dispose()
                if self._on_abandoned is not None:
                    self._on_abandoned(reason)
            clear_context()
