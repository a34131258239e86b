# landval/services/valuation_service.py
"""
valuation_service.py
- Purpose: Orchestrates valuation creation and progress tracking end-to-end.
- Owns: one tracker + poller per valuation id, mapping upstream errors to AppError.
- Design: Thick service; routers remain thin and easy to reason about.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable

from landval.clients.errors import (
    ValuationApiError,
    ValuationApiNonRetryableError,
    ValuationNotFoundError,
)
from landval.clients.valuation_api import ValuationApiClient
from landval.core import AppError, ErrorCode, ErrorReason
from landval.core.config import settings
from landval.core.errors import bad_request, not_found, upstream_unavailable
from landval.pipeline.scheduler import AsyncioScheduler, Scheduler
from landval.pipeline.tracker import TrackerTimings, ValuationProgressTracker
from landval.schemas.pipeline import PipelineViewModel
from landval.schemas.valuation import PropertyForm, ValuationCreateResponse, ValuationResource
from landval.services.polling import ValuationPoller
from landval.validations.property_validators import normalize_property_form

logger = logging.getLogger("landval.services.valuation")


@dataclass
class TrackingSession:
    valuation_id: str
    tracker: ValuationProgressTracker
    poller: ValuationPoller
    finished_at: float | None = None

    async def close(self) -> None:
        await self.poller.stop()
        self.tracker.dispose()


def _to_app_error(err: ValuationApiError, valuation_id: str | None = None) -> AppError:
    details = {"valuation_id": valuation_id} if valuation_id else None
    if isinstance(err, ValuationNotFoundError):
        return not_found(ErrorReason.VALUATION_NOT_FOUND, code=ErrorCode.VALUATION_NOT_FOUND, details=details)
    if isinstance(err, ValuationApiNonRetryableError) and err.status_code is not None and 400 <= err.status_code < 500:
        return bad_request(ErrorReason.VALUATION_REJECTED, code=ErrorCode.VALUATION_REJECTED, details=details, message=err.message)
    return upstream_unavailable(details=details)


class ValuationService:
    def __init__(
        self,
        client: ValuationApiClient,
        *,
        poll_interval_seconds: float | None = None,
        timings: TrackerTimings | None = None,
        scheduler_factory: Callable[[], Scheduler] = AsyncioScheduler,
        terminal_retention_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.poll_interval_seconds = poll_interval_seconds
        self.timings = timings
        self._scheduler_factory = scheduler_factory
        self.terminal_retention_seconds = (
            settings.VALUATION_TERMINAL_RETENTION_SECONDS if terminal_retention_seconds is None else terminal_retention_seconds
        )
        self._clock = clock
        self._sessions: dict[str, TrackingSession] = {}
        self._lock = asyncio.Lock()

    # ---- creation ----

    async def start_valuation(self, form: PropertyForm) -> ValuationCreateResponse:
        form = normalize_property_form(form)
        try:
            valuation_id = await self.client.create_valuation(form)
        except ValuationApiError as e:
            raise _to_app_error(e) from e

        logger.info(
            "valuation.created",
            extra={"valuation_id": valuation_id, "county": form.county, "state": form.state, "acreage": form.acreage},
        )
        await self.track(valuation_id)
        return ValuationCreateResponse.for_id(valuation_id)

    # ---- tracking ----

    @property
    def tracked_count(self) -> int:
        return len(self._sessions)

    async def track(self, valuation_id: str) -> TrackingSession:
        """
        Start tracking a valuation (idempotent).

        The first poll happens inline so the caller always gets a populated
        view; background polling starts only if the valuation is still running.
        """
        vid = str(valuation_id)
        async with self._lock:
            await self._evict_expired_locked()
            session = self._sessions.get(vid)
            if session is not None:
                return session

            tracker = ValuationProgressTracker(vid, scheduler=self._scheduler_factory(), timings=self.timings)
            poller = ValuationPoller(
                self.client,
                tracker,
                vid,
                interval_seconds=self.poll_interval_seconds,
                on_abandoned=lambda reason: self._discard(vid, poller, reason),
            )
            try:
                await poller.poll_once()
            except ValuationApiError as e:
                tracker.dispose()
                raise _to_app_error(e, vid) from e

            session = TrackingSession(valuation_id=vid, tracker=tracker, poller=poller)
            if poller.finished:
                session.finished_at = self._clock()
            self._sessions[vid] = session

        if not poller.finished:
            poller.start()
        logger.info("valuation.tracking", extra={"valuation_id": vid, "status": tracker.status.value})
        return session

    async def get_pipeline(self, valuation_id: str) -> PipelineViewModel:
        session = await self.track(valuation_id)
        return session.tracker.snapshot()

    async def stop_tracking(self, valuation_id: str) -> None:
        vid = str(valuation_id)
        async with self._lock:
            session = self._sessions.pop(vid, None)
        if session is None:
            raise not_found(ErrorReason.VALUATION_NOT_FOUND, code=ErrorCode.VALUATION_NOT_FOUND, details={"valuation_id": vid})
        await session.close()
        logger.info("valuation.untracked", extra={"valuation_id": vid})

    def _discard(self, vid: str, poller: ValuationPoller, reason: str) -> None:
        session = self._sessions.get(vid)
        # A newer session for the same id may already have replaced this one
        if session is not None and session.poller is poller:
            del self._sessions[vid]
            logger.info("valuation.untracked", extra={"valuation_id": vid, "reason": reason})

    async def _evict_expired_locked(self) -> None:
        """Drop finished sessions older than the retention window. Caller holds the lock."""
        now = self._clock()
        expired = []
        for vid, session in self._sessions.items():
            if not session.tracker.status.is_terminal:
                continue
            if session.finished_at is None:
                # Finished in the background since we last looked
                session.finished_at = now
            elif now - session.finished_at >= self.terminal_retention_seconds:
                expired.append(vid)

        for vid in expired:
            session = self._sessions.pop(vid)
            await session.close()
            logger.info("valuation.untracked", extra={"valuation_id": vid, "reason": "expired"})

    async def shutdown(self) -> None:
        async with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            await session.close()
        logger.info("valuation.shutdown", extra={"sessions": len(sessions)})

    # ---- passthrough ----

    async def get_valuation(self, valuation_id: str) -> ValuationResource:
        vid = str(valuation_id)
        try:
            return await self.client.get_valuation(vid)
        except ValuationApiError as e:
            raise _to_app_error(e, vid) from e

    async def list_valuations(self) -> list[ValuationResource]:
        try:
            return await self.client.list_valuations()
        except ValuationApiError as e:
            raise _to_app_error(e) from e
