"""landval/pipeline/tracker.py

Valuation Progress Tracker.

Turns the coarse (status, current step) pair reported for one valuation into
the five-stage progress view, plus the cosmetic bits the UI animates:

- elapsed seconds since the tracker was mounted (1s ticker)
- a rotating subtitle phrase for the active stage (1.5s ticker)
- a trailing "..." animation on the active stage (0.5s ticker)

All three tickers run only while the valuation is `processing` and are
cancelled the moment it turns `completed` / `failed` or the tracker is
disposed. Between ticks the tracker holds no other mutable state, so
`snapshot()` is a pure read.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from landval.constants.statuses import PipelineStageId, StageStatus, ValuationStatus
from landval.core.config import settings
from landval.pipeline.derive import active_stage, coerce_status, coerce_step, derive_stage_statuses
from landval.pipeline.formatting import (
    MAX_DOTS,
    estimated_remaining_seconds,
    format_elapsed,
    progress_fraction,
    render_dots,
)
from landval.pipeline.scheduler import AsyncioScheduler, PeriodicTicker, Scheduler
from landval.pipeline.stages import PHRASES_PER_STAGE, get_stage_definition
from landval.schemas.pipeline import PipelineStageView, PipelineViewModel

logger = logging.getLogger("landval.pipeline.tracker")


@dataclass(frozen=True)
class TrackerTimings:
    elapsed_tick: float = 1.0
    phrase_rotate: float = 1.5
    dots_tick: float = 0.5
    nominal_duration: float = 45.0
    progress_cap: float = 0.95

    @classmethod
    def from_settings(cls) -> "TrackerTimings":
        return cls(
            elapsed_tick=settings.PIPELINE_ELAPSED_TICK_SECONDS,
            phrase_rotate=settings.PIPELINE_PHRASE_ROTATE_SECONDS,
            dots_tick=settings.PIPELINE_DOTS_TICK_SECONDS,
            nominal_duration=settings.PIPELINE_NOMINAL_DURATION_SECONDS,
            progress_cap=settings.PIPELINE_PROGRESS_CAP,
        )


class ValuationProgressTracker:
    def __init__(
        self,
        valuation_id: Any = None,
        *,
        scheduler: Scheduler | None = None,
        timings: TrackerTimings | None = None,
    ):
        self.valuation_id = str(valuation_id) if valuation_id is not None else None
        self._scheduler = scheduler or AsyncioScheduler()
        self._timings = timings or TrackerTimings.from_settings()
        self._mounted_at = self._scheduler.time()

        self._status = ValuationStatus.PENDING
        self._current_step = PipelineStageId.INPUT
        self._active_stage: PipelineStageId | None = None

        self._elapsed = 0
        self._phrase_index = 0
        self._dots = 0
        self._disposed = False

        self._elapsed_ticker = PeriodicTicker(self._scheduler, self._timings.elapsed_tick, self._on_elapsed_tick, name="elapsed")
        self._phrase_ticker = PeriodicTicker(self._scheduler, self._timings.phrase_rotate, self._on_phrase_tick, name="phrase")
        self._dots_ticker = PeriodicTicker(self._scheduler, self._timings.dots_tick, self._on_dots_tick, name="dots")

    # ---- state ----

    @property
    def status(self) -> ValuationStatus:
        return self._status

    @property
    def current_step(self) -> PipelineStageId:
        return self._current_step

    @property
    def elapsed_seconds(self) -> int:
        return self._elapsed

    @property
    def phrase_index(self) -> int:
        return self._phrase_index

    @property
    def dots(self) -> int:
        return self._dots

    @property
    def timers_running(self) -> bool:
        return any(t.running for t in self._tickers())

    @property
    def disposed(self) -> bool:
        return self._disposed

    # ---- inputs ----

    def update(self, status: Any, current_step: Any = None) -> PipelineViewModel:
        """
        Feed the latest (status, current step) pair. Never raises on malformed values.
        """
        new_status = coerce_status(status)
        new_step = coerce_step(current_step)

        if self._status.is_terminal:
            # Terminal states are final for a given valuation id, step included
            if new_status is not self._status or new_step is not self._current_step:
                logger.warning(
                    "tracker.ignored_after_terminal",
                    extra={
                        "valuation_id": self.valuation_id,
                        "status": self._status.value,
                        "received": new_status.value,
                        "received_step": new_step.value,
                    },
                )
            return self.snapshot()

        self._status = new_status
        self._current_step = new_step

        new_active = active_stage(new_status, new_step)
        if new_active is not self._active_stage:
            self._phrase_index = 0
            if self._phrase_ticker.running:
                self._phrase_ticker.restart()
            logger.info(
                "tracker.stage_changed",
                extra={
                    "valuation_id": self.valuation_id,
                    "from_stage": self._active_stage.value if self._active_stage else None,
                    "to_stage": new_active.value if new_active else None,
                },
            )
            self._active_stage = new_active

        if new_status is ValuationStatus.PROCESSING:
            self._start_timers()
        else:
            self._stop_timers()
            if new_status.is_terminal:
                self._elapsed = self._measure_elapsed()
                logger.info(
                    "tracker.finished",
                    extra={
                        "valuation_id": self.valuation_id,
                        "status": new_status.value,
                        "stage": new_step.value,
                        "elapsed_seconds": self._elapsed,
                    },
                )

        return self.snapshot()

    def dispose(self) -> None:
        """Cancel every ticker. Later updates still derive stages but never start timers."""
        self._stop_timers()
        if not self._disposed:
            logger.debug("tracker.disposed", extra={"valuation_id": self.valuation_id})
        self._disposed = True

    def __enter__(self) -> "ValuationProgressTracker":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    # ---- outputs ----

    def snapshot(self) -> PipelineViewModel:
        t = self._timings
        stages: list[PipelineStageView] = []
        for stage_id, stage_status in derive_stage_statuses(self._status, self._current_step):
            definition = get_stage_definition(stage_id)
            dots = render_dots(self._dots) if stage_status is StageStatus.PROCESSING else ""
            stages.append(
                PipelineStageView(
                    id=stage_id,
                    ordinal=stage_id.ordinal,
                    title=definition.title,
                    status=stage_status,
                    subtitle=definition.subtitle(stage_status, self._phrase_index, dots),
                    description=definition.description(stage_status),
                    estimated_time=definition.estimated_time,
                )
            )

        elapsed_display = format_elapsed(self._elapsed)
        if self._status is ValuationStatus.PROCESSING:
            fraction = progress_fraction(self._elapsed, t.nominal_duration, t.progress_cap)
            remaining = estimated_remaining_seconds(self._elapsed, t.nominal_duration)
            headline = f"Processing... {elapsed_display}"
        elif self._status is ValuationStatus.COMPLETED:
            fraction = 1.0
            remaining = 0
            headline = f"Completed in {elapsed_display}"
        elif self._status is ValuationStatus.FAILED:
            fraction = progress_fraction(self._elapsed, t.nominal_duration, t.progress_cap)
            remaining = 0
            headline = f"Failed after {elapsed_display}"
        else:
            fraction = 0.0
            remaining = estimated_remaining_seconds(0, t.nominal_duration)
            headline = "Waiting to start"

        return PipelineViewModel(
            valuation_id=self.valuation_id,
            status=self._status,
            current_step=self._current_step,
            stages=stages,
            elapsed_seconds=self._elapsed,
            elapsed_display=elapsed_display,
            progress_fraction=fraction,
            estimated_remaining_seconds=remaining,
            headline=headline,
            is_terminal=self._status.is_terminal,
        )

    # ---- timers ----

    def _tickers(self) -> tuple[PeriodicTicker, ...]:
        return (self._elapsed_ticker, self._phrase_ticker, self._dots_ticker)

    def _start_timers(self) -> None:
        if self._disposed:
            return
        for ticker in self._tickers():
            ticker.start()

    def _stop_timers(self) -> None:
        for ticker in self._tickers():
            ticker.stop()
        self._dots = 0

    def _measure_elapsed(self) -> int:
        return max(0, int(self._scheduler.time() - self._mounted_at))

    def _on_elapsed_tick(self) -> None:
        self._elapsed = self._measure_elapsed()

    def _on_phrase_tick(self) -> None:
        self._phrase_index = (self._phrase_index + 1) % PHRASES_PER_STAGE

    def _on_dots_tick(self) -> None:
        self._dots = 0 if self._dots >= MAX_DOTS else self._dots + 1
