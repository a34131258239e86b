"""landval/pipeline/derive.py

Stage status derivation for the valuation pipeline display.

The upstream API only reports a coarse valuation status. Every stage status
shown to the user is computed from that status plus the position of the
current step in the fixed stage order. These functions are pure and never
raise: malformed input is coerced to `pending` / `input`.
"""

from __future__ import annotations

from typing import Any

from landval.constants.statuses import (
    PIPELINE_STAGE_ORDER,
    PipelineStageId,
    StageStatus,
    ValuationStatus,
)

_INPUT_ORDINAL = PipelineStageId.INPUT.ordinal


def _normalize(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip().lower()


def coerce_status(value: Any) -> ValuationStatus:
    try:
        return ValuationStatus(_normalize(value))
    except ValueError:
        return ValuationStatus.PENDING


def coerce_step(value: Any) -> PipelineStageId:
    try:
        return PipelineStageId(_normalize(value))
    except ValueError:
        return PipelineStageId.INPUT


def derive_stage_status(ordinal: int, current_ordinal: int, overall: ValuationStatus) -> StageStatus:
    if overall is ValuationStatus.COMPLETED:
        return StageStatus.COMPLETED

    # Input collection is instantaneous once any later step is reached
    if ordinal == _INPUT_ORDINAL:
        if current_ordinal == _INPUT_ORDINAL and overall is ValuationStatus.PROCESSING:
            return StageStatus.PROCESSING
        if current_ordinal == _INPUT_ORDINAL and overall is ValuationStatus.FAILED:
            return StageStatus.FAILED
        return StageStatus.COMPLETED

    if ordinal < current_ordinal:
        return StageStatus.COMPLETED
    if ordinal > current_ordinal:
        return StageStatus.PENDING

    if overall is ValuationStatus.PROCESSING:
        return StageStatus.PROCESSING
    return StageStatus(overall.value)


def derive_stage_statuses(status: Any, current_step: Any) -> list[tuple[PipelineStageId, StageStatus]]:
    overall = coerce_status(status)
    current = coerce_step(current_step).ordinal
    return [
        (stage, derive_stage_status(stage.ordinal, current, overall))
        for stage in PIPELINE_STAGE_ORDER
    ]


def active_stage(status: Any, current_step: Any) -> PipelineStageId | None:
    """The stage currently `processing`, if any."""
    for stage, stage_status in derive_stage_statuses(status, current_step):
        if stage_status is StageStatus.PROCESSING:
            return stage
    return None
