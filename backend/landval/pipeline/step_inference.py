"""
step_inference.py
- Purpose: Work out which pipeline step a valuation is on when the upstream record has no explicit hint.
- Design: The upstream fills result fields in pipeline order (baseValue, then aiReasoning,
  then marketInsight), so field presence tells us how far it got.
"""

from __future__ import annotations

from datetime import datetime, timezone

from landval.constants.statuses import PipelineStageId, ValuationStatus
from landval.core.config import settings
from landval.pipeline.derive import coerce_status, coerce_step
from landval.schemas.valuation import ValuationResource


def _age_seconds(created_at: datetime | None, now: datetime) -> float:
    if created_at is None:
        return 0.0
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return (now - created_at).total_seconds()


def _step_from_results(resource: ValuationResource) -> PipelineStageId:
    if resource.base_value is None:
        return PipelineStageId.VECTOR
    if resource.ai_reasoning and resource.market_insight:
        return PipelineStageId.REPORT
    if resource.ai_reasoning:
        return PipelineStageId.RESEARCH
    return PipelineStageId.ANALYSIS


def infer_current_step(
    resource: ValuationResource,
    *,
    now: datetime | None = None,
    input_grace_seconds: float | None = None,
) -> PipelineStageId:
    if resource.current_stage_hint:
        return coerce_step(resource.current_stage_hint)

    status = coerce_status(resource.status)
    if status is ValuationStatus.COMPLETED:
        return PipelineStageId.REPORT
    if status is ValuationStatus.PENDING:
        return PipelineStageId.INPUT

    if status is ValuationStatus.PROCESSING:
        grace = settings.PIPELINE_INPUT_GRACE_SECONDS if input_grace_seconds is None else input_grace_seconds
        age = _age_seconds(resource.created_at, now or datetime.now(timezone.utc))
        if age < grace and resource.base_value is None:
            return PipelineStageId.INPUT

    # failed: no grace period, the stage that was running is the one that failed
    return _step_from_results(resource)
