from datetime import datetime, timedelta, timezone

import pytest

from landval.constants.statuses import PipelineStageId
from landval.pipeline.step_inference import infer_current_step
from landval.schemas.valuation import ValuationResource

NOW = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def _resource(**fields) -> ValuationResource:
    payload = {"id": 1, "status": "processing", "createdAt": (NOW - timedelta(seconds=30)).isoformat()}
    payload.update(fields)
    return ValuationResource.model_validate(payload)


def test_fresh_processing_valuation_is_on_input():
    r = _resource(createdAt=(NOW - timedelta(seconds=1)).isoformat())
    assert infer_current_step(r, now=NOW, input_grace_seconds=2.0) is PipelineStageId.INPUT


def test_missing_created_at_counts_as_fresh():
    r = ValuationResource.model_validate({"id": 1, "status": "processing"})
    assert infer_current_step(r, now=NOW, input_grace_seconds=2.0) is PipelineStageId.INPUT


@pytest.mark.parametrize(
    "fields,expected",
    [
        ({}, PipelineStageId.VECTOR),
        ({"baseValue": 9800.0}, PipelineStageId.ANALYSIS),
        ({"baseValue": 9800.0, "aiReasoning": "High CSR2"}, PipelineStageId.RESEARCH),
        ({"baseValue": 9800.0, "aiReasoning": "High CSR2", "marketInsight": "Strong demand"}, PipelineStageId.REPORT),
    ],
)
def test_processing_step_follows_filled_result_fields(fields, expected):
    assert infer_current_step(_resource(**fields), now=NOW, input_grace_seconds=2.0) is expected


def test_base_value_skips_input_grace():
    r = _resource(createdAt=NOW.isoformat(), baseValue=9800.0)
    assert infer_current_step(r, now=NOW, input_grace_seconds=2.0) is PipelineStageId.ANALYSIS


def test_terminal_and_pending_statuses():
    assert infer_current_step(_resource(status="completed"), now=NOW) is PipelineStageId.REPORT
    assert infer_current_step(_resource(status="pending"), now=NOW) is PipelineStageId.INPUT
    assert infer_current_step(_resource(status="mystery"), now=NOW) is PipelineStageId.INPUT


def test_failed_uses_result_fields_without_grace():
    fresh_failure = _resource(status="failed", createdAt=NOW.isoformat())
    assert infer_current_step(fresh_failure, now=NOW, input_grace_seconds=2.0) is PipelineStageId.VECTOR

    r = _resource(status="failed", baseValue=9800.0)
    assert infer_current_step(r, now=NOW) is PipelineStageId.ANALYSIS


def test_explicit_hint_wins():
    assert infer_current_step(_resource(currentStageHint="research"), now=NOW) is PipelineStageId.RESEARCH
    assert infer_current_step(_resource(currentStep="report"), now=NOW) is PipelineStageId.REPORT
    assert infer_current_step(_resource(currentStageHint="warp"), now=NOW) is PipelineStageId.INPUT


def test_naive_created_at_is_treated_as_utc():
    r = _resource(createdAt="2025-03-01T11:59:59.500000")
    assert infer_current_step(r, now=NOW, input_grace_seconds=2.0) is PipelineStageId.INPUT


def test_non_string_status_and_hint_are_coerced():
    r = ValuationResource.model_validate({"id": 1, "status": None, "currentStep": 3})
    assert r.status is None
    assert infer_current_step(r, now=NOW) is PipelineStageId.INPUT
