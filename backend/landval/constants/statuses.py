"""
statuses.py
- Purpose: Central source of truth for valuation and pipeline stage statuses.
- Design: Keep FE-facing values stable and explicit (lowercase, as the upstream API sends them).
"""

from enum import Enum


class ValuationStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ValuationStatus.COMPLETED, ValuationStatus.FAILED)


class StageStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class PipelineStageId(str, Enum):
    """Valuation pipeline stages, declared in display order."""

    INPUT = "input"
    VECTOR = "vector"
    ANALYSIS = "analysis"
    RESEARCH = "research"
    REPORT = "report"

    @property
    def ordinal(self) -> int:
        return _STAGE_ORDER.index(self)


_STAGE_ORDER = tuple(PipelineStageId)

PIPELINE_STAGE_ORDER: tuple[PipelineStageId, ...] = _STAGE_ORDER
