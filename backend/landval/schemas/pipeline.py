"""
pipeline.py (schemas)
- Purpose: View-model DTOs for the valuation pipeline progress display.
- Design: Everything the rendering layer needs is precomputed here; the UI only paints.
"""

from pydantic import BaseModel, ConfigDict

from landval.constants.statuses import PipelineStageId, StageStatus, ValuationStatus


class PipelineStageView(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: PipelineStageId
    ordinal: int
    title: str
    status: StageStatus
    subtitle: str
    description: str
    estimated_time: str


class PipelineViewModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    valuation_id: str | None = None
    status: ValuationStatus
    current_step: PipelineStageId
    stages: list[PipelineStageView]
    elapsed_seconds: int
    elapsed_display: str
    progress_fraction: float
    estimated_remaining_seconds: int
    headline: str
    is_terminal: bool

    def stage(self, stage_id: PipelineStageId) -> PipelineStageView:
        return next(s for s in self.stages if s.id == stage_id)

    def stage_statuses(self) -> dict[PipelineStageId, StageStatus]:
        return {s.id: s.status for s in self.stages}
