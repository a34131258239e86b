"""
stages.py
- Purpose: Static catalogue of the five valuation pipeline stages (titles, rotating phrases, subtitles).
- Design: Pure data. Nothing here knows about timers or the upstream API.
"""

from dataclasses import dataclass

from landval.constants.statuses import PipelineStageId, StageStatus

PHRASES_PER_STAGE = 4


@dataclass(frozen=True)
class StageDefinition:
    id: PipelineStageId
    title: str
    phrases: tuple[str, ...]
    completed_subtitle: str
    pending_subtitle: str
    failed_subtitle: str
    active_description: str
    done_description: str
    idle_description: str
    estimated_time: str

    def subtitle(self, status: StageStatus, phrase_index: int = 0, dots: str = "") -> str:
        if status is StageStatus.PROCESSING:
            return f"{self.phrases[phrase_index % len(self.phrases)]}{dots}"
        if status is StageStatus.COMPLETED:
            return self.completed_subtitle
        if status is StageStatus.FAILED:
            return self.failed_subtitle
        return self.pending_subtitle

    def description(self, status: StageStatus) -> str:
        if status is StageStatus.PROCESSING:
            return self.active_description
        if status is StageStatus.COMPLETED:
            return self.done_description
        return self.idle_description


STAGE_DEFINITIONS: dict[PipelineStageId, StageDefinition] = {
    PipelineStageId.INPUT: StageDefinition(
        id=PipelineStageId.INPUT,
        title="Property Input",
        phrases=(
            "Validating property details",
            "Collecting parcel data",
            "Reading soil records",
            "Preparing valuation request",
        ),
        completed_subtitle="Complete",
        pending_subtitle="Waiting",
        failed_subtitle="Failed",
        active_description="Collecting property data",
        done_description="Property data collected",
        idle_description="Property data",
        estimated_time="~5s",
    ),
    PipelineStageId.VECTOR: StageDefinition(
        id=PipelineStageId.VECTOR,
        title="Vector Store",
        phrases=(
            "Searching agricultural database",
            "Analyzing county data",
            "Retrieving base values",
            "Processing land records",
        ),
        completed_subtitle="Complete",
        pending_subtitle="Waiting",
        failed_subtitle="Failed",
        active_description="Retrieving county base value",
        done_description="County base value retrieved",
        idle_description="County base value",
        estimated_time="~10s",
    ),
    PipelineStageId.ANALYSIS: StageDefinition(
        id=PipelineStageId.ANALYSIS,
        title="AI Analysis",
        phrases=(
            "Running AI valuation",
            "Processing market data",
            "Analyzing comparables",
            "Calculating values",
        ),
        completed_subtitle="Complete",
        pending_subtitle="Waiting",
        failed_subtitle="Failed",
        active_description="Running parallel operations",
        done_description="AI valuation complete",
        idle_description="AI valuation",
        estimated_time="~15s",
    ),
    PipelineStageId.RESEARCH: StageDefinition(
        id=PipelineStageId.RESEARCH,
        title="Market Research",
        phrases=(
            "Finding comparable sales",
            "Analyzing market trends",
            "Fetching recent data",
            "Compiling insights",
        ),
        completed_subtitle="Complete",
        pending_subtitle="Waiting",
        failed_subtitle="Failed",
        active_description="Finding comparable sales",
        done_description="Market analysis complete",
        idle_description="Market analysis",
        estimated_time="~10s",
    ),
    PipelineStageId.REPORT: StageDefinition(
        id=PipelineStageId.REPORT,
        title="Final Report",
        phrases=(
            "Generating report",
            "Assembling valuation",
            "Formatting results",
            "Finalizing report",
        ),
        completed_subtitle="Ready",
        pending_subtitle="Waiting",
        failed_subtitle="Failed",
        active_description="Preparing final report",
        done_description="Valuation complete!",
        idle_description="Preparing final report",
        estimated_time="~5s",
    ),
}


def get_stage_definition(stage_id: PipelineStageId) -> StageDefinition:
    return STAGE_DEFINITIONS[stage_id]
