from fastapi import APIRouter

from landval.constants.statuses import PIPELINE_STAGE_ORDER
from landval.core.config import settings

router = APIRouter(prefix="/api", tags=["Root"])


@router.get("/")
def root():
    return {
        "service": settings.app_name,
        "pipeline_stages": [stage.value for stage in PIPELINE_STAGE_ORDER],
        "docs": "/docs",
    }
