from fastapi import APIRouter, Depends

from landval.api.deps import get_valuation_service
from landval.services.valuation_service import ValuationService

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health(svc: ValuationService = Depends(get_valuation_service)):
    return {
        "status": "ok",
        "upstream": svc.client.base_url,
        "tracked_valuations": svc.tracked_count,
    }
