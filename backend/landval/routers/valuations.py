"""
valuations.py
- Purpose: API routes for starting valuations and reading their pipeline progress.
- Design: Keep router thin. Delegate business logic to services.
"""

from fastapi import APIRouter, Depends, Response, status

from landval.api.deps import get_valuation_service
from landval.schemas.pipeline import PipelineViewModel
from landval.schemas.valuation import PropertyForm, ValuationCreateResponse, ValuationResource
from landval.services.valuation_service import ValuationService

router = APIRouter(prefix="/api/valuations", tags=["Valuations"])


@router.post("", response_model=ValuationCreateResponse, status_code=status.HTTP_201_CREATED)
async def start_valuation(form: PropertyForm, svc: ValuationService = Depends(get_valuation_service)):
    return await svc.start_valuation(form)


@router.get("", response_model=list[ValuationResource])
async def list_valuations(svc: ValuationService = Depends(get_valuation_service)):
    return await svc.list_valuations()


@router.get("/{valuation_id}", response_model=ValuationResource)
async def get_valuation(valuation_id: str, svc: ValuationService = Depends(get_valuation_service)):
    return await svc.get_valuation(valuation_id)


@router.get("/{valuation_id}/pipeline", response_model=PipelineViewModel)
async def get_valuation_pipeline(valuation_id: str, svc: ValuationService = Depends(get_valuation_service)):
    """Derived five-stage progress view. Starts tracking on first request."""
    return await svc.get_pipeline(valuation_id)


@router.delete("/{valuation_id}/pipeline", status_code=status.HTTP_204_NO_CONTENT)
async def stop_valuation_pipeline(valuation_id: str, svc: ValuationService = Depends(get_valuation_service)):
    await svc.stop_tracking(valuation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
