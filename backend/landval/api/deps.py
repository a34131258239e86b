from fastapi import Request

from landval.services.valuation_service import ValuationService


def get_valuation_service(request: Request) -> ValuationService:
    """
    Service dependency for valuation flows.
    The instance lives on app.state for the lifetime of the process (see main.lifespan),
    so trackers and pollers survive across requests. Override in tests as needed.
    """
    return request.app.state.valuation_service
