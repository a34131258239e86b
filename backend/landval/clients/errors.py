# landval/clients/errors.py
class ValuationApiError(Exception):
    """Base upstream Valuation API error (wrapped)."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

class ValuationApiRetryableError(ValuationApiError):
    """Transient error: timeouts, 429s, 5xx, network."""

class ValuationApiNonRetryableError(ValuationApiError):
    """Bad request, validation rejected upstream, malformed response."""

class ValuationNotFoundError(ValuationApiNonRetryableError):
    """Upstream has no valuation with this id."""
