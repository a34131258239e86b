# landval/core/error_codes.py
from enum import Enum

class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Property form
    PROPERTY_INVALID_TILLABLE_ACRES = "PROPERTY_INVALID_TILLABLE_ACRES"
    PROPERTY_MISSING_LOCATION = "PROPERTY_MISSING_LOCATION"

    # Upstream Valuation API
    VALUATION_NOT_FOUND = "VALUATION_NOT_FOUND"
    VALUATION_REJECTED = "VALUATION_REJECTED"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
