"""
error_reasons.py
- Purpose: Human-friendly "reason" strings.
- Keep these stable; they may be surfaced in the UI.
"""

from enum import Enum


class ErrorReason(str, Enum):
    INVALID_INPUT = "Invalid input"
    RESOURCE_NOT_FOUND = "Resource not found"

    TILLABLE_EXCEEDS_TOTAL = "Tillable acres cannot exceed total acres"
    LOCATION_REQUIRED = "County and state are required"

    VALUATION_NOT_FOUND = "Valuation not found"
    VALUATION_REJECTED = "Valuation request rejected"
    UPSTREAM_UNAVAILABLE = "Valuation service unavailable"
    INTERNAL_ERROR = "Internal server error"
