"""
property_validators.py
- Purpose: Cross-field validations for the create-valuation property form.
- Design: Normalize + validate at the boundary, keep services clean.
"""

from landval.core.error_codes import ErrorCode
from landval.core.error_reasons import ErrorReason
from landval.core.errors import unprocessable
from landval.schemas.valuation import PropertyForm


def validate_location(form: PropertyForm) -> None:
    if not (form.county or "").strip() or not (form.state or "").strip():
        raise unprocessable(ErrorReason.LOCATION_REQUIRED, code=ErrorCode.PROPERTY_MISSING_LOCATION)


def validate_tillable_acres(form: PropertyForm) -> None:
    if form.tillable_acres and form.tillable_acres > form.acreage:
        raise unprocessable(
            ErrorReason.TILLABLE_EXCEEDS_TOTAL,
            code=ErrorCode.PROPERTY_INVALID_TILLABLE_ACRES,
            details={"tillable_acres": form.tillable_acres, "acreage": form.acreage},
        )


def normalize_property_form(form: PropertyForm) -> PropertyForm:
    """
    Validate and return a copy with trimmed location fields.
    """
    validate_location(form)
    validate_tillable_acres(form)
    return form.model_copy(
        update={
            "county": form.county.strip(),
            "state": form.state.strip(),
            "address": form.address.strip() if form.address else form.address,
        }
    )
