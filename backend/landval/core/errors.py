"""
errors.py
- Purpose: AppError used across services/clients for consistent errors.
- Pattern: raise AppError(...) in service/validator, handler converts to JSON response.
"""

from dataclasses import dataclass
from typing import Any

from fastapi import status as http_status
from landval.core.error_codes import ErrorCode
from landval.core.error_reasons import ErrorReason


@dataclass
class AppError(Exception):
    code: ErrorCode
    reason: str
    status_code: int = http_status.HTTP_400_BAD_REQUEST
    details: dict[str, Any] | None = None
    message: str | None = None  # Optional human-readable message

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error": {
                "code": self.code,
                "reason": self.reason,
                "message": self.message if self.message else self.reason,
            }
        }
        if self.details:
            payload["error"]["details"] = self.details
        return payload


def _reason_text(reason: str) -> str:
    return reason.value if isinstance(reason, ErrorReason) else str(reason)


# Convenience constructors
def bad_request(reason: str = ErrorReason.INVALID_INPUT, *, code: ErrorCode = ErrorCode.VALIDATION_ERROR, details: dict | None = None, message: str | None = None) -> AppError:
    return AppError(code=code, reason=_reason_text(reason), status_code=http_status.HTTP_400_BAD_REQUEST, details=details, message=message)


def unprocessable(reason: str, *, code: ErrorCode, details: dict | None = None) -> AppError:
    return AppError(code=code, reason=_reason_text(reason), status_code=422, details=details)


def not_found(reason: str = ErrorReason.RESOURCE_NOT_FOUND, *, code: ErrorCode = ErrorCode.NOT_FOUND, details: dict | None = None) -> AppError:
    return AppError(code=code, reason=_reason_text(reason), status_code=http_status.HTTP_404_NOT_FOUND, details=details)


def upstream_unavailable(reason: str = ErrorReason.UPSTREAM_UNAVAILABLE, *, details: dict | None = None) -> AppError:
    return AppError(code=ErrorCode.UPSTREAM_UNAVAILABLE, reason=_reason_text(reason), status_code=http_status.HTTP_502_BAD_GATEWAY, details=details)
