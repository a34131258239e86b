# landval/core/__init__.py
from landval.core.errors import AppError
from landval.core.error_codes import ErrorCode
from landval.core.error_reasons import ErrorReason

__all__ = ["AppError", "ErrorCode", "ErrorReason"]
