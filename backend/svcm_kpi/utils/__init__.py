"""
유틸리티 모듈
"""
from .errors import (
    ErrorCategory,
    KpiError,
    InvalidInputError,
    SubmissionNotAllowedError,
    NotFoundError,
    ServiceError,
    UserFriendlyError,
    classify_error,
    format_error_response,
)

__all__ = [
    "ErrorCategory",
    "KpiError",
    "InvalidInputError",
    "SubmissionNotAllowedError",
    "NotFoundError",
    "ServiceError",
    "UserFriendlyError",
    "classify_error",
    "format_error_response",
]
