"""
统一错误模块。
"""

from .errors import (
    ErrorCode,
    CloudStoreError,
    ConfigurationError,
    invalid_key_name,
    object_not_found,
    unsupported_service,
    account_already_linked,
    session_token_required,
)

__all__ = [
    "ErrorCode",
    "CloudStoreError",
    "ConfigurationError",
    "invalid_key_name",
    "object_not_found",
    "unsupported_service",
    "account_already_linked",
    "session_token_required",
]
