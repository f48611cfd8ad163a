"""
统一错误封装：每个失败都携带数字错误码与消息。
流水线只负责透传，HTTP 层负责把错误码映射为状态码。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional


class ErrorCode(IntEnum):
    INTERNAL_SERVER_ERROR = 1
    OBJECT_NOT_FOUND = 101
    INVALID_CLASS_NAME = 103
    INVALID_KEY_NAME = 105
    INCORRECT_TYPE = 111
    OPERATION_FORBIDDEN = 119
    INVALID_ACL = 123
    INVALID_EMAIL_ADDRESS = 125
    INVALID_INSTALLATION_ID = 132
    MISSING_REQUIRED_FIELD = 135
    CHANGED_IMMUTABLE_FIELD = 136
    DUPLICATE_VALUE = 137
    INVALID_ROLE_NAME = 139
    SCRIPT_FAILED = 141
    USERNAME_MISSING = 200
    PASSWORD_MISSING = 201
    USERNAME_TAKEN = 202
    EMAIL_TAKEN = 203
    SESSION_MISSING = 206
    ACCOUNT_ALREADY_LINKED = 208
    INVALID_SESSION_TOKEN = 209
    UNSUPPORTED_SERVICE = 252


@dataclass(eq=False)
class CloudStoreError(Exception):
    code: int
    message: str
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return f"[{int(self.code)}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {"code": int(self.code), "error": self.message}


@dataclass(eq=False)
class ConfigurationError(Exception):
    """应用配置不合法（启动期错误，不走请求错误码）。"""

    message: str

    def __str__(self) -> str:
        return self.message


def invalid_key_name(message: str) -> CloudStoreError:
    return CloudStoreError(ErrorCode.INVALID_KEY_NAME, message)


def object_not_found(message: str = "Object not found.") -> CloudStoreError:
    return CloudStoreError(ErrorCode.OBJECT_NOT_FOUND, message)


def unsupported_service() -> CloudStoreError:
    return CloudStoreError(ErrorCode.UNSUPPORTED_SERVICE, "This authentication method is unsupported.")


def account_already_linked() -> CloudStoreError:
    return CloudStoreError(ErrorCode.ACCOUNT_ALREADY_LINKED, "this auth is already used")


def session_token_required() -> CloudStoreError:
    return CloudStoreError(ErrorCode.INVALID_SESSION_TOKEN, "Session token required.")
