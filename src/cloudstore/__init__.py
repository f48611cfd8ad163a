"""
cloudstore - 对象存储服务的写入路径

- RestWrite 写入流水线（ACL、Schema、触发器、数据库写入）
- _User / _Session / _Installation / _Role 的特殊处理
- 基于 FastAPI 的 REST 接口
"""

from __future__ import annotations

__version__ = "0.1.0"


# 延迟导入以避免循环依赖
def __getattr__(name: str):
    """延迟导入模块"""

    # Core
    if name == "CloudStoreError":
        from cloudstore.core.errors import CloudStoreError
        return CloudStoreError
    if name == "ErrorCode":
        from cloudstore.core.errors import ErrorCode
        return ErrorCode
    if name == "Container":
        from cloudstore.core.di import Container
        return Container
    if name == "register_app":
        from cloudstore.core.di import register_app
        return register_app

    # Config
    if name == "AppOptions":
        from cloudstore.config import AppOptions
        return AppOptions
    if name == "Config":
        from cloudstore.config import Config
        return Config

    # Domain
    if name == "Auth":
        from cloudstore.domain import Auth
        return Auth
    if name == "CloudObject":
        from cloudstore.domain import CloudObject
        return CloudObject

    # Application
    if name == "RestWrite":
        from cloudstore.application.write import RestWrite
        return RestWrite
    if name == "run_write":
        from cloudstore.application.write import run_write
        return run_write
    if name == "TriggerRegistry":
        from cloudstore.application.triggers import TriggerRegistry
        return TriggerRegistry

    raise AttributeError(f"module 'cloudstore' has no attribute '{name}'")


__all__ = [
    "__version__",
    "CloudStoreError",
    "ErrorCode",
    "Container",
    "register_app",
    "AppOptions",
    "Config",
    "Auth",
    "CloudObject",
    "RestWrite",
    "run_write",
    "TriggerRegistry",
]
