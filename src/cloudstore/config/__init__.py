"""
应用配置：注册选项、进程级缓存与按请求解析的 Config。
"""

from .models import AppOptions, CustomPages
from .cache import AppCache, AppEntry, ConfigResolver
from .config import Config
from .log_setup import LoggingConfig, configure_logging

__all__ = [
    "AppOptions",
    "CustomPages",
    "AppCache",
    "AppEntry",
    "ConfigResolver",
    "Config",
    "LoggingConfig",
    "configure_logging",
]
