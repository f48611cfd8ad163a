from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class LoggingConfig:
    """日志配置"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


def configure_logging(config: Optional[LoggingConfig] = None) -> None:
    config = config or LoggingConfig(level=os.getenv("CLOUDSTORE_LOG_LEVEL", "INFO"))
    handlers = None
    if config.file:
        os.makedirs(os.path.dirname(config.file) or ".", exist_ok=True)
        handlers = [logging.StreamHandler(), logging.FileHandler(config.file, encoding="utf-8")]
    logging.basicConfig(level=config.level.upper(), format=config.format, handlers=handlers)
