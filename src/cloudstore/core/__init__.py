"""
核心模块：错误类型、流水线、依赖注入、后台任务。
"""

from .background import BackgroundTasks
from .errors import CloudStoreError, ConfigurationError, ErrorCode
from .pipeline import Pipeline, PipelineResult, PipelineStage, StageResult

__all__ = [
    "BackgroundTasks",
    "CloudStoreError",
    "ConfigurationError",
    "ErrorCode",
    "Pipeline",
    "PipelineResult",
    "PipelineStage",
    "StageResult",
]
