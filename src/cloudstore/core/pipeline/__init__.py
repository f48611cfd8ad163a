"""
声明式流水线模块。
"""

from .pipeline import Pipeline, PipelineStage, PipelineResult, StageResult

__all__ = ["Pipeline", "PipelineStage", "PipelineResult", "StageResult"]
