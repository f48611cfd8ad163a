"""
声明式流水线抽象：按顺序执行异步阶段，首个关键阶段失败即中止。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any, Awaitable, Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class StageResult:
    name: str
    status: str
    output: Any = None
    error: Optional[BaseException] = None
    duration_ms: Optional[float] = None


@dataclass
class PipelineResult:
    stages: List[StageResult] = field(default_factory=list)
    status: str = "success"
    error: Optional[BaseException] = None

    def failed(self) -> bool:
        return self.status == "failed"

    def raise_for_error(self) -> None:
        if self.failed() and self.error is not None:
            raise self.error

    @property
    def stage_names(self) -> List[str]:
        return [s.name for s in self.stages if s.status != "skipped"]


class PipelineStage:
    def __init__(
        self,
        name: str,
        run_fn: Callable[[Any], Awaitable[Any]],
        *,
        is_critical: bool = True,
        skip_if: Optional[Callable[[Any], bool]] = None,
    ):
        self.name = name
        self.run_fn = run_fn
        self.is_critical = is_critical
        self.skip_if = skip_if

    def should_skip(self, ctx: Any) -> bool:
        return bool(self.skip_if and self.skip_if(ctx))

    async def run(self, ctx: Any) -> StageResult:
        if self.should_skip(ctx):
            return StageResult(name=self.name, status="skipped")

        start = perf_counter()
        result = StageResult(name=self.name, status="success")
        try:
            result.output = await self.run_fn(ctx)
        except Exception as exc:  # noqa: BLE001
            result.status, result.error = "error", exc
        result.duration_ms = (perf_counter() - start) * 1000
        return result


class Pipeline:
    def __init__(self, name: str):
        self.name = name
        self.stages: List[PipelineStage] = []

    def add_stage(self, stage: PipelineStage) -> "Pipeline":
        self.stages.append(stage)
        return self

    async def run(self, ctx: Any) -> PipelineResult:
        results: List[StageResult] = []

        for stage in self.stages:
            stage_result = await stage.run(ctx)
            results.append(stage_result)

            if stage_result.status == "error":
                if stage.is_critical:
                    logger.debug("pipeline %s aborted at stage %s: %s", self.name, stage.name, stage_result.error)
                    return PipelineResult(stages=results, status="failed", error=stage_result.error)
                logger.warning("pipeline %s stage %s failed: %s", self.name, stage.name, stage_result.error)

        return PipelineResult(stages=results, status="success")
