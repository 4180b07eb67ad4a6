"""Run coordinator — renders, compares, commits and classifies every unit."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field

from snapshotter.baseline_store import BaselineStore, SnapshotKey
from snapshotter.diff import DiffEngine
from snapshotter.driver.base import RenderDriver
from snapshotter.models.example import Example, Viewport
from snapshotter.models.result import SummaryReport, UnitResult
from snapshotter.registry import ExampleRegistry
from snapshotter.reporter.summary import exit_code_for, summarize

logger = logging.getLogger(__name__)


@dataclass
class RunOutcome:
    results: list[UnitResult] = field(default_factory=list)
    summary: SummaryReport = field(default_factory=SummaryReport)
    exit_code: int = 0
    duration_seconds: float = 0.0

    @property
    def failures(self) -> list[UnitResult]:
        return [r for r in self.results if r.failed]


class RunCoordinator:
    """Drives the selected examples through render -> compare -> commit.

    Each (example, viewport) pair is an independent unit. Units run
    concurrently up to ``max_parallel``; results keep registration and
    viewport order regardless of completion order.
    """

    def __init__(
        self,
        registry: ExampleRegistry,
        driver: RenderDriver,
        store: BaselineStore,
        diff_engine: DiffEngine | None = None,
        max_parallel: int = 1,
    ):
        if max_parallel < 1:
            raise ValueError("max_parallel must be at least 1")
        self.registry = registry
        self.driver = driver
        self.store = store
        self.diff_engine = diff_engine or DiffEngine()
        self.max_parallel = max_parallel

    def units(self) -> list[tuple[Example, Viewport]]:
        return [
            (example, viewport)
            for example in self.registry.selected()
            for viewport in example.viewports
        ]

    async def run(self) -> RunOutcome:
        start = time.time()
        units = self.units()
        skipped = len(self.registry) - len(self.registry.selected())
        if skipped:
            logger.info("Focus mode: skipping %d unfocused example(s)", skipped)
        logger.info("Rendering %d snapshot(s) from %d example(s)",
                    len(units), len(self.registry.selected()))

        semaphore = asyncio.Semaphore(self.max_parallel)
        total = len(units)

        async def _run_one(index: int, example: Example, viewport: Viewport) -> UnitResult:
            async with semaphore:
                logger.debug("[%d/%d] %s @%s", index + 1, total, example.description, viewport.name)
                return await self._process(example, viewport)

        results = list(await asyncio.gather(
            *(_run_one(i, ex, vp) for i, (ex, vp) in enumerate(units))
        ))

        outcome = RunOutcome(
            results=results,
            summary=summarize(results),
            exit_code=exit_code_for(results),
            duration_seconds=round(time.time() - start, 2),
        )
        logger.info(
            "Run complete: %d new, %d diff, %d okay, %d failed (%.1fs)",
            len(outcome.summary.new_examples), len(outcome.summary.diff_examples),
            len(outcome.summary.okay_examples), len(outcome.failures),
            outcome.duration_seconds,
        )
        return outcome

    async def _process(self, example: Example, viewport: Viewport) -> UnitResult:
        rendered = await self.driver.render(example, viewport)
        if not rendered.ok:
            logger.error("%s", rendered.failure)
            return UnitResult(example.description, viewport.name, failure=rendered.failure)

        key = SnapshotKey(example.description, viewport.name)
        baseline = self.store.read_baseline(key)
        outcome = self.diff_engine.compare(baseline, rendered.image) if baseline is not None else None
        classification = self.store.commit(key, rendered.image, outcome)
        logger.info("[%s] %s @%s", classification.value.upper(), example.description, viewport.name)
        return UnitResult(example.description, viewport.name, classification=classification)
