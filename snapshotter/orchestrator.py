"""Run orchestrator — wires configuration, examples, driver, store and reporter."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from snapshotter.baseline_store import BaselineStore
from snapshotter.coordinator import RunCoordinator, RunOutcome
from snapshotter.diff import DiffEngine
from snapshotter.driver.assets import PublicAssetResolver
from snapshotter.driver.base import RenderDriver
from snapshotter.driver.playwright_driver import PlaywrightDriver
from snapshotter.loader import load_examples
from snapshotter.models.config import SnapshotConfig
from snapshotter.models.result import SummaryReport
from snapshotter.registry import ExampleRegistry
from snapshotter.reporter.json_report import generate_json_report, load_json_report
from snapshotter.viewports import ViewportCatalog

logger = logging.getLogger(__name__)


class Orchestrator:
    """Coordinates one snapshot run.

    Paths in the config are relative to ``base_dir`` (the config file's
    folder when run from the CLI).
    """

    def __init__(self, config: SnapshotConfig, base_dir: Path | None = None):
        self.config = config
        self.base_dir = Path(base_dir) if base_dir is not None else Path.cwd()
        self.catalog = ViewportCatalog.from_config(config)
        self.store = BaselineStore(self.base_dir / config.snapshots_folder)

    def load_registry(self) -> ExampleRegistry:
        registry = ExampleRegistry(self.catalog)
        return load_examples(self.config.source_files, registry, self.base_dir)

    def build_driver(self) -> PlaywrightDriver:
        assets = PublicAssetResolver(
            [self.base_dir / d for d in self.config.public_directories],
            [self.base_dir / s for s in self.config.stylesheets],
        )
        return PlaywrightDriver(
            assets,
            base_url=self.config.base_url,
            browser_name=self.config.browser,
            timeout_seconds=self.config.render_timeout_seconds,
        )

    def run(self) -> RunOutcome:
        """Load examples, render them and write the summary."""
        return asyncio.run(self._run())

    async def _run(self) -> RunOutcome:
        logger.info("=== Snapshot run (%s) ===", self.store.root)
        # Registration errors abort here, before the browser starts
        registry = self.load_registry()
        async with self.build_driver() as driver:
            outcome = await self.render(registry, driver)
        return outcome

    async def render(self, registry: ExampleRegistry, driver: RenderDriver) -> RunOutcome:
        coordinator = RunCoordinator(
            registry,
            driver,
            self.store,
            DiffEngine(self.config.pixel_tolerance),
            max_parallel=self.config.max_parallel_renders,
        )
        outcome = await coordinator.run()
        generate_json_report(outcome.summary, self.store.summary_path)
        logger.debug("Wrote summary to %s", self.store.summary_path)
        return outcome

    def load_summary(self) -> SummaryReport:
        return load_json_report(self.store.summary_path)

    def clean(self) -> bool:
        return self.store.clean()
