"""Pytest configuration and shared fixtures."""

import hashlib
import re
from pathlib import Path
from typing import Any

import pytest
from PIL import Image

from snapshotter.baseline_store import BaselineStore
from snapshotter.driver.base import RenderDriver
from snapshotter.models.config import SnapshotConfig, ViewportConfig
from snapshotter.models.example import Example, Viewport
from snapshotter.registry import ExampleRegistry
from snapshotter.viewports import ViewportCatalog


# ============================================================================
# Fake driver
# ============================================================================


class FakeDriver(RenderDriver):
    """Deterministic driver: markup becomes a solid block, 10px per line of text.

    Empty markup renders as a 1px strip, like the browser driver's clamp.
    The fill color is derived from the markup, so different markup differs.
    """

    def __init__(self, timeout_seconds: float = 5.0):
        super().__init__(timeout_seconds)
        self.captured: list[tuple[str, str]] = []

    async def capture(self, example: Example, viewport: Viewport, value: Any) -> Image.Image:
        self.captured.append((example.description, viewport.name))
        if isinstance(value, Image.Image):
            return value
        text = re.sub(r"<[^>]*>", "", value).strip()
        lines = len(text.splitlines()) if text else 0
        digest = hashlib.md5(value.encode()).digest()
        color = (digest[0], digest[1], digest[2], 255)
        return Image.new("RGBA", (viewport.width, max(1, 10 * lines)), color)


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def snapshot_config() -> SnapshotConfig:
    """Small viewports keep images cheap."""
    return SnapshotConfig(
        viewports={
            "large": ViewportConfig(width=64, height=48),
            "medium": ViewportConfig(width=40, height=48),
            "small": ViewportConfig(width=20, height=48),
        },
        source_files=["examples.py"],
        render_timeout_seconds=5.0,
    )


@pytest.fixture
def catalog(snapshot_config: SnapshotConfig) -> ViewportCatalog:
    return ViewportCatalog.from_config(snapshot_config)


@pytest.fixture
def registry(catalog: ViewportCatalog) -> ExampleRegistry:
    return ExampleRegistry(catalog)


@pytest.fixture
def store(tmp_path: Path) -> BaselineStore:
    return BaselineStore(tmp_path / "snapshots")


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def driver_factory():
    return FakeDriver


@pytest.fixture
def write_examples(tmp_path: Path):
    """Write an example source file into the temp project folder."""
    def _write(source: str, name: str = "examples.py") -> Path:
        path = tmp_path / name
        path.write_text(source)
        return path
    return _write
