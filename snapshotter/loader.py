"""Example loader — executes example source files against a registry."""

from __future__ import annotations

import glob
import logging
import runpy
from pathlib import Path

from snapshotter.registry import ExampleRegistry

logger = logging.getLogger(__name__)


def expand_source_files(patterns: list[str], base_dir: Path) -> list[Path]:
    """Expand configured paths and glob patterns, keeping order and dropping repeats."""
    files: list[Path] = []
    for pattern in patterns:
        full = str(base_dir / pattern)
        if any(c in pattern for c in "*?["):
            matches = [Path(p) for p in sorted(glob.glob(full, recursive=True))]
            if not matches:
                raise FileNotFoundError(f"No example files match '{pattern}'")
        else:
            path = Path(full)
            if not path.is_file():
                raise FileNotFoundError(f"Example file not found: {path}")
            matches = [path]
        for match in matches:
            if match not in files:
                files.append(match)
    return files


def load_examples(patterns: list[str], registry: ExampleRegistry, base_dir: Path) -> ExampleRegistry:
    """Run each example file with ``snapshot`` bound to ``registry``.

    Registration errors (duplicate descriptions, unknown viewports) propagate.
    """
    for path in expand_source_files(patterns, base_dir):
        before = len(registry)
        logger.debug("Loading examples from %s", path)
        runpy.run_path(str(path), init_globals={"snapshot": registry}, run_name="__snapshot_examples__")
        logger.debug("  %d example(s) defined in %s", len(registry) - before, path.name)
    logger.info("Loaded %d example(s)", len(registry))
    return registry
