"""JSON summary artifact output."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from snapshotter.models.result import SummaryReport


def generate_json_report(summary: SummaryReport, output_path: Path) -> None:
    """Write the summary, replacing the one from the previous run."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=output_path.parent, prefix=".tmp-", suffix=".json")
    try:
        with os.fdopen(fd, "w") as f:
            json.dump(summary.model_dump(), f, indent=2)
        os.replace(tmp, output_path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def load_json_report(path: Path) -> SummaryReport:
    """Read a summary written by :func:`generate_json_report`."""
    if not path.exists():
        raise FileNotFoundError(f"No result summary at {path}")
    with open(path) as f:
        return SummaryReport.model_validate(json.load(f))
