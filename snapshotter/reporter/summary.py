"""Summary report — buckets unit results into new, diff and okay lists."""

from __future__ import annotations

import logging

from snapshotter.models.result import Classification, ClassificationEntry, SummaryReport, UnitResult

logger = logging.getLogger(__name__)


def summarize(results: list[UnitResult]) -> SummaryReport:
    """Build the summary, keeping the order of ``results``. Failed units are left out."""
    report = SummaryReport()
    buckets = {
        Classification.NEW: report.new_examples,
        Classification.DIFF: report.diff_examples,
        Classification.OKAY: report.okay_examples,
    }
    for result in results:
        if result.failed or result.classification is None:
            continue
        buckets[result.classification].append(
            ClassificationEntry(description=result.description, viewport=result.viewport)
        )
    logger.debug("Summary: %d new, %d diff, %d okay",
                  len(report.new_examples), len(report.diff_examples), len(report.okay_examples))
    return report


def exit_code_for(results: list[UnitResult]) -> int:
    """1 if any unit failed to render, else 0."""
    return 1 if any(r.failed for r in results) else 0
