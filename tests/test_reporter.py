"""Tests for summary building and the JSON summary artifact."""

import json

import pytest

from snapshotter.errors import RenderFailure
from snapshotter.models.result import Classification, ClassificationEntry, SummaryReport, UnitResult
from snapshotter.reporter.json_report import generate_json_report, load_json_report
from snapshotter.reporter.summary import exit_code_for, summarize


def _classified(description, viewport, classification):
    return UnitResult(description, viewport, classification=classification)


def _failed(description, viewport="large"):
    return UnitResult(description, viewport, failure=RenderFailure(description, "boom"))


class TestSummarize:
    def test_buckets_in_processing_order(self):
        results = [
            _classified("foo", "large", Classification.NEW),
            _classified("bar", "large", Classification.OKAY),
            _classified("foo", "small", Classification.DIFF),
            _classified("baz", "large", Classification.NEW),
        ]
        report = summarize(results)
        assert [(e.description, e.viewport) for e in report.new_examples] == [
            ("foo", "large"), ("baz", "large"),
        ]
        assert [(e.description, e.viewport) for e in report.diff_examples] == [("foo", "small")]
        assert [(e.description, e.viewport) for e in report.okay_examples] == [("bar", "large")]

    def test_failures_left_out(self):
        report = summarize([_failed("foo"), _classified("bar", "large", Classification.NEW)])
        assert [e.description for e in report.new_examples] == ["bar"]
        assert report.diff_examples == []
        assert report.okay_examples == []

    def test_empty(self):
        assert summarize([]) == SummaryReport()


class TestExitCode:
    def test_zero_without_failures(self):
        assert exit_code_for([
            _classified("a", "large", Classification.NEW),
            _classified("b", "large", Classification.DIFF),
        ]) == 0

    def test_one_with_any_failure(self):
        assert exit_code_for([_classified("a", "large", Classification.OKAY), _failed("b")]) == 1

    def test_zero_for_empty_run(self):
        assert exit_code_for([]) == 0


class TestJsonReport:
    def test_writes_expected_structure(self, tmp_path):
        report = SummaryReport(new_examples=[ClassificationEntry(description="foo", viewport="large")])
        path = tmp_path / "snapshots" / "result_summary.json"
        generate_json_report(report, path)

        with open(path) as f:
            data = json.load(f)
        assert data == {
            "new_examples": [{"description": "foo", "viewport": "large"}],
            "diff_examples": [],
            "okay_examples": [],
        }

    def test_overwrites_previous(self, tmp_path):
        path = tmp_path / "result_summary.json"
        generate_json_report(
            SummaryReport(new_examples=[ClassificationEntry(description="foo", viewport="large")]), path,
        )
        generate_json_report(
            SummaryReport(okay_examples=[ClassificationEntry(description="foo", viewport="large")]), path,
        )
        loaded = load_json_report(path)
        assert loaded.new_examples == []
        assert loaded.okay_examples[0].description == "foo"

    def test_load_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_json_report(tmp_path / "nope.json")
