"""Tests for the HTML report generator."""

from pathlib import Path

from component_vrt.models.config import ViewportConfig
from component_vrt.models.snapshot import (
    ComparisonResult,
    ComparisonStatus,
    RunSummary,
    SnapshotIdentity,
)
from component_vrt.reporter.html_report import format_duration, generate_html_report
from component_vrt.store.snapshot_store import SnapshotStore

from conftest import make_png


def _result(store: SnapshotStore, variant: str, status: ComparisonStatus, **kwargs) -> ComparisonResult:
    identity = SnapshotIdentity(owner="Button", variant=variant, viewport_label="desktop")
    return ComparisonResult(
        identity=identity,
        viewport=ViewportConfig(name="desktop"),
        status=status,
        paths=store.paths_for(identity),
        **kwargs,
    )


class TestFormatDuration:
    def test_milliseconds(self):
        assert format_duration(450) == "450ms"

    def test_seconds(self):
        assert format_duration(12_300) == "12s"

    def test_minutes(self):
        assert format_duration(125_000) == "2m 5s"


class TestGenerateHtmlReport:
    """Tests for generate_html_report."""

    def test_empty_run(self, tmp_path: Path):
        output = tmp_path / "report.html"
        generate_html_report([], RunSummary(), output)

        content = output.read_text()
        assert "<!DOCTYPE html>" in content
        assert "No visual tests found" in content

    def test_all_passed_banner(self, tmp_path: Path, store: SnapshotStore):
        results = [_result(store, "a", ComparisonStatus.PASSED, diff_percentage=0.0,
                           diff_pixels=0, total_pixels=100)]
        output = tmp_path / "report.html"

        generate_html_report(results, RunSummary.from_results(results), output)

        assert "All 1 visual tests passed" in output.read_text()

    def test_failed_result_embeds_images(self, tmp_path: Path, store: SnapshotStore):
        """Test failures show baseline, current and diff side by side."""
        result = _result(store, "primary", ComparisonStatus.FAILED,
                         diff_percentage=4.0, diff_pixels=4, total_pixels=100)
        store.ensure_dirs()
        for path in (result.paths.baseline, result.paths.current, result.paths.diff):
            path.write_bytes(make_png(10, 10))
        output = tmp_path / "report.html"

        generate_html_report([result], RunSummary.from_results([result]), output)

        content = output.read_text()
        assert content.count("data:image/png;base64,") == 3
        assert "Button / primary" in content
        assert "4.000%" in content
        assert "All 1 visual tests passed" not in content

    def test_passed_result_has_no_images(self, tmp_path: Path, store: SnapshotStore):
        result = _result(store, "a", ComparisonStatus.PASSED, diff_percentage=0.0,
                         diff_pixels=0, total_pixels=100)
        store.ensure_dirs()
        result.paths.baseline.write_bytes(make_png(2, 2))
        output = tmp_path / "report.html"

        generate_html_report([result], RunSummary.from_results([result]), output)

        assert "data:image/png" not in output.read_text()

    def test_error_message_is_escaped(self, tmp_path: Path, store: SnapshotStore):
        result = _result(store, "a", ComparisonStatus.ERROR,
                         error_message="waiting for <div class='x'>")
        output = tmp_path / "report.html"

        generate_html_report([result], RunSummary.from_results([result]), output)

        content = output.read_text()
        assert "waiting for &lt;div class=&#x27;x&#x27;&gt;" in content
        assert 'data-status="error"' in content
