"""Tests for report generation orchestration."""

import json
from pathlib import Path

from component_vrt.models.config import VrtConfig, VrtThreshold
from component_vrt.models.snapshot import RunOutcome
from component_vrt.reporter.reporter import HTML_REPORT_NAME, JSON_REPORT_NAME, Reporter


class TestReporter:
    """Tests for Reporter.generate_reports."""

    def test_default_formats_from_config(self, tmp_path: Path):
        config = VrtConfig(report_output_dir=str(tmp_path / "reports"))

        generated = Reporter(config).generate_reports(RunOutcome())

        assert generated == {"html": str(tmp_path / "reports" / HTML_REPORT_NAME)}
        assert (tmp_path / "reports" / HTML_REPORT_NAME).exists()

    def test_both_formats(self, tmp_path: Path):
        config = VrtConfig(report_formats=["html", "json"], report_output_dir=str(tmp_path))

        generated = Reporter(config).generate_reports(RunOutcome())

        assert set(generated) == {"html", "json"}
        assert Path(generated["json"]).name == JSON_REPORT_NAME

    def test_explicit_formats_and_directory_override_config(self, tmp_path: Path):
        config = VrtConfig(report_output_dir=str(tmp_path / "ignored"))

        generated = Reporter(config).generate_reports(
            RunOutcome(), formats=["json"], output_dir=tmp_path / "ci",
        )

        assert generated == {"json": str(tmp_path / "ci" / JSON_REPORT_NAME)}
        assert not (tmp_path / "ignored").exists()

    def test_unknown_format_is_ignored(self, tmp_path: Path):
        config = VrtConfig(report_output_dir=str(tmp_path))
        assert Reporter(config).generate_reports(RunOutcome(), formats=["pdf"]) == {}

    def test_json_report_carries_configured_threshold(self, tmp_path: Path):
        config = VrtConfig(
            report_output_dir=str(tmp_path),
            threshold=VrtThreshold(percentage=1.5, pixels=10),
        )

        generated = Reporter(config).generate_reports(RunOutcome(), formats=["json"])

        data = json.loads(Path(generated["json"]).read_text())
        assert data["threshold"]["percentage"] == 1.5
        assert data["threshold"]["pixels"] == 10
