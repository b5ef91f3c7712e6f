"""Report generation orchestration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from component_vrt.models.config import VrtConfig
from component_vrt.models.snapshot import RunOutcome

from .html_report import generate_html_report
from .json_report import generate_json_report

logger = logging.getLogger(__name__)

HTML_REPORT_NAME = "vrt-report.html"
JSON_REPORT_NAME = "vrt-report.json"


class Reporter:
    """Generates reports from a run outcome."""

    def __init__(self, config: VrtConfig):
        self.config = config

    def generate_reports(
        self,
        outcome: RunOutcome,
        formats: Optional[list[str]] = None,
        output_dir: Optional[Path] = None,
    ) -> dict[str, str]:
        """Generate the requested report formats. Returns format -> file path."""
        out_dir = output_dir or Path(self.config.report_output_dir)
        formats = formats if formats is not None else self.config.report_formats
        out_dir.mkdir(parents=True, exist_ok=True)
        generated = {}
        logger.debug("Report output directory: %s", out_dir)

        if "html" in formats:
            path = out_dir / HTML_REPORT_NAME
            generate_html_report(outcome.results, outcome.summary, path)
            generated["html"] = str(path)
            logger.info("HTML report: %s", path)

        if "json" in formats:
            path = out_dir / JSON_REPORT_NAME
            generate_json_report(outcome.results, outcome.summary, path, self.config.threshold)
            generated["json"] = str(path)
            logger.info("JSON report: %s", path)

        return generated
