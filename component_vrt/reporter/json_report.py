"""JSON report output for CI consumers."""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Optional

from component_vrt.imaging.comparator import COLOR_THRESHOLD
from component_vrt.models.config import VrtThreshold
from component_vrt.models.snapshot import ComparisonResult, RunSummary


def build_json_report(
    results: list[ComparisonResult],
    summary: RunSummary,
    threshold: Optional[VrtThreshold] = None,
) -> dict:
    threshold = threshold or VrtThreshold()
    return {
        "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "threshold": {
            "percentage": threshold.percentage,
            "pixels": threshold.pixels,
            "colorThreshold": COLOR_THRESHOLD,
        },
        "summary": summary.model_dump(),
        "results": [
            {
                "identity": str(r.identity),
                "owner": r.identity.owner,
                "variant": r.identity.variant,
                "viewport": r.identity.viewport_label,
                "status": r.status.value,
                "diffPercentage": r.diff_percentage,
                "diffPixels": r.diff_pixels,
                "totalPixels": r.total_pixels,
                "error": r.error_message,
            }
            for r in results
        ],
    }


def generate_json_report(
    results: list[ComparisonResult],
    summary: RunSummary,
    output_path: Path,
    threshold: Optional[VrtThreshold] = None,
) -> None:
    """Write a machine-readable JSON report."""
    report = build_json_report(results, summary, threshold)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(report, f, indent=2, default=str)
