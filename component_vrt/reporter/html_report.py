"""HTML report generator — produces a self-contained visual regression report."""

from __future__ import annotations

import base64
import html
import logging
import time
from pathlib import Path

from component_vrt.models.snapshot import ComparisonResult, ComparisonStatus, RunSummary

logger = logging.getLogger(__name__)


def _embed_image(path: Path) -> str:
    """Read a PNG and return a base64 data URI, or empty string on failure."""
    try:
        if not path.exists() or path.stat().st_size == 0:
            return ""
        data = base64.b64encode(path.read_bytes()).decode()
        return f"data:image/png;base64,{data}"
    except OSError as e:
        logger.debug("Could not embed %s: %s", path, e)
        return ""


def format_duration(ms: int) -> str:
    if ms < 1000:
        return f"{ms}ms"
    seconds = ms // 1000
    minutes = seconds // 60
    if minutes == 0:
        return f"{seconds}s"
    return f"{minutes}m {seconds % 60}s"


def _build_result_card(r: ComparisonResult) -> str:
    """Build an HTML card for a single comparison result."""
    status = r.status.value
    name = html.escape(f"{r.identity.owner} / {r.identity.variant}")
    viewport = html.escape(r.identity.viewport_label)

    details = ""
    if r.status == ComparisonStatus.ERROR:
        details = f'<div class="result-details error">{html.escape(r.error_message or "")}</div>'
    elif r.diff_percentage is not None:
        details = (
            f'<div class="result-details">diff: {r.diff_percentage:.3f}% '
            f'({r.diff_pixels or 0:,} / {r.total_pixels or 0:,} pixels)</div>'
        )

    # Side-by-side images only for failures
    images = ""
    if r.status == ComparisonStatus.FAILED:
        panels = ""
        for label, path in (("Baseline", r.paths.baseline), ("Current", r.paths.current),
                            ("Diff", r.paths.diff)):
            data_uri = _embed_image(path)
            if data_uri:
                panels += f'''
            <div class="image-container">
              <div class="image-label">{label}</div>
              <img src="{data_uri}" alt="{label}" loading="lazy"/>
            </div>'''
        if panels:
            images = f'<div class="result-images">{panels}</div>'

    body = f'<div class="result-body">{details}{images}</div>' if details or images else ""
    return f'''
    <div class="result {status}" data-status="{status}">
      <div class="result-header">
        <div class="result-info">
          <span class="result-name">{name}</span>
          <span class="result-meta">{viewport}</span>
        </div>
        <span class="badge {status}">{status.upper()}</span>
      </div>
      {body}
    </div>'''


def generate_html_report(
    results: list[ComparisonResult],
    summary: RunSummary,
    output_path: Path,
) -> None:
    """Write a self-contained HTML report with a card per snapshot."""
    timestamp = time.strftime("%Y-%m-%d %H:%M")

    all_passed = ""
    if summary.total > 0 and summary.failed == 0 and summary.skipped == 0:
        all_passed = f'<div class="all-passed">&#10003; All {summary.total} visual tests passed</div>'

    if results:
        cards = "".join(_build_result_card(r) for r in results)
    else:
        cards = '<div class="empty-state">No visual tests found</div>'

    report_html = f'''<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Visual Regression Report</title>
<style>
  :root {{ --passed: #22c55e; --failed: #ef4444; --new: #3b82f6; --error: #f97316; --bg: #f8fafc; --card: white; --border: #e2e8f0; --text: #1e293b; --muted: #64748b; --accent: #6366f1; }}
  * {{ margin: 0; padding: 0; box-sizing: border-box; }}
  body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background: var(--bg); color: var(--text); line-height: 1.6; padding: 1.5rem; }}
  .container {{ max-width: 1400px; margin: 0 auto; }}
  h1 {{ font-size: 1.8rem; margin-bottom: 0.3rem; }}
  .meta {{ color: var(--muted); margin-bottom: 1.5rem; font-size: 0.9rem; }}
  .summary {{ display: grid; grid-template-columns: repeat(auto-fit, minmax(130px, 1fr)); gap: 0.8rem; margin-bottom: 1.5rem; }}
  .stat {{ background: var(--card); border-radius: 8px; padding: 1rem; box-shadow: 0 1px 3px rgba(0,0,0,0.08); text-align: center; }}
  .stat .value {{ font-size: 1.8rem; font-weight: 700; }}
  .stat .label {{ font-size: 0.8rem; color: var(--muted); }}
  .stat.passed .value {{ color: var(--passed); }}
  .stat.failed .value {{ color: var(--failed); }}
  .stat.new .value {{ color: var(--new); }}
  .stat.error .value {{ color: var(--error); }}
  .badge {{ display: inline-block; padding: 0.15rem 0.55rem; border-radius: 9999px; font-size: 0.7rem; font-weight: 600; text-transform: uppercase; }}
  .badge.passed {{ background: #dcfce7; color: #166534; }}
  .badge.failed {{ background: #fecaca; color: #991b1b; }}
  .badge.new {{ background: #dbeafe; color: #1e40af; }}
  .badge.error {{ background: #fed7aa; color: #9a3412; }}
  .all-passed {{ background: #f0fdf4; border: 1px solid #bbf7d0; color: #166534; border-radius: 8px; padding: 1rem; text-align: center; font-weight: 600; margin-bottom: 1.5rem; }}
  .result {{ background: var(--card); border-radius: 8px; margin-bottom: 0.6rem; box-shadow: 0 1px 3px rgba(0,0,0,0.08); overflow: hidden; }}
  .result-header {{ display: flex; justify-content: space-between; align-items: center; padding: 0.7rem 1rem; border-left: 4px solid var(--border); }}
  .result.passed .result-header {{ border-left-color: var(--passed); }}
  .result.failed .result-header {{ border-left-color: var(--failed); }}
  .result.new .result-header {{ border-left-color: var(--new); }}
  .result.error .result-header {{ border-left-color: var(--error); }}
  .result-info {{ display: flex; align-items: center; gap: 0.6rem; }}
  .result-name {{ font-weight: 600; }}
  .result-meta {{ font-size: 0.78rem; color: var(--muted); background: #f1f5f9; padding: 0.1rem 0.4rem; border-radius: 4px; }}
  .result-details {{ font-family: monospace; font-size: 0.82rem; color: var(--muted); padding: 0.6rem 1rem; border-top: 1px solid var(--border); }}
  .result-details.error {{ color: var(--failed); }}
  .result-images {{ display: grid; grid-template-columns: repeat(auto-fit, minmax(280px, 1fr)); gap: 0.8rem; padding: 1rem; }}
  .image-container {{ border: 1px solid var(--border); border-radius: 6px; overflow: hidden; }}
  .image-label {{ font-size: 0.7rem; font-weight: 600; text-transform: uppercase; color: var(--muted); padding: 0.3rem 0.6rem; border-bottom: 1px solid var(--border); }}
  .image-container img {{ width: 100%; display: block; }}
  .empty-state {{ text-align: center; padding: 3rem; color: var(--muted); }}
  .filter-bar {{ display: flex; gap: 0.5rem; margin-bottom: 1rem; flex-wrap: wrap; }}
  .filter-btn {{ padding: 0.3rem 0.8rem; border-radius: 6px; border: 1px solid var(--border); background: var(--card); cursor: pointer; font-size: 0.82rem; }}
  .filter-btn.active {{ background: var(--accent); color: white; border-color: var(--accent); }}
</style>
</head>
<body>
<div class="container">
  <h1>Visual Regression Report</h1>
  <p class="meta">{html.escape(timestamp)} &middot; Duration: {format_duration(summary.duration_ms)}</p>

  <div class="summary">
    <div class="stat"><div class="value">{summary.total}</div><div class="label">Total</div></div>
    <div class="stat passed"><div class="value">{summary.passed}</div><div class="label">Passed</div></div>
    <div class="stat failed"><div class="value">{summary.failed}</div><div class="label">Failed</div></div>
    <div class="stat new"><div class="value">{summary.new}</div><div class="label">New</div></div>
    <div class="stat error"><div class="value">{summary.skipped}</div><div class="label">Errors</div></div>
  </div>

  {all_passed}

  <div class="filter-bar">
    <button class="filter-btn active" onclick="filterResults('all')">All ({summary.total})</button>
    <button class="filter-btn" onclick="filterResults('failed')">Failed ({summary.failed})</button>
    <button class="filter-btn" onclick="filterResults('passed')">Passed ({summary.passed})</button>
    <button class="filter-btn" onclick="filterResults('new')">New ({summary.new})</button>
    <button class="filter-btn" onclick="filterResults('error')">Errors ({summary.skipped})</button>
  </div>

  <div id="result-list">
    {cards}
  </div>
</div>

<script>
function filterResults(status) {{
  document.querySelectorAll('.filter-btn').forEach(b => b.classList.remove('active'));
  event.target.classList.add('active');
  document.querySelectorAll('.result').forEach(card => {{
    card.style.display = status === 'all' || card.dataset.status === status ? '' : 'none';
  }});
}}
</script>
</body>
</html>'''

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(report_html)
