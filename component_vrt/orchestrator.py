"""Run orchestrator — captures every variant x viewport and coordinates the lifecycle passes."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Optional

from component_vrt.capture.controller import CaptureController
from component_vrt.capture.renderer import PlaywrightRenderer, Renderer
from component_vrt.lifecycle.baselines import BaselineLifecycleManager
from component_vrt.models.config import ViewportConfig, VrtConfig
from component_vrt.models.snapshot import ComparisonResult, RunOutcome, RunSummary
from component_vrt.models.variant import VariantRef
from component_vrt.registry.art_scanner import load_variants
from component_vrt.reporter.reporter import Reporter
from component_vrt.store.snapshot_store import SnapshotStore, check_unique

logger = logging.getLogger(__name__)


async def run_all(
    controller: CaptureController,
    variants: list[VariantRef],
    viewports: list[ViewportConfig],
    max_parallel: int = 1,
) -> RunOutcome:
    """Capture every non-skipped (variant, viewport) pair.

    Results keep enumeration order. A failing item is recorded as an error and
    never stops the loop. With ``max_parallel > 1`` captures run concurrently,
    each on its own identity.
    """
    start = time.monotonic()
    targets = [
        (variant, viewport)
        for variant in variants if not variant.skip
        for viewport in viewports
    ]
    check_unique(controller.store.identity_for(v, vp) for v, vp in targets)
    controller.store.ensure_dirs()

    skipped = sum(1 for v in variants if v.skip)
    logger.info("Capturing %d snapshot(s) (%d variant(s) skipped, %d viewport(s))",
                len(targets), skipped, len(viewports))

    results: list[ComparisonResult]
    if max_parallel <= 1:
        results = []
        for index, (variant, viewport) in enumerate(targets):
            logger.debug("Capture [%d/%d]: %s/%s @ %s", index + 1, len(targets),
                         variant.owner, variant.name, viewport.label)
            results.append(await controller.capture(variant, viewport))
    else:
        semaphore = asyncio.Semaphore(max_parallel)

        async def _capture_one(variant: VariantRef, viewport: ViewportConfig) -> ComparisonResult:
            async with semaphore:
                return await controller.capture(variant, viewport)

        results = list(await asyncio.gather(
            *(_capture_one(v, vp) for v, vp in targets)
        ))

    duration_ms = int((time.monotonic() - start) * 1000)
    summary = RunSummary.from_results(results, duration_ms)
    logger.info(
        "Run complete: %d passed, %d failed, %d new, %d errors (%.1fs)",
        summary.passed, summary.failed, summary.new, summary.skipped, duration_ms / 1000,
    )
    return RunOutcome(results=results, summary=summary)


class VrtOrchestrator:
    """Synchronous entry point used by the CLI."""

    def __init__(self, config: VrtConfig, renderer: Optional[Renderer] = None):
        self.config = config
        self.store = SnapshotStore(config.snapshot_dir)
        self.lifecycle = BaselineLifecycleManager(self.store)
        # Injected renderer (tests); otherwise a Playwright session per run
        self.renderer = renderer

    def discover_variants(self) -> list[VariantRef]:
        variants = load_variants(self.config.art_root)
        logger.info("Found %d variant(s) under %s", len(variants), self.config.art_root)
        return variants

    async def _run(self, variants: list[VariantRef]) -> RunOutcome:
        if self.renderer is not None:
            return await self._run_with(self.renderer, variants)
        async with PlaywrightRenderer(self.config.browser, self.config.capture) as renderer:
            return await self._run_with(renderer, variants)

    async def _run_with(self, renderer: Renderer, variants: list[VariantRef]) -> RunOutcome:
        controller = CaptureController(
            self.store, renderer,
            threshold=self.config.threshold,
            base_url=self.config.base_url,
        )
        return await run_all(
            controller, variants, self.config.viewports,
            max_parallel=self.config.max_parallel_captures,
        )

    def run(
        self,
        variants: Optional[list[VariantRef]] = None,
        update_baselines: bool = False,
    ) -> RunOutcome:
        """Capture and compare everything, optionally accepting all captures afterwards."""
        if variants is None:
            variants = self.discover_variants()
        outcome = asyncio.run(self._run(variants))
        if update_baselines:
            self.lifecycle.update(outcome.results)
        return outcome

    def approve(
        self,
        pattern: Optional[str] = None,
        variants: Optional[list[VariantRef]] = None,
    ) -> tuple[RunOutcome, int]:
        """Run, then promote failed snapshots matching ``pattern``."""
        outcome = self.run(variants)
        return outcome, self.lifecycle.approve(outcome.results, pattern)

    def clean(self, variants: Optional[list[VariantRef]] = None) -> list[Path]:
        """Remove baselines no declared variant maps to. Doesn't launch a browser."""
        if variants is None:
            variants = self.discover_variants()
        return self.lifecycle.clean_orphans(variants, self.config.viewports)

    def report(
        self,
        outcome: RunOutcome,
        formats: Optional[list[str]] = None,
        output_dir: Optional[Path] = None,
    ) -> dict[str, str]:
        reporter = Reporter(self.config)
        return reporter.generate_reports(outcome, formats=formats, output_dir=output_dir)
