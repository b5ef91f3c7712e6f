"""Capture and classify a single variant at a single viewport."""

from __future__ import annotations

import asyncio
import logging
import time

from component_vrt.errors import VrtError
from component_vrt.imaging.comparator import Comparison, compare_files
from component_vrt.models.config import ViewportConfig, VrtThreshold
from component_vrt.models.snapshot import ComparisonResult, ComparisonStatus
from component_vrt.models.variant import VariantRef
from component_vrt.registry.art_scanner import variant_address
from component_vrt.store.snapshot_store import SnapshotStore

from .renderer import Renderer

logger = logging.getLogger(__name__)


class CaptureController:
    """Drives the renderer, then the store and comparator, for a single target."""

    def __init__(
        self,
        store: SnapshotStore,
        renderer: Renderer,
        threshold: VrtThreshold | None = None,
        base_url: str = "http://localhost:5173",
    ):
        self.store = store
        self.renderer = renderer
        self.threshold = threshold or VrtThreshold()
        self.base_url = base_url

    def passes(self, comparison: Comparison) -> bool:
        """Inclusive percentage check, plus the optional absolute pixel cap."""
        if comparison.dimension_mismatch:
            return False
        if comparison.diff_percentage > self.threshold.percentage:
            return False
        if self.threshold.pixels is not None and comparison.diff_pixels > self.threshold.pixels:
            return False
        return True

    async def capture(self, variant: VariantRef, viewport: ViewportConfig) -> ComparisonResult:
        """Capture and classify. Never raises for per-item failures; cancellation propagates."""
        identity = self.store.identity_for(variant, viewport)
        paths = self.store.paths_for(identity)
        common = {
            "identity": identity,
            "viewport": viewport,
            "paths": paths,
            "art_path": variant.art_path,
        }
        start = time.time()

        try:
            self.store.ensure_dirs()
            url = variant_address(self.base_url, variant.art_path or variant.owner, variant.name)
            png = await self.renderer.render_and_capture(url, viewport)
            self.store.write_current(identity, png)

            if not self.store.has_baseline(identity):
                self.store.create_baseline_from_current(identity)
                logger.info("[NEW] %s (%.1fs)", identity, time.time() - start)
                return ComparisonResult(status=ComparisonStatus.NEW, **common)

            comparison = await asyncio.to_thread(compare_files, paths.baseline, paths.current)
            if comparison.diff_pixels > 0:
                self.store.write_diff(identity, comparison.diff_image)
            else:
                self.store.discard_diff(identity)

            status = ComparisonStatus.PASSED if self.passes(comparison) else ComparisonStatus.FAILED
            logger.info("[%s] %s: %.3f%% (%d/%d px, %.1fs)",
                        status.value.upper(), identity, comparison.diff_percentage,
                        comparison.diff_pixels, comparison.total_pixels, time.time() - start)
            return ComparisonResult(
                status=status,
                diff_percentage=comparison.diff_percentage,
                diff_pixels=comparison.diff_pixels,
                total_pixels=comparison.total_pixels,
                **common,
            )
        except VrtError as e:
            logger.warning("[ERROR] %s: %s", identity, e)
            return ComparisonResult(status=ComparisonStatus.ERROR, error_message=str(e), **common)
        except Exception as e:
            logger.warning("[ERROR] %s crashed: %s", identity, e)
            return ComparisonResult(
                status=ComparisonStatus.ERROR,
                error_message=f"{type(e).__name__}: {e}",
                **common,
            )
