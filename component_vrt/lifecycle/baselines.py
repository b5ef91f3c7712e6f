"""Baseline update, approve and clean operations over a finished run."""

from __future__ import annotations

import fnmatch
import logging
from pathlib import Path
from typing import Iterable, Optional

from component_vrt.errors import LifecycleError
from component_vrt.models.config import ViewportConfig
from component_vrt.models.snapshot import ComparisonResult, ComparisonStatus, SnapshotIdentity
from component_vrt.models.variant import VariantRef
from component_vrt.store.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


def matches_pattern(result: ComparisonResult, pattern: str) -> bool:
    """Glob match against ``owner/variant``, ``owner/variant/viewport`` or the file name."""
    identity = result.identity
    candidates = (identity.key, str(identity), identity.file_name)
    return any(fnmatch.fnmatchcase(c, pattern) for c in candidates)


class BaselineLifecycleManager:
    """Mutates the baseline directory. Filesystem failures surface as LifecycleError."""

    def __init__(self, store: SnapshotStore):
        self.store = store

    def _promote_all(self, results: Iterable[ComparisonResult]) -> int:
        updated = 0
        for result in results:
            try:
                if self.store.promote(result.identity):
                    updated += 1
            except OSError as e:
                raise LifecycleError(f"Could not update baseline for {result.identity}: {e}") from e
        return updated

    def update(self, results: list[ComparisonResult]) -> int:
        """Accept every captured image as the new baseline, whatever its status."""
        updated = self._promote_all(results)
        logger.info("Updated %d baseline(s)", updated)
        return updated

    def approve(self, results: list[ComparisonResult], pattern: Optional[str] = None) -> int:
        """Promote failed results, optionally narrowed by a glob pattern.

        Errored results are never approved: their capture can't be trusted.
        """
        selected = [
            r for r in results
            if r.status == ComparisonStatus.FAILED
            and (pattern is None or matches_pattern(r, pattern))
        ]
        logger.debug("Approving %d of %d result(s) (pattern=%s)", len(selected), len(results), pattern)
        approved = self._promote_all(selected)
        logger.info("Approved %d snapshot(s)", approved)
        return approved

    def clean_orphans(
        self, known_variants: Iterable[VariantRef], viewports: Iterable[ViewportConfig],
    ) -> list[Path]:
        """Delete baselines that no declared variant x viewport maps to.

        Skipped variants still count as declared, so their baselines survive.
        """
        viewports = list(viewports)
        expected = {
            self.store.identity_for(variant, viewport).file_name
            for variant in known_variants
            for viewport in viewports
        }

        removed: list[Path] = []
        try:
            for baseline in self.store.list_baselines():
                if baseline.name in expected:
                    continue
                baseline.unlink()
                (self.store.current_dir / baseline.name).unlink(missing_ok=True)
                (self.store.diff_dir / baseline.name).unlink(missing_ok=True)
                identity = SnapshotIdentity.parse(baseline.name)
                if identity is None:
                    logger.info("Removed non-snapshot file %s", baseline.name)
                else:
                    logger.info("Removed orphaned snapshot %s", identity)
                removed.append(baseline)
        except OSError as e:
            raise LifecycleError(f"Could not clean snapshots in {self.store.root}: {e}") from e
        return removed
