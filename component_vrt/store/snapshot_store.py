"""Snapshot store — owns the on-disk layout of baseline, current and diff images.

Layout under the snapshot root::

    <root>/<owner>--<variant>--<viewport>.png           baseline
    <root>/current/<owner>--<variant>--<viewport>.png   latest capture
    <root>/diff/<owner>--<variant>--<viewport>.png      nonzero diffs only
"""

from __future__ import annotations

import logging
import shutil
from collections import Counter
from pathlib import Path
from typing import Iterable

from component_vrt.errors import ConfigurationError
from component_vrt.imaging.codec import PixelBuffer, write_png
from component_vrt.models.config import ViewportConfig
from component_vrt.models.snapshot import SNAPSHOT_SUFFIX, SnapshotIdentity, SnapshotPaths
from component_vrt.models.variant import VariantRef

logger = logging.getLogger(__name__)

CURRENT_DIR = "current"
DIFF_DIR = "diff"
PATH_SEPARATORS = ("/", "\\")


def check_unique(identities: Iterable[SnapshotIdentity]) -> None:
    """Raise ConfigurationError if two targets map to the same snapshot file.

    Names containing a path separator are refused too: the snapshot file must
    sit directly under the store root.
    """
    identities = list(identities)
    for identity in identities:
        parts = (identity.owner, identity.variant, identity.viewport_label)
        if any(sep in part for part in parts for sep in PATH_SEPARATORS):
            raise ConfigurationError(
                f"Snapshot name for {identity} contains a path separator"
            )

    counts = Counter(identity.file_name for identity in identities)
    collisions = sorted(name for name, n in counts.items() if n > 1)
    if collisions:
        raise ConfigurationError(
            f"Snapshot identity collision: {', '.join(collisions)}"
        )


class SnapshotStore:
    """Resolves and manipulates snapshot files for a configured root."""

    def __init__(self, root: str | Path):
        self.root = Path(root)
        self.current_dir = self.root / CURRENT_DIR
        self.diff_dir = self.root / DIFF_DIR

    def ensure_dirs(self) -> None:
        """Create root, current/ and diff/. Safe to call concurrently."""
        for d in (self.root, self.current_dir, self.diff_dir):
            d.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def identity_for(variant: VariantRef, viewport: ViewportConfig) -> SnapshotIdentity:
        return SnapshotIdentity(
            owner=variant.owner, variant=variant.name, viewport_label=viewport.label,
        )

    def paths_for(self, identity: SnapshotIdentity) -> SnapshotPaths:
        name = identity.file_name
        return SnapshotPaths(
            baseline=self.root / name,
            current=self.current_dir / name,
            diff=self.diff_dir / name,
        )

    def has_baseline(self, identity: SnapshotIdentity) -> bool:
        return self.paths_for(identity).baseline.is_file()

    def write_current(self, identity: SnapshotIdentity, data: bytes) -> Path:
        """Persist a raw capture, overwriting the previous run's file."""
        path = self.paths_for(identity).current
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.debug("Wrote current snapshot %s (%d bytes)", path, len(data))
        return path

    def create_baseline_from_current(self, identity: SnapshotIdentity) -> Path:
        """Absent -> New: the first capture of an identity becomes its baseline."""
        paths = self.paths_for(identity)
        shutil.copyfile(paths.current, paths.baseline)
        logger.info("Created baseline %s", paths.baseline.name)
        return paths.baseline

    def write_diff(self, identity: SnapshotIdentity, diff_image: PixelBuffer) -> Path:
        return write_png(diff_image, self.paths_for(identity).diff)

    def discard_diff(self, identity: SnapshotIdentity) -> None:
        """Remove a diff left over from an earlier run."""
        self.paths_for(identity).diff.unlink(missing_ok=True)

    def promote(self, identity: SnapshotIdentity) -> bool:
        """Copy current over baseline. Returns False when there is no current file."""
        paths = self.paths_for(identity)
        if not paths.current.is_file():
            return False
        shutil.copyfile(paths.current, paths.baseline)
        logger.info("Updated baseline %s", paths.baseline.name)
        return True

    def list_baselines(self) -> list[Path]:
        """Baseline images directly under the root (current/ and diff/ excluded)."""
        if not self.root.is_dir():
            return []
        return sorted(
            p for p in self.root.iterdir()
            if p.is_file() and p.suffix.lower() == SNAPSHOT_SUFFIX
        )
