"""Snapshot identity, comparison result and run summary data structures."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from component_vrt.models.config import ViewportConfig

SEPARATOR = "--"
SNAPSHOT_SUFFIX = ".png"


class SnapshotIdentity(BaseModel):
    """Deterministic key locating the baseline, current and diff images."""

    model_config = ConfigDict(frozen=True)

    owner: str
    variant: str
    viewport_label: str

    @property
    def key(self) -> str:
        return f"{self.owner}/{self.variant}"

    @property
    def file_name(self) -> str:
        return SEPARATOR.join((self.owner, self.variant, self.viewport_label)) + SNAPSHOT_SUFFIX

    def __str__(self) -> str:
        return f"{self.key}/{self.viewport_label}"

    @classmethod
    def parse(cls, file_name: str) -> Optional["SnapshotIdentity"]:
        """Recover an identity from a snapshot file name, or None if it doesn't conform."""
        if not file_name.endswith(SNAPSHOT_SUFFIX):
            return None
        parts = file_name[: -len(SNAPSHOT_SUFFIX)].split(SEPARATOR)
        if len(parts) != 3 or not all(parts):
            return None
        return cls(owner=parts[0], variant=parts[1], viewport_label=parts[2])


class SnapshotPaths(BaseModel):
    model_config = ConfigDict(frozen=True)

    baseline: Path
    current: Path
    diff: Path


class ComparisonStatus(str, Enum):
    NEW = "new"
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"


class ComparisonResult(BaseModel):
    """Outcome of one (variant, viewport) capture. Created once per run."""

    model_config = ConfigDict(frozen=True)

    identity: SnapshotIdentity
    viewport: ViewportConfig
    status: ComparisonStatus
    paths: SnapshotPaths
    diff_percentage: Optional[float] = None
    diff_pixels: Optional[int] = None
    total_pixels: Optional[int] = None
    error_message: Optional[str] = None
    art_path: str = ""

    @property
    def has_diff_file(self) -> bool:
        return self.diff_pixels is not None and self.diff_pixels > 0


class RunSummary(BaseModel):
    total: int = 0
    passed: int = 0
    failed: int = 0
    new: int = 0
    skipped: int = 0  # capture/comparison errors
    duration_ms: int = 0

    @classmethod
    def from_results(cls, results: list[ComparisonResult], duration_ms: int = 0) -> "RunSummary":
        """Derive counts from a result list. Pure: same list, same counts."""
        statuses = [r.status for r in results]
        return cls(
            total=len(results),
            passed=statuses.count(ComparisonStatus.PASSED),
            failed=statuses.count(ComparisonStatus.FAILED),
            new=statuses.count(ComparisonStatus.NEW),
            skipped=statuses.count(ComparisonStatus.ERROR),
            duration_ms=duration_ms,
        )

    def gates_ci(self, fail_on_diff: bool = True, fail_on_error: bool = False) -> bool:
        """Whether a CI run with these counts should exit non-zero."""
        if fail_on_diff and self.failed > 0:
            return True
        return fail_on_error and self.skipped > 0


class RunOutcome(BaseModel):
    results: list[ComparisonResult] = Field(default_factory=list)
    summary: RunSummary = Field(default_factory=RunSummary)
