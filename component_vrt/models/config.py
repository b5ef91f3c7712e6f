"""Configuration models for the VRT engine."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from component_vrt.errors import ConfigurationError


class ViewportConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: int = Field(1280, gt=0)
    height: int = Field(720, gt=0)
    device_scale_factor: float = Field(1.0, ge=1.0)
    name: Optional[str] = None

    @property
    def label(self) -> str:
        """Name used in snapshot file names."""
        return self.name or f"{self.width}x{self.height}"


# name -> (width, height, device_scale_factor)
VIEWPORT_PRESETS: dict[str, tuple[int, int, float]] = {
    "desktop": (1280, 720, 1.0),
    "desktop-hd": (1920, 1080, 1.0),
    "desktop-4k": (3840, 2160, 1.0),
    "tablet-portrait": (768, 1024, 2.0),
    "tablet-landscape": (1024, 768, 2.0),
    "ipad-pro": (1024, 1366, 2.0),
    "mobile": (375, 667, 2.0),
    "mobile-landscape": (667, 375, 2.0),
    "iphone-se": (375, 667, 2.0),
    "iphone-14": (390, 844, 3.0),
    "iphone-14-pro": (393, 852, 3.0),
    "iphone-14-pro-max": (430, 932, 3.0),
    "pixel-7": (412, 915, 2.625),
}

_SIZE_RE = re.compile(r"^(\d+)x(\d+)(?:@(\d+(?:\.\d+)?))?$")


def viewport_preset(name: str) -> ViewportConfig:
    """Look up a preset by name. Hyphens are optional and case is ignored."""
    wanted = name.strip().lower()
    for preset, (width, height, scale) in VIEWPORT_PRESETS.items():
        if wanted in (preset, preset.replace("-", "")):
            return ViewportConfig(
                width=width, height=height, device_scale_factor=scale, name=preset,
            )
    raise ConfigurationError(f"Unknown viewport preset: {name}")


def parse_viewport_spec(spec: str) -> ViewportConfig:
    """Parse a CLI viewport spec: a preset name, ``WxH`` or ``WxH@scale``."""
    match = _SIZE_RE.match(spec.strip().lower())
    if match:
        width, height, scale = match.groups()
        return ViewportConfig(
            width=int(width), height=int(height),
            device_scale_factor=float(scale) if scale else 1.0,
        )
    return viewport_preset(spec)


class VrtThreshold(BaseModel):
    # Maximum aggregate diff percentage that still passes (inclusive)
    percentage: float = Field(0.1, ge=0.0, le=100.0)
    # Optional cap on the absolute number of differing pixels
    pixels: Optional[int] = Field(None, ge=0)


class CaptureConfig(BaseModel):
    full_page: bool = False
    wait_for_network: bool = True
    settle_time_ms: int = Field(100, ge=0)
    wait_selector: str = ".musea-variant"
    wait_selector_timeout_ms: int = Field(10000, gt=0)
    hide_elements: list[str] = Field(default_factory=list)
    mask_elements: list[str] = Field(default_factory=list)


class BrowserConfig(BaseModel):
    name: str = "chromium"
    headless: bool = True
    slow_mo_ms: Optional[int] = None
    timeout_ms: int = Field(30000, gt=0)

    @field_validator("name")
    @classmethod
    def check_browser_name(cls, v: str) -> str:
        v = v.lower()
        if v not in ("chromium", "firefox", "webkit"):
            raise ValueError(f"Unsupported browser '{v}'")
        return v


class CiConfig(BaseModel):
    fail_on_diff: bool = True
    # Capture errors are infrastructure flakes by default, not regressions
    fail_on_error: bool = False
    # Add a JSON report to --ci runs
    json_report: bool = True


class VrtConfig(BaseModel):
    # Project layout
    art_root: str = "."
    base_url: str = "http://localhost:5173"
    snapshot_dir: str = ".vize/snapshots"

    # Comparison
    threshold: VrtThreshold = Field(default_factory=VrtThreshold)
    viewports: list[ViewportConfig] = Field(
        default_factory=lambda: [
            ViewportConfig(width=1280, height=720, name="desktop"),
            ViewportConfig(width=375, height=667, name="mobile"),
        ]
    )

    # Browser and capture
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    capture: CaptureConfig = Field(default_factory=CaptureConfig)
    max_parallel_captures: int = Field(1, ge=1)

    # CI
    ci: CiConfig = Field(default_factory=CiConfig)

    # Reporting
    report_formats: list[str] = Field(default_factory=lambda: ["html"])
    report_output_dir: str = ".vize"

    @field_validator("viewports")
    @classmethod
    def check_unique_labels(cls, v: list[ViewportConfig]) -> list[ViewportConfig]:
        labels = [vp.label for vp in v]
        duplicates = sorted({label for label in labels if labels.count(label) > 1})
        if duplicates:
            raise ValueError(f"Duplicate viewport labels: {', '.join(duplicates)}")
        return v

    @classmethod
    def load(cls, path: str | Path) -> "VrtConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)
