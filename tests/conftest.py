"""Pytest configuration and shared fixtures."""

import hashlib
import io
from pathlib import Path
from urllib.parse import parse_qs, urlparse

import pytest
from PIL import Image

from component_vrt.capture.controller import CaptureController
from component_vrt.imaging.codec import PixelBuffer
from component_vrt.models.config import ViewportConfig, VrtConfig, VrtThreshold
from component_vrt.models.variant import VariantRef
from component_vrt.store.snapshot_store import SnapshotStore

WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)
RED = (255, 0, 0, 255)


# ============================================================================
# Image helpers
# ============================================================================


def make_image(width: int, height: int, color=WHITE, pixels: dict | None = None) -> Image.Image:
    """Solid RGBA image with optional per-pixel overrides {(x, y): rgba}."""
    image = Image.new("RGBA", (width, height), color)
    for (x, y), value in (pixels or {}).items():
        image.putpixel((x, y), value)
    return image


def make_png(width: int, height: int, color=WHITE, pixels: dict | None = None) -> bytes:
    out = io.BytesIO()
    make_image(width, height, color, pixels).save(out, format="PNG")
    return out.getvalue()


def make_buffer(width: int, height: int, color=WHITE, pixels: dict | None = None) -> PixelBuffer:
    return PixelBuffer.from_image(make_image(width, height, color, pixels))


def file_hash(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()


# ============================================================================
# Fake rendering collaborator
# ============================================================================


class FakeRenderer:
    """Returns canned PNG bytes per variant name; an Exception value is raised instead."""

    def __init__(self, default: bytes | None = None, frames: dict | None = None):
        self.default = default if default is not None else make_png(10, 10)
        self.frames = dict(frames or {})
        self.calls: list[tuple[str, ViewportConfig]] = []

    async def render_and_capture(self, url: str, viewport: ViewportConfig) -> bytes:
        self.calls.append((url, viewport))
        variant = parse_qs(urlparse(url).query)["variant"][0]
        frame = self.frames.get(variant, self.default)
        if isinstance(frame, BaseException):
            raise frame
        return frame

    @property
    def captured_variants(self) -> list[str]:
        return [parse_qs(urlparse(url).query)["variant"][0] for url, _ in self.calls]


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def desktop() -> ViewportConfig:
    return ViewportConfig(width=10, height=10, name="desktop")


@pytest.fixture
def mobile() -> ViewportConfig:
    return ViewportConfig(width=5, height=8, name="mobile")


@pytest.fixture
def button_default() -> VariantRef:
    return VariantRef(owner="Btn", name="default", art_path="src/Btn.art.vue", is_default=True)


@pytest.fixture
def button_hover() -> VariantRef:
    return VariantRef(owner="Btn", name="hover", art_path="src/Btn.art.vue")


@pytest.fixture
def store(tmp_path: Path) -> SnapshotStore:
    return SnapshotStore(tmp_path / "snapshots")


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def controller(store: SnapshotStore, renderer: FakeRenderer) -> CaptureController:
    return CaptureController(
        store, renderer, threshold=VrtThreshold(percentage=0.1), base_url="http://gallery.test",
    )


@pytest.fixture
def vrt_config(tmp_path: Path, desktop: ViewportConfig) -> VrtConfig:
    return VrtConfig(
        art_root=str(tmp_path / "art"),
        base_url="http://gallery.test",
        snapshot_dir=str(tmp_path / "snapshots"),
        viewports=[desktop],
        report_output_dir=str(tmp_path / "reports"),
    )
