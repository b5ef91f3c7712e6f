"""Perceptual comparator — YIQ-weighted per-pixel diff between two RGBA buffers.

Each pixel is composited onto white, converted to YIQ and scored with a
luma-heavy weighted squared distance. A pixel counts as different when its
score exceeds ``COLOR_THRESHOLD * 255**2``. The coefficients are fixed: any
change alters pass/fail outcomes against existing baselines.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from .codec import PixelBuffer, read_png

logger = logging.getLogger(__name__)

# Per-pixel cutoff, independent of the run-level percentage threshold
COLOR_THRESHOLD = 0.1
MAX_DELTA_CUTOFF = COLOR_THRESHOLD * 255 * 255

MISMATCH_COLOR = (255, 0, 0, 255)
DIFF_COLOR = (255, 0, 0, 255)
UNCHANGED_ALPHA = 128

_Y = (0.29889531, 0.58662247, 0.11448223)
_I = (0.59597799, -0.27417610, -0.32180189)
_Q = (0.21147017, -0.52261711, 0.31114694)
_WEIGHTS = (0.5053, 0.299, 0.1957)


@dataclass(frozen=True)
class Comparison:
    diff_image: PixelBuffer
    diff_pixels: int
    total_pixels: int
    diff_percentage: float
    dimension_mismatch: bool = False


def _blend(channel: float, alpha: float) -> float:
    return 255 + (channel - 255) * alpha


def _yiq(r: float, g: float, b: float) -> tuple[float, float, float]:
    y = r * _Y[0] + g * _Y[1] + b * _Y[2]
    i = r * _I[0] + g * _I[1] + b * _I[2]
    q = r * _Q[0] + g * _Q[1] + b * _Q[2]
    return y, i, q


def color_delta(p1: tuple[int, int, int, int], p2: tuple[int, int, int, int]) -> float:
    """Scalar perceptual distance between two RGBA pixels."""
    blended = []
    for r, g, b, a in (p1, p2):
        if a < 255:
            alpha = a / 255
            r, g, b = _blend(r, alpha), _blend(g, alpha), _blend(b, alpha)
        blended.append(_yiq(r, g, b))
    (y1, i1, q1), (y2, i2, q2) = blended
    dy, di, dq = y1 - y2, i1 - i2, q1 - q2
    return dy * dy * _WEIGHTS[0] + di * di * _WEIGHTS[1] + dq * dq * _WEIGHTS[2]


def _as_array(buffer: PixelBuffer) -> np.ndarray:
    return np.frombuffer(buffer.data, dtype=np.uint8).reshape(buffer.height, buffer.width, 4)


def _blended_rgb(pixels: np.ndarray) -> np.ndarray:
    rgb = pixels[..., :3].astype(np.float64)
    alpha = pixels[..., 3:4]
    blended = 255.0 + (rgb - 255.0) * (alpha.astype(np.float64) / 255.0)
    return np.where(alpha < 255, blended, rgb)


def _yiq_planes(rgb: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    y = r * _Y[0] + g * _Y[1] + b * _Y[2]
    i = r * _I[0] + g * _I[1] + b * _I[2]
    q = r * _Q[0] + g * _Q[1] + b * _Q[2]
    return y, i, q


def _mismatch(baseline: PixelBuffer, current: PixelBuffer) -> Comparison:
    width = max(baseline.width, current.width)
    height = max(baseline.height, current.height)
    total = width * height
    logger.debug("Size mismatch: baseline %dx%d vs current %dx%d",
                 baseline.width, baseline.height, current.width, current.height)
    return Comparison(
        diff_image=PixelBuffer.filled(width, height, MISMATCH_COLOR),
        diff_pixels=total,
        total_pixels=total,
        diff_percentage=100.0,
        dimension_mismatch=True,
    )


def compare(baseline: PixelBuffer, current: PixelBuffer) -> Comparison:
    """Compare two buffers and build the diff visualization.

    Differently sized inputs are a total mismatch: 100% different, with a
    solid red diff image as large as the larger input on each axis.
    """
    if baseline.size != current.size:
        return _mismatch(baseline, current)

    total = baseline.total_pixels
    if total == 0:
        return Comparison(diff_image=baseline, diff_pixels=0, total_pixels=0, diff_percentage=0.0)

    rgb1 = _blended_rgb(_as_array(baseline))
    rgb2 = _blended_rgb(_as_array(current))
    y1, i1, q1 = _yiq_planes(rgb1)
    y2, i2, q2 = _yiq_planes(rgb2)
    dy, di, dq = y1 - y2, i1 - i2, q1 - q2
    delta = dy * dy * _WEIGHTS[0] + di * di * _WEIGHTS[1] + dq * dq * _WEIGHTS[2]

    different = delta > MAX_DELTA_CUTOFF
    diff_pixels = int(np.count_nonzero(different))

    gray = np.clip(np.floor(y2 + 0.5), 0, 255).astype(np.uint8)
    diff = np.empty((baseline.height, baseline.width, 4), dtype=np.uint8)
    diff[..., 0] = gray
    diff[..., 1] = gray
    diff[..., 2] = gray
    diff[..., 3] = UNCHANGED_ALPHA
    diff[different] = DIFF_COLOR

    return Comparison(
        diff_image=PixelBuffer(baseline.width, baseline.height, diff.tobytes()),
        diff_pixels=diff_pixels,
        total_pixels=total,
        diff_percentage=100.0 * diff_pixels / total,
    )


def compare_files(baseline_path: str | Path, current_path: str | Path) -> Comparison:
    """Decode two PNG files and compare them. Raises ComparisonError on bad input."""
    return compare(read_png(baseline_path), read_png(current_path))
