"""PNG decoding and encoding for RGBA pixel buffers."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from component_vrt.errors import ComparisonError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PixelBuffer:
    """RGBA8 pixels, row-major, four bytes per pixel."""

    width: int
    height: int
    data: bytes

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Invalid dimensions {self.width}x{self.height}")
        expected = self.width * self.height * 4
        if len(self.data) != expected:
            raise ValueError(
                f"Pixel data is {len(self.data)} bytes, expected {expected} "
                f"for {self.width}x{self.height} RGBA"
            )

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def total_pixels(self) -> int:
        return self.width * self.height

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        idx = (y * self.width + x) * 4
        r, g, b, a = self.data[idx:idx + 4]
        return r, g, b, a

    @classmethod
    def filled(cls, width: int, height: int, rgba: tuple[int, int, int, int]) -> "PixelBuffer":
        return cls(width, height, bytes(rgba) * (width * height))

    @classmethod
    def from_image(cls, image: Image.Image) -> "PixelBuffer":
        rgba = image.convert("RGBA")
        return cls(rgba.width, rgba.height, rgba.tobytes())

    def to_image(self) -> Image.Image:
        return Image.frombytes("RGBA", (self.width, self.height), self.data)


def decode_png(data: bytes) -> PixelBuffer:
    """Decode image bytes into an RGBA buffer. Raises ComparisonError if undecodable."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            return PixelBuffer.from_image(image)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ComparisonError(f"Cannot decode image: {e}") from e


def read_png(path: str | Path) -> PixelBuffer:
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ComparisonError(f"Cannot read image {path}: {e}") from e
    try:
        return decode_png(data)
    except ComparisonError as e:
        raise ComparisonError(f"{path.name}: {e}") from e


def encode_png(buffer: PixelBuffer) -> bytes:
    out = io.BytesIO()
    buffer.to_image().save(out, format="PNG")
    return out.getvalue()


def write_png(buffer: PixelBuffer, path: str | Path) -> Path:
    """Encode and write a buffer, creating parent directories as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(encode_png(buffer))
    logger.debug("Wrote %dx%d PNG to %s", buffer.width, buffer.height, path)
    return path
