"""
Raster Image Module
RGBA pixel buffer shared by the normalizer, the diff engine and the extractor.
"""

import base64
import io
from dataclasses import dataclass

import numpy as np
from PIL import Image


@dataclass(frozen=True, eq=False)
class RasterImage:
    """Row-major RGBA image, 8 bits per channel, shape (height, width, 4)."""
    pixels: np.ndarray

    def __post_init__(self):
        if self.pixels.dtype != np.uint8:
            raise TypeError(f"pixels must be uint8, got {self.pixels.dtype}")
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 4:
            raise ValueError(f"pixels must have shape (height, width, 4), got {self.pixels.shape}")
        if self.pixels.shape[0] == 0 or self.pixels.shape[1] == 0:
            raise ValueError("raster dimensions must be positive")

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self):
        return self.width, self.height

    @property
    def buffer(self) -> bytes:
        """Raw RGBA bytes; length is width * height * 4."""
        return np.ascontiguousarray(self.pixels).tobytes()

    @classmethod
    def blank(cls, width: int, height: int) -> 'RasterImage':
        return cls(np.zeros((height, width, 4), dtype=np.uint8))

    @classmethod
    def from_pil(cls, image: Image.Image) -> 'RasterImage':
        if image.mode != 'RGBA':
            image = image.convert('RGBA')
        return cls(np.array(image, dtype=np.uint8))

    @classmethod
    def from_png_bytes(cls, data: bytes) -> 'RasterImage':
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            return cls.from_pil(image)

    def to_pil(self) -> Image.Image:
        return Image.fromarray(self.pixels)

    def to_png_bytes(self) -> bytes:
        out = io.BytesIO()
        self.to_pil().save(out, format='PNG')
        return out.getvalue()

    def to_data_uri(self) -> str:
        encoded = base64.b64encode(self.to_png_bytes()).decode('ascii')
        return f"data:image/png;base64,{encoded}"

    def __eq__(self, other):
        if not isinstance(other, RasterImage):
            return NotImplemented
        return self.pixels.shape == other.pixels.shape and bool(np.array_equal(self.pixels, other.pixels))
