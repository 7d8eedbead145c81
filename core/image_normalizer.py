"""
Image Normalizer Module
Brings two screenshots to a common width and height before diffing.
"""

import io
import logging
from typing import Optional, Tuple

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import DecodeError, InvalidDimensionError
from .raster import RasterImage

logger = logging.getLogger(__name__)

# MPO is the multi-picture JPEG written by phone cameras; only the first frame is used.
SUPPORTED_FORMATS = {'PNG', 'JPEG', 'MPO', 'WEBP'}
DEFAULT_TARGET_WIDTH = 800


class ImageNormalizer:
    def __init__(self, target_width: int = DEFAULT_TARGET_WIDTH):
        if target_width <= 0:
            raise ValueError(f"target_width must be positive, got {target_width}")
        self.target_width = target_width

    def decode(self, data: bytes, label: str = 'image') -> RasterImage:
        """Decode PNG/JPEG/WebP bytes into an RGBA raster."""
        if not data:
            raise DecodeError(f"{label}: empty input")
        try:
            with Image.open(io.BytesIO(data)) as image:
                if image.format not in SUPPORTED_FORMATS:
                    raise DecodeError(f"{label}: unsupported image format {image.format}")
                width, height = image.size
                if width == 0 or height == 0:
                    raise InvalidDimensionError(f"{label}: image has zero size ({width}x{height})")
                image.load()
                rgba = image.convert('RGBA')
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
            raise DecodeError(f"{label}: cannot decode image ({e})") from e
        logger.debug("Decoded %s: %dx%d", label, width, height)
        return RasterImage.from_pil(rgba)

    def resize_to_width(self, raster: RasterImage, target_width: int) -> RasterImage:
        """Scale to target_width keeping the aspect ratio; height is derived."""
        if raster.width == target_width:
            return raster
        target_height = max(1, int(round(raster.height * target_width / raster.width)))
        interpolation = cv2.INTER_AREA if target_width < raster.width else cv2.INTER_CUBIC
        size = (target_width, target_height)
        if np.all(raster.pixels[..., 3] == 255):
            resized = cv2.resize(raster.pixels, size, interpolation=interpolation)
            return RasterImage(np.ascontiguousarray(resized, dtype=np.uint8))
        # Resample premultiplied so colour under transparent pixels does not bleed in.
        pixels = raster.pixels.astype(np.float32)
        pixels[..., :3] *= pixels[..., 3:] / 255.0
        resized = np.clip(cv2.resize(pixels, size, interpolation=interpolation), 0.0, 255.0)
        alpha = resized[..., 3:]
        resized[..., :3] = np.where(alpha > 0, resized[..., :3] * 255.0 / np.maximum(alpha, 1e-6), 0.0)
        return RasterImage(np.ascontiguousarray(np.clip(np.rint(resized), 0, 255), dtype=np.uint8))

    def pad_to_height(self, raster: RasterImage, target_height: int) -> RasterImage:
        """Extend the canvas downward with transparent pixels, content anchored at (0, 0)."""
        if target_height < raster.height:
            raise ValueError(f"cannot pad {raster.height}px image down to {target_height}px")
        if target_height == raster.height:
            return raster
        canvas = np.zeros((target_height, raster.width, 4), dtype=np.uint8)
        canvas[:raster.height, :raster.width] = raster.pixels
        return RasterImage(canvas)

    def normalize(self,
                  image_a: bytes,
                  image_b: bytes,
                  target_width: Optional[int] = None) -> Tuple[RasterImage, RasterImage]:
        """Decode, resize to a common width and pad to a common height."""
        width = self.target_width if target_width is None else target_width
        if width <= 0:
            raise ValueError(f"target_width must be positive, got {width}")
        a = self.resize_to_width(self.decode(image_a, 'image_a'), width)
        b = self.resize_to_width(self.decode(image_b, 'image_b'), width)
        target_height = max(a.height, b.height)
        logger.info("Normalizing to %dx%d (heights %d, %d)", width, target_height, a.height, b.height)
        return self.pad_to_height(a, target_height), self.pad_to_height(b, target_height)
