"""
Pixel Diff Module
Perceptual per-pixel comparison of two equally sized RGBA rasters.

Pixels are compared in YIQ space after blending transparency over white,
so anti-aliasing noise below the threshold is tolerated. Pixels that differ
only because of anti-aliased edges are detected and drawn separately.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple

import numpy as np

from .errors import DimensionMismatchError
from .raster import RasterImage

logger = logging.getLogger(__name__)

# Largest possible YIQ delta between two colours.
MAX_YIQ_DELTA = 35215.0

# Neighbour order matters: the first extreme brightness neighbour wins ties.
NEIGHBOUR_OFFSETS = np.array([(dx, dy) for dx in (-1, 0, 1) for dy in (-1, 0, 1) if dx or dy])

Color = Tuple[int, int, int]


@dataclass(frozen=True)
class DiffOptions:
    threshold: float = 0.1
    include_aa: bool = False
    alpha: float = 0.1
    aa_color: Color = (255, 255, 0)
    diff_color: Color = (255, 0, 0)
    diff_color_alt: Optional[Color] = None
    diff_mask: bool = False


@dataclass(frozen=True)
class DiffResult:
    image: RasterImage
    mismatch_count: int
    antialiased_count: int = 0

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def total_pixels(self) -> int:
        return self.width * self.height

    @property
    def similarity(self) -> float:
        return 1.0 - self.mismatch_count / self.total_pixels

    @property
    def mismatch_percentage(self) -> float:
        return round(100.0 * self.mismatch_count / self.total_pixels, 4)

    def to_dict(self):
        return {
            'width': self.width,
            'height': self.height,
            'mismatch_count': self.mismatch_count,
            'antialiased_count': self.antialiased_count,
            'total_pixels': self.total_pixels,
            'similarity': self.similarity,
            'mismatch_percentage': self.mismatch_percentage,
        }


def _rgb2y(rgb: np.ndarray) -> np.ndarray:
    return rgb[..., 0] * 0.29889531 + rgb[..., 1] * 0.58662247 + rgb[..., 2] * 0.11448223


def _rgb2i(rgb: np.ndarray) -> np.ndarray:
    return rgb[..., 0] * 0.59597799 - rgb[..., 1] * 0.27417610 - rgb[..., 2] * 0.32180189


def _rgb2q(rgb: np.ndarray) -> np.ndarray:
    return rgb[..., 0] * 0.21147017 - rgb[..., 1] * 0.52261711 + rgb[..., 2] * 0.31114694


def _blend_over_white(pixels: np.ndarray) -> np.ndarray:
    rgba = pixels.astype(np.float64)
    alpha = rgba[..., 3:4] / 255.0
    return 255.0 + (rgba[..., :3] - 255.0) * alpha


def color_delta(pixels_a: np.ndarray, pixels_b: np.ndarray) -> np.ndarray:
    """
    Signed squared YIQ distance for every pixel pair.

    Negative values mean the pixel in ``pixels_b`` is darker than in
    ``pixels_a``. Identical pixels are exactly 0.
    """
    rgb_a = _blend_over_white(pixels_a)
    rgb_b = _blend_over_white(pixels_b)
    y_a, y_b = _rgb2y(rgb_a), _rgb2y(rgb_b)
    y = y_a - y_b
    i = _rgb2i(rgb_a) - _rgb2i(rgb_b)
    q = _rgb2q(rgb_a) - _rgb2q(rgb_b)
    delta = 0.5053 * y * y + 0.299 * i * i + 0.1957 * q * q
    delta = np.where(y_a > y_b, -delta, delta)
    identical = np.all(pixels_a == pixels_b, axis=-1)
    return np.where(identical, 0.0, delta)


def _pad(array: np.ndarray, fill) -> np.ndarray:
    pad_width = [(1, 1), (1, 1)] + [(0, 0)] * (array.ndim - 2)
    return np.pad(array, pad_width, mode='constant', constant_values=fill)


def _on_edge(ys: np.ndarray, xs: np.ndarray, width: int, height: int) -> np.ndarray:
    return (xs == 0) | (xs == width - 1) | (ys == 0) | (ys == height - 1)


def _has_many_siblings(padded: np.ndarray, ys: np.ndarray, xs: np.ndarray,
                       width: int, height: int) -> np.ndarray:
    """True where more than two neighbours (edges count as one) are the exact same colour."""
    centre = padded[ys + 1, xs + 1]
    zeroes = _on_edge(ys, xs, width, height).astype(np.int64)
    for dx, dy in NEIGHBOUR_OFFSETS:
        neighbour = padded[ys + 1 + dy, xs + 1 + dx]
        zeroes += np.all(neighbour == centre, axis=-1)
    return zeroes > 2


def _antialiased(brightness: np.ndarray, padded: np.ndarray, other_padded: np.ndarray,
                 ys: np.ndarray, xs: np.ndarray, width: int, height: int) -> np.ndarray:
    """
    Anti-aliasing test for the candidate pixels (ys, xs) of one image.

    A pixel is anti-aliased when it has no more than two identical neighbours,
    has both a darker and a brighter neighbour, and the darkest or brightest
    neighbour sits in a flat region of both images.
    """
    if ys.size == 0:
        return np.zeros(0, dtype=bool)
    centre = brightness[ys + 1, xs + 1]
    deltas = np.stack([centre - brightness[ys + 1 + dy, xs + 1 + dx] for dx, dy in NEIGHBOUR_OFFSETS])
    valid = ~np.isnan(deltas)
    zeroes = _on_edge(ys, xs, width, height).astype(np.int64) + np.sum(valid & (deltas == 0), axis=0)
    deltas = np.where(valid, deltas, 0.0)

    columns = np.arange(ys.size)
    min_idx = np.argmin(deltas, axis=0)
    max_idx = np.argmax(deltas, axis=0)
    min_val = deltas[min_idx, columns]
    max_val = deltas[max_idx, columns]
    candidate = (zeroes <= 2) & (min_val < 0) & (max_val > 0)

    min_x = np.clip(xs + NEIGHBOUR_OFFSETS[min_idx, 0], 0, width - 1)
    min_y = np.clip(ys + NEIGHBOUR_OFFSETS[min_idx, 1], 0, height - 1)
    max_x = np.clip(xs + NEIGHBOUR_OFFSETS[max_idx, 0], 0, width - 1)
    max_y = np.clip(ys + NEIGHBOUR_OFFSETS[max_idx, 1], 0, height - 1)
    darkest_flat = (_has_many_siblings(padded, min_y, min_x, width, height) &
                    _has_many_siblings(other_padded, min_y, min_x, width, height))
    brightest_flat = (_has_many_siblings(padded, max_y, max_x, width, height) &
                      _has_many_siblings(other_padded, max_y, max_x, width, height))
    return candidate & (darkest_flat | brightest_flat)


def _gray_background(pixels: np.ndarray, alpha: float) -> np.ndarray:
    rgba = pixels.astype(np.float64)
    y = _rgb2y(rgba[..., :3])
    value = 255.0 + (y - 255.0) * alpha * rgba[..., 3] / 255.0
    value = np.clip(np.rint(value), 0, 255).astype(np.uint8)
    out = np.empty(pixels.shape, dtype=np.uint8)
    out[..., 0] = value
    out[..., 1] = value
    out[..., 2] = value
    out[..., 3] = 255
    return out


class PixelDiffEngine:
    def __init__(self, options: Optional[DiffOptions] = None):
        self.options = options or DiffOptions()

    def _background(self, pixels: np.ndarray, options: DiffOptions) -> np.ndarray:
        if options.diff_mask:
            return np.zeros(pixels.shape, dtype=np.uint8)
        return _gray_background(pixels, options.alpha)

    def diff(self, a: RasterImage, b: RasterImage, threshold: Optional[float] = None) -> DiffResult:
        """Compare two equally sized rasters and render the difference map."""
        if a.size != b.size:
            raise DimensionMismatchError(
                f"cannot diff {a.width}x{a.height} against {b.width}x{b.height}")
        options = self.options if threshold is None else replace(self.options, threshold=threshold)
        if not 0.0 <= options.threshold <= 1.0:
            raise ValueError(f"threshold must be between 0 and 1, got {options.threshold}")

        width, height = a.size
        output = self._background(a.pixels, options)
        if np.array_equal(a.pixels, b.pixels):
            return DiffResult(image=RasterImage(output), mismatch_count=0)

        max_delta = MAX_YIQ_DELTA * options.threshold * options.threshold
        delta = color_delta(a.pixels, b.pixels)
        over = np.abs(delta) > max_delta
        ys, xs = np.nonzero(over)

        if options.include_aa:
            aa = np.zeros(ys.size, dtype=bool)
        else:
            padded_a = _pad(a.pixels.astype(np.int16), -1)
            padded_b = _pad(b.pixels.astype(np.int16), -1)
            bright_a = _pad(_rgb2y(_blend_over_white(a.pixels)), np.nan)
            bright_b = _pad(_rgb2y(_blend_over_white(b.pixels)), np.nan)
            aa = (_antialiased(bright_a, padded_a, padded_b, ys, xs, width, height) |
                  _antialiased(bright_b, padded_b, padded_a, ys, xs, width, height))

        aa_ys, aa_xs = ys[aa], xs[aa]
        diff_ys, diff_xs = ys[~aa], xs[~aa]
        if not options.diff_mask:
            output[aa_ys, aa_xs] = (*options.aa_color, 255)
        output[diff_ys, diff_xs] = (*options.diff_color, 255)
        if options.diff_color_alt is not None:
            darker = delta[diff_ys, diff_xs] < 0
            output[diff_ys[darker], diff_xs[darker]] = (*options.diff_color_alt, 255)

        result = DiffResult(image=RasterImage(output),
                            mismatch_count=int(diff_ys.size),
                            antialiased_count=int(aa_ys.size))
        logger.info("Pixel diff %dx%d: %d mismatched, %d anti-aliased (threshold %.3f)",
                    width, height, result.mismatch_count, result.antialiased_count, options.threshold)
        return result
