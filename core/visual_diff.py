"""
Visual Diff Module
Runs a design screenshot and an implementation screenshot through
normalization and the pixel diff engine.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .image_normalizer import DEFAULT_TARGET_WIDTH, ImageNormalizer
from .pixel_diff import DiffOptions, DiffResult, PixelDiffEngine
from .raster import RasterImage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VisualComparison:
    design: RasterImage
    actual: RasterImage
    diff: DiffResult


class VisualDiff:
    def __init__(self,
                 target_width: int = DEFAULT_TARGET_WIDTH,
                 options: Optional[DiffOptions] = None):
        self.normalizer = ImageNormalizer(target_width)
        self.engine = PixelDiffEngine(options)

    def compare(self, design_bytes: bytes, actual_bytes: bytes,
                threshold: Optional[float] = None) -> VisualComparison:
        design, actual = self.normalizer.normalize(design_bytes, actual_bytes)
        result = self.engine.diff(design, actual, threshold)
        logger.info("Similarity %.2f%%", result.similarity * 100)
        return VisualComparison(design=design, actual=actual, diff=result)
