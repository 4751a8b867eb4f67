"""Configurable image preprocessing ahead of local OCR.

Runs grayscale conversion, intensity normalisation, CLAHE contrast
enhancement, sharpening and binarisation, measuring sharpness and
contrast before and after.
"""

from dataclasses import dataclass

import cv2
import numpy as np

from company_extractor.utils.config import PreprocessingConfig
from company_extractor.utils.logger import get_logger

from .filters import apply_clahe, binarize_otsu, normalize_intensity, sharpen, to_gray

logger = get_logger(__name__)


@dataclass
class QualityMetrics:
    """Before/after image quality measurements."""

    sharpness_before: float
    sharpness_after: float
    contrast_before: float
    contrast_after: float


def calculate_sharpness(image: np.ndarray) -> float:
    """Image sharpness as the variance of the Laplacian."""
    return float(cv2.Laplacian(to_gray(image), cv2.CV_64F).var())


def calculate_contrast(image: np.ndarray) -> float:
    """Image contrast as the standard deviation of pixel intensities."""
    return float(to_gray(image).std())


class PreprocessingPipeline:
    """Prepare a page image for Tesseract.

    Args:
        config: Preprocessing configuration controlling which steps to apply.
    """

    def __init__(self, config: PreprocessingConfig | None = None) -> None:
        self.config = config or PreprocessingConfig()

    def process(self, image: np.ndarray) -> tuple[np.ndarray, QualityMetrics]:
        """Run the enabled steps on an image.

        Args:
            image: Input page image (BGR, BGRA or grayscale).

        Returns:
            Tuple of (processed grayscale image, quality metrics).
        """
        metrics = QualityMetrics(
            sharpness_before=calculate_sharpness(image),
            contrast_before=calculate_contrast(image),
            sharpness_after=0.0,
            contrast_after=0.0,
        )

        result = to_gray(image)

        if self.config.normalize_enabled:
            result = normalize_intensity(result)

        if self.config.contrast_enabled:
            result = apply_clahe(
                result,
                clip_limit=self.config.clahe_clip_limit,
                tile_size=self.config.clahe_tile_size,
            )

        if self.config.sharpen_enabled:
            result = sharpen(result, amount=self.config.sharpen_amount)

        if self.config.binarize_enabled:
            result = binarize_otsu(result)

        metrics.sharpness_after = calculate_sharpness(result)
        metrics.contrast_after = calculate_contrast(result)

        logger.debug(
            "Preprocessing complete: sharpness %.1f->%.1f, contrast %.1f->%.1f",
            metrics.sharpness_before,
            metrics.sharpness_after,
            metrics.contrast_before,
            metrics.contrast_after,
        )
        return result, metrics
