"""Image filters that make scanned pages easier for Tesseract to read."""

import cv2
import numpy as np

from company_extractor.utils.logger import get_logger

logger = get_logger(__name__)


def to_gray(image: np.ndarray) -> np.ndarray:
    """Convert an image to single-channel grayscale if needed."""
    if image.ndim == 3 and image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    if image.ndim == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    return image


def normalize_intensity(image: np.ndarray) -> np.ndarray:
    """Stretch pixel intensities to the full 0-255 range."""
    return cv2.normalize(image, None, 0, 255, cv2.NORM_MINMAX)


def apply_clahe(
    image: np.ndarray,
    clip_limit: float = 2.0,
    tile_size: int = 8,
) -> np.ndarray:
    """Enhance local contrast with CLAHE on a grayscale image."""
    clahe = cv2.createCLAHE(clipLimit=clip_limit, tileGridSize=(tile_size, tile_size))
    return clahe.apply(to_gray(image))


def sharpen(image: np.ndarray, amount: float = 1.5) -> np.ndarray:
    """Unsharp mask: add back the difference between the image and a blur.

    Args:
        image: Grayscale image.
        amount: Weight of the detail layer; 0 leaves the image unchanged.
    """
    blurred = cv2.GaussianBlur(image, (0, 0), sigmaX=3)
    result = cv2.addWeighted(image, 1.0 + amount, blurred, -amount, 0)
    logger.debug("Applied unsharp mask (amount=%.1f)", amount)
    return result


def binarize_otsu(image: np.ndarray) -> np.ndarray:
    """Binarize with Otsu's automatic threshold."""
    _, binary = cv2.threshold(
        to_gray(image), 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU
    )
    return binary
