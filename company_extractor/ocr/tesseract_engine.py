"""Local Tesseract OCR engine, the last-resort text source.

Reads a page image from disk, runs the preprocessing pipeline on it and
recognises text with a configurable page segmentation mode.
"""

from dataclasses import dataclass
from pathlib import Path

import cv2
import pytesseract
from PIL import Image

from company_extractor.preprocessing.pipeline import PreprocessingPipeline
from company_extractor.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class OCRPageText:
    """Recognised text for one page image."""

    text: str
    confidence: float
    language: str


class TesseractEngine:
    """Wrapper around Tesseract for page image files.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        default_lang: Default OCR language code.
        preprocessing: Pipeline applied to each image before recognition.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "eng",
        preprocessing: PreprocessingPipeline | None = None,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.default_lang = default_lang
        self.preprocessing = preprocessing or PreprocessingPipeline()

    def recognize_file(
        self,
        image_path: Path,
        lang: str | None = None,
        psm: int = 3,
    ) -> OCRPageText:
        """Recognise text in an image file.

        Args:
            image_path: Path to a page image.
            lang: OCR language code. Defaults to the engine default.
            psm: Tesseract page segmentation mode.

        Returns:
            Page text with the mean word confidence (0.0-1.0).

        Raises:
            RuntimeError: If the image cannot be read or Tesseract fails.
        """
        lang = lang or self.default_lang
        image = cv2.imread(str(image_path), cv2.IMREAD_UNCHANGED)
        if image is None:
            raise RuntimeError(f"Could not read image: {image_path}")

        processed, _ = self.preprocessing.process(image)
        pil_image = Image.fromarray(processed)
        config = f"--psm {psm}"

        try:
            text = pytesseract.image_to_string(pil_image, lang=lang, config=config)
            data = pytesseract.image_to_data(
                pil_image,
                lang=lang,
                config=config,
                output_type=pytesseract.Output.DICT,
            )
        except pytesseract.TesseractError as exc:
            raise RuntimeError(f"Tesseract failed on {image_path.name}: {exc}") from exc

        confidences = [
            float(conf)
            for conf, word in zip(data["conf"], data["text"])
            if float(conf) > 0 and word.strip()
        ]
        avg_conf = sum(confidences) / len(confidences) / 100.0 if confidences else 0.0

        logger.info(
            "Tesseract read %d words from %s (psm=%d, confidence %.2f)",
            len(confidences),
            image_path.name,
            psm,
            avg_conf,
        )
        return OCRPageText(text=text, confidence=avg_conf, language=lang)
