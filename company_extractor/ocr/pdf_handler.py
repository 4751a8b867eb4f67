"""Rasterize documents into page image files for OCR.

Pages are written into a caller-owned scratch directory so their lifetime
is tied to one OCR run.
"""

from pathlib import Path

from pdf2image import convert_from_bytes

from company_extractor.utils.logger import get_logger

logger = get_logger(__name__)

_IMAGE_SUFFIXES = {"image/png": ".png", "image/jpeg": ".jpg", "image/jpg": ".jpg"}


class PDFHandler:
    """Converts PDFs (and stores images) as page files for OCR engines.

    Args:
        dpi: Resolution for PDF rendering. Higher values produce
            better OCR results but use more memory.
    """

    def __init__(self, dpi: int = 300) -> None:
        self.dpi = dpi

    def pdf_to_image_files(self, pdf_bytes: bytes, output_dir: Path) -> list[Path]:
        """Render every PDF page to a PNG file.

        Args:
            pdf_bytes: Raw PDF bytes.
            output_dir: Existing directory that receives the page files.

        Returns:
            Page image paths in page order.

        Raises:
            RuntimeError: If PDF conversion fails.
        """
        try:
            paths = convert_from_bytes(
                pdf_bytes,
                dpi=self.dpi,
                output_folder=str(output_dir),
                fmt="png",
                paths_only=True,
            )
        except Exception as exc:
            raise RuntimeError(f"PDF conversion failed: {exc}") from exc

        pages = sorted(Path(p) for p in paths)
        logger.info("Rasterized PDF to %d pages at %d DPI", len(pages), self.dpi)
        return pages

    def to_image_files(
        self, data: bytes, media_type: str, output_dir: Path
    ) -> list[Path]:
        """Produce page image files for any OCR-able document.

        PDFs are rasterized; images are written as-is.
        """
        if media_type == "application/pdf":
            return self.pdf_to_image_files(data, output_dir)

        path = output_dir / f"page-1{_IMAGE_SUFFIXES.get(media_type, '.png')}"
        path.write_bytes(data)
        return [path]
