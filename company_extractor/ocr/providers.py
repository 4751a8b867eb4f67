"""OCR providers: the remote OCR.space and Google Vision APIs, and Tesseract.

Every provider turns one document into per-page texts for a given profile.
A provider raises ``OCRProfileFailed`` when a single profile produced
nothing usable and ``OCRServiceUnavailable`` when the provider as a whole
cannot serve requests (bad credentials, unreachable host, missing engine).
"""

import base64
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx

from company_extractor.errors import OCRProfileFailed, OCRServiceUnavailable
from company_extractor.utils.logger import get_logger

from .pdf_handler import PDFHandler
from .tesseract_engine import TesseractEngine

logger = get_logger(__name__)

_OCR_SPACE_FILETYPES = {
    "application/pdf": "PDF",
    "image/png": "PNG",
    "image/jpeg": "JPG",
    "image/jpg": "JPG",
}


@dataclass(frozen=True)
class OCRProfile:
    """One concrete parameter set for a provider."""

    name: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass
class OCRRunContext:
    """Per-document state shared by the profiles of one OCR run.

    Page images are rasterized at most once, into ``workdir``, which the
    runner removes when the run ends.
    """

    data: bytes
    media_type: str
    workdir: Path
    pdf_handler: PDFHandler
    _page_images: list[Path] | None = None

    def page_images(self) -> list[Path]:
        if self._page_images is None:
            try:
                self._page_images = self.pdf_handler.to_image_files(
                    self.data, self.media_type, self.workdir
                )
            except RuntimeError as exc:
                raise OCRServiceUnavailable(str(exc)) from exc
        return self._page_images


class OCRProvider(ABC):
    """A source of OCR text."""

    name: str = "ocr"

    @abstractmethod
    def recognize(self, context: OCRRunContext, profile: OCRProfile) -> list[str]:
        """Return recognised text per page for the document in ``context``."""
        ...

    def close(self) -> None:
        """Release any resources held by the provider."""


def _check_status(provider: str, profile: str, response: httpx.Response) -> None:
    if response.status_code in (401, 403):
        raise OCRServiceUnavailable(
            f"{provider} rejected credentials (HTTP {response.status_code})"
        )
    if response.status_code >= 400:
        raise OCRProfileFailed(
            profile, f"HTTP {response.status_code}: {response.text[:200]}"
        )


class OCRSpaceProvider(OCRProvider):
    """Remote OCR through the OCR.space ``parse/image`` endpoint.

    Args:
        api_key: OCR.space API key.
        url: Endpoint URL.
        language: OCR language code sent with every request.
        timeout: Request timeout in seconds.
        client: Optional preconfigured HTTP client.
    """

    name = "ocr_space"

    def __init__(
        self,
        api_key: str,
        url: str = "https://api.ocr.space/parse/image",
        language: str = "eng",
        timeout: float = 45.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.api_key = api_key
        self.url = url
        self.language = language
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def _form_fields(self, media_type: str, profile: OCRProfile) -> dict[str, str]:
        params = profile.params
        return {
            "apikey": self.api_key,
            "language": self.language,
            "OCREngine": str(params.get("engine", 2)),
            "scale": str(params.get("scale", True)).lower(),
            "isTable": str(params.get("is_table", False)).lower(),
            "detectOrientation": str(params.get("detect_orientation", True)).lower(),
            "filetype": _OCR_SPACE_FILETYPES.get(media_type, "PDF"),
        }

    def recognize(self, context: OCRRunContext, profile: OCRProfile) -> list[str]:
        files = {"file": ("document", context.data, context.media_type)}
        try:
            response = self.client.post(
                self.url, data=self._form_fields(context.media_type, profile), files=files
            )
        except httpx.TimeoutException as exc:
            raise OCRProfileFailed(profile.name, f"timed out: {exc}") from exc
        except httpx.TransportError as exc:
            raise OCRServiceUnavailable(f"OCR.space unreachable: {exc}") from exc

        _check_status("OCR.space", profile.name, response)

        try:
            payload = response.json()
        except ValueError as exc:
            raise OCRProfileFailed(profile.name, "response was not JSON") from exc

        if not isinstance(payload, dict):
            raise OCRProfileFailed(
                profile.name, f"unexpected response: {payload!r:.200}"
            )

        if payload.get("IsErroredOnProcessing"):
            message = payload.get("ErrorMessage") or "processing error"
            if isinstance(message, list):
                message = "; ".join(str(m) for m in message)
            raise OCRProfileFailed(profile.name, str(message))

        pages = [
            result.get("ParsedText") or ""
            for result in payload.get("ParsedResults") or []
        ]
        if not any(page.strip() for page in pages):
            raise OCRProfileFailed(profile.name, "empty result")
        return pages


class VisionProvider(OCRProvider):
    """Alternate remote OCR through Google Cloud Vision ``images:annotate``.

    PDFs are rasterized first since the endpoint only accepts images.
    """

    name = "vision"

    def __init__(
        self,
        api_key: str,
        url: str = "https://vision.googleapis.com/v1/images:annotate",
        timeout: float = 45.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.api_key = api_key
        self.url = url
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def _annotate(self, image_bytes: bytes, profile: OCRProfile) -> str:
        body = {
            "requests": [
                {
                    "image": {"content": base64.b64encode(image_bytes).decode("ascii")},
                    "features": [
                        {"type": profile.params.get("feature", "DOCUMENT_TEXT_DETECTION")}
                    ],
                }
            ]
        }
        try:
            response = self.client.post(
                self.url, params={"key": self.api_key}, json=body
            )
        except httpx.TimeoutException as exc:
            raise OCRProfileFailed(profile.name, f"timed out: {exc}") from exc
        except httpx.TransportError as exc:
            raise OCRServiceUnavailable(f"Vision API unreachable: {exc}") from exc

        _check_status("Vision API", profile.name, response)

        try:
            payload = response.json()
        except ValueError as exc:
            raise OCRProfileFailed(profile.name, "response was not JSON") from exc
        if not isinstance(payload, dict):
            raise OCRProfileFailed(
                profile.name, f"unexpected response: {payload!r:.200}"
            )

        result = (payload.get("responses") or [{}])[0]
        if "error" in result:
            raise OCRProfileFailed(
                profile.name, result["error"].get("message", "processing error")
            )
        text = (result.get("fullTextAnnotation") or {}).get("text")
        if not text and result.get("textAnnotations"):
            text = result["textAnnotations"][0].get("description", "")
        return text or ""

    def recognize(self, context: OCRRunContext, profile: OCRProfile) -> list[str]:
        if context.media_type == "application/pdf":
            images = [p.read_bytes() for p in context.page_images()]
        else:
            images = [context.data]

        pages = [self._annotate(image, profile) for image in images]
        if not any(page.strip() for page in pages):
            raise OCRProfileFailed(profile.name, "empty result")
        return pages


class TesseractProvider(OCRProvider):
    """Local OCR with Tesseract on rasterized page images."""

    name = "tesseract"

    def __init__(self, engine: TesseractEngine) -> None:
        self.engine = engine

    def recognize(self, context: OCRRunContext, profile: OCRProfile) -> list[str]:
        psm = int(profile.params.get("psm", 3))
        pages: list[str] = []
        for image_path in context.page_images():
            try:
                pages.append(self.engine.recognize_file(image_path, psm=psm).text)
            except RuntimeError as exc:
                raise OCRProfileFailed(profile.name, str(exc)) from exc
        if not any(page.strip() for page in pages):
            raise OCRProfileFailed(profile.name, "empty result")
        return pages
