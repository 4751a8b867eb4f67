"""Tests for the OCR.space, Google Vision and Tesseract providers."""

import json
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest

from company_extractor.errors import OCRProfileFailed, OCRServiceUnavailable
from company_extractor.ocr.providers import (
    OCRProfile,
    OCRRunContext,
    OCRSpaceProvider,
    TesseractProvider,
    VisionProvider,
)
from company_extractor.ocr.tesseract_engine import OCRPageText

TABLE_PROFILE = OCRProfile(
    "engine1_table",
    {"engine": 1, "scale": True, "is_table": True, "detect_orientation": True},
)


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def _context(tmp_path: Path, media_type: str = "application/pdf") -> OCRRunContext:
    pdf_handler = MagicMock()
    page = tmp_path / "page-1.png"
    page.write_bytes(b"png-bytes")
    pdf_handler.to_image_files.return_value = [page]
    return OCRRunContext(
        data=b"%PDF-1.4 scan",
        media_type=media_type,
        workdir=tmp_path,
        pdf_handler=pdf_handler,
    )


class TestOCRRunContext:
    """Tests for lazy, once-only rasterization."""

    def test_page_images_cached(self, tmp_path: Path) -> None:
        context = _context(tmp_path)
        first = context.page_images()
        second = context.page_images()
        assert first == second
        context.pdf_handler.to_image_files.assert_called_once()

    def test_rasterization_failure_is_service_unavailable(self, tmp_path: Path) -> None:
        context = _context(tmp_path)
        context.pdf_handler.to_image_files.side_effect = RuntimeError("no poppler")
        with pytest.raises(OCRServiceUnavailable):
            context.page_images()


class TestOCRSpaceProvider:
    """Tests for the OCR.space client."""

    def test_returns_page_texts(self, tmp_path: Path) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "ParsedResults": [
                        {"ParsedText": "Page one"},
                        {"ParsedText": "Page two"},
                    ],
                    "IsErroredOnProcessing": False,
                },
            )

        provider = OCRSpaceProvider("secret", client=_client(handler))
        pages = provider.recognize(_context(tmp_path), TABLE_PROFILE)

        assert pages == ["Page one", "Page two"]
        body = seen[0].read()
        assert b'name="apikey"\r\n\r\nsecret' in body
        assert b'name="OCREngine"\r\n\r\n1' in body
        assert b'name="isTable"\r\n\r\ntrue' in body
        assert b'name="filetype"\r\n\r\nPDF' in body

    def test_processing_error(self, tmp_path: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"IsErroredOnProcessing": True, "ErrorMessage": ["E101: Timed out"]},
            )

        provider = OCRSpaceProvider("secret", client=_client(handler))
        with pytest.raises(OCRProfileFailed) as exc_info:
            provider.recognize(_context(tmp_path), TABLE_PROFILE)
        assert exc_info.value.reason == "E101: Timed out"
        assert exc_info.value.profile == "engine1_table"

    def test_empty_result(self, tmp_path: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"ParsedResults": [{"ParsedText": "  "}]})

        provider = OCRSpaceProvider("secret", client=_client(handler))
        with pytest.raises(OCRProfileFailed, match="empty result"):
            provider.recognize(_context(tmp_path), TABLE_PROFILE)

    def test_non_object_json_fails_profile(self, tmp_path: Path) -> None:
        provider = OCRSpaceProvider(
            "secret",
            client=_client(
                lambda request: httpx.Response(200, json="Rate limit exceeded")
            ),
        )
        with pytest.raises(OCRProfileFailed, match="unexpected response"):
            provider.recognize(_context(tmp_path), TABLE_PROFILE)

    def test_server_error_fails_profile(self, tmp_path: Path) -> None:
        provider = OCRSpaceProvider(
            "secret", client=_client(lambda request: httpx.Response(500, text="oops"))
        )
        with pytest.raises(OCRProfileFailed, match="HTTP 500"):
            provider.recognize(_context(tmp_path), TABLE_PROFILE)

    def test_bad_key_is_service_unavailable(self, tmp_path: Path) -> None:
        provider = OCRSpaceProvider(
            "wrong", client=_client(lambda request: httpx.Response(403))
        )
        with pytest.raises(OCRServiceUnavailable):
            provider.recognize(_context(tmp_path), TABLE_PROFILE)

    def test_unreachable_is_service_unavailable(self, tmp_path: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        provider = OCRSpaceProvider("secret", client=_client(handler))
        with pytest.raises(OCRServiceUnavailable, match="unreachable"):
            provider.recognize(_context(tmp_path), TABLE_PROFILE)

    def test_timeout_fails_profile(self, tmp_path: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        provider = OCRSpaceProvider("secret", client=_client(handler))
        with pytest.raises(OCRProfileFailed, match="timed out"):
            provider.recognize(_context(tmp_path), TABLE_PROFILE)


class TestVisionProvider:
    """Tests for the Google Vision client."""

    def test_image_request(self, tmp_path: Path) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200, json={"responses": [{"fullTextAnnotation": {"text": "Acme LLC"}}]}
            )

        provider = VisionProvider("vkey", client=_client(handler))
        pages = provider.recognize(
            _context(tmp_path, "image/png"), OCRProfile("document_text")
        )

        assert pages == ["Acme LLC"]
        assert seen[0].url.params["key"] == "vkey"
        body = json.loads(seen[0].read())
        assert body["requests"][0]["features"] == [{"type": "DOCUMENT_TEXT_DETECTION"}]

    def test_pdf_is_rasterized(self, tmp_path: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"responses": [{"textAnnotations": [{"description": "Page text"}]}]},
            )

        context = _context(tmp_path)
        provider = VisionProvider("vkey", client=_client(handler))
        assert provider.recognize(context, OCRProfile("document_text")) == ["Page text"]
        context.pdf_handler.to_image_files.assert_called_once()

    def test_error_response(self, tmp_path: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json={"responses": [{"error": {"message": "Bad image data"}}]}
            )

        provider = VisionProvider("vkey", client=_client(handler))
        with pytest.raises(OCRProfileFailed, match="Bad image data"):
            provider.recognize(
                _context(tmp_path, "image/png"), OCRProfile("document_text")
            )


    def test_non_object_json_fails_profile(self, tmp_path: Path) -> None:
        provider = VisionProvider(
            "vkey", client=_client(lambda request: httpx.Response(200, json=[]))
        )
        with pytest.raises(OCRProfileFailed, match="unexpected response"):
            provider.recognize(
                _context(tmp_path, "image/png"), OCRProfile("document_text")
            )

class TestTesseractProvider:
    """Tests for the local Tesseract provider."""

    def test_runs_each_page_with_profile_psm(self, tmp_path: Path) -> None:
        engine = MagicMock()
        engine.recognize_file.return_value = OCRPageText("Acme LLC", 0.9, "eng")

        pages = TesseractProvider(engine).recognize(
            _context(tmp_path), OCRProfile("psm6", {"psm": 6})
        )

        assert pages == ["Acme LLC"]
        _, kwargs = engine.recognize_file.call_args
        assert kwargs["psm"] == 6

    def test_engine_failure_fails_profile(self, tmp_path: Path) -> None:
        engine = MagicMock()
        engine.recognize_file.side_effect = RuntimeError("Tesseract failed")
        with pytest.raises(OCRProfileFailed):
            TesseractProvider(engine).recognize(
                _context(tmp_path), OCRProfile("psm3", {"psm": 3})
            )

    def test_blank_pages_fail_profile(self, tmp_path: Path) -> None:
        engine = MagicMock()
        engine.recognize_file.return_value = OCRPageText("  \n", 0.0, "eng")
        with pytest.raises(OCRProfileFailed, match="empty result"):
            TesseractProvider(engine).recognize(
                _context(tmp_path), OCRProfile("psm3", {"psm": 3})
            )
