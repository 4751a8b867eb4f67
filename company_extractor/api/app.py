"""FastAPI application for the company name extractor.

Provides endpoints to extract ranked legal company names from uploaded
documents, inspect the recovered text, push a chosen name to HubSpot,
and check service health.
"""

from contextlib import asynccontextmanager
from functools import lru_cache
from pathlib import PurePath
from typing import Annotated

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from company_extractor import __version__
from company_extractor.crm.hubspot import HubSpotClient
from company_extractor.errors import (
    CRMUpdateFailed,
    ExtractionExhausted,
    NoCandidateNamesFound,
    UnsupportedMediaType,
)
from company_extractor.extraction.patterns import PatternTier
from company_extractor.orchestrator import (
    CompanyNameOrchestrator,
    ExtractionFailure,
    ExtractionResult,
    attempt_to_dict,
    quality_to_dict,
)
from company_extractor.parsing.types import EXTENSION_MEDIA_TYPES
from company_extractor.utils.config import Capabilities, load_config
from company_extractor.utils.logger import get_logger

from .schemas import (
    CandidateResponse,
    CapabilitiesResponse,
    DebugTextResponse,
    ExtractionFailureResponse,
    ExtractNamesResponse,
    HealthResponse,
    UpdateCompanyRequest,
    UpdateCompanyResponse,
    UploadDocumentResponse,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: close shared HTTP clients on shutdown."""
    yield
    close_components()


app = FastAPI(
    title="Company Name Extractor API",
    description="Extract legal company names from documents and update HubSpot",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_FAILURE_STATUS = {
    ExtractionExhausted.code: 422,
    NoCandidateNamesFound.code: 400,
}


@lru_cache(maxsize=1)
def _get_components() -> tuple[CompanyNameOrchestrator, HubSpotClient]:
    """Initialize shared processing components once per process.

    Returns:
        Tuple of (orchestrator, hubspot_client).
    """
    config = load_config()
    capabilities = Capabilities.detect(config)
    return CompanyNameOrchestrator(config, capabilities), HubSpotClient(config.crm)


def close_components() -> None:
    """Close the shared components, if built, and forget them."""
    if _get_components.cache_info().currsize:
        orchestrator, crm = _get_components()
        orchestrator.close()
        crm.close()
        logger.info("Closed shared HTTP clients")
    _get_components.cache_clear()


def _media_type(file: UploadFile) -> str:
    """Use the declared content type, or the extension when none is usable."""
    content_type = (file.content_type or "").split(";", 1)[0].strip()
    if content_type and content_type != "application/octet-stream":
        return content_type
    suffix = PurePath(file.filename or "").suffix.lower()
    return EXTENSION_MEDIA_TYPES.get(suffix, content_type)


async def _process_upload(
    orchestrator: CompanyNameOrchestrator, file: UploadFile
) -> ExtractionResult:
    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="No file uploaded")
    try:
        return await run_in_threadpool(
            orchestrator.process,
            content,
            _media_type(file),
            file.filename or "document",
        )
    except UnsupportedMediaType as exc:
        raise HTTPException(status_code=415, detail=exc.message) from exc


def _failure_response(failure: ExtractionFailure) -> JSONResponse:
    body = ExtractionFailureResponse(**failure.to_dict())
    return JSONResponse(
        status_code=_FAILURE_STATUS.get(failure.error_code, 400),
        content=body.model_dump(),
    )


async def _push_to_crm(crm: HubSpotClient, company_id: str, name: str) -> None:
    if not crm.configured:
        raise HTTPException(status_code=503, detail="HubSpot token not configured")
    try:
        await run_in_threadpool(crm.update_company_name, company_id, name)
    except CRMUpdateFailed as exc:
        raise HTTPException(
            status_code=exc.status_code or 502, detail=exc.message
        ) from exc


@app.get("/api/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return service health and available OCR providers."""
    orchestrator, crm = _get_components()
    capabilities = orchestrator.capabilities
    return HealthResponse(
        status="healthy",
        version=__version__,
        capabilities=CapabilitiesResponse(
            ocr_space=capabilities.ocr_space,
            vision=capabilities.vision,
            tesseract=capabilities.tesseract,
        ),
        crm_configured=crm.configured,
    )


@app.post(
    "/api/extract-names",
    response_model=ExtractNamesResponse,
    responses={
        400: {"model": ExtractionFailureResponse},
        422: {"model": ExtractionFailureResponse},
    },
)
async def extract_names(
    document: Annotated[UploadFile, File(...)],
) -> ExtractNamesResponse | JSONResponse:
    """Extract ranked legal company name options from an uploaded document.

    Args:
        document: Uploaded PDF, DOCX, DOC, PNG or JPEG file.

    Returns:
        Ranked options, or a structured failure with the recovered text
        excerpt, the attempts made and remediation hints.
    """
    orchestrator, _ = _get_components()
    result = await _process_upload(orchestrator, document)
    if isinstance(result, ExtractionFailure):
        return _failure_response(result)
    return ExtractNamesResponse(**result.to_dict())


@app.post("/api/debug-text", response_model=DebugTextResponse)
async def debug_text(
    document: Annotated[UploadFile, File(...)],
) -> DebugTextResponse:
    """Show the recovered text and what each pattern tier extracts from it."""
    orchestrator, _ = _get_components()
    content = await document.read()
    filename = document.filename or "document"
    try:
        extraction = await run_in_threadpool(
            orchestrator.text_extractor.extract, content, _media_type(document)
        )
    except UnsupportedMediaType as exc:
        raise HTTPException(status_code=415, detail=exc.message) from exc
    except ExtractionExhausted as exc:
        return DebugTextResponse(
            filename=filename,
            success=False,
            text=exc.text,
            text_length=len(exc.text),
            attempts=[attempt_to_dict(a) for a in exc.attempts],
            error=exc.message,
        )

    extractor = orchestrator.name_extractor
    enhanced = extractor.extract(
        extraction.text, PatternTier.ENHANCED, extraction.ocr_sourced
    )
    standard = extractor.extract(
        extraction.text, PatternTier.STANDARD, extraction.ocr_sourced
    )
    return DebugTextResponse(
        filename=filename,
        success=True,
        extraction_method=extraction.strategy,
        text=extraction.text,
        text_length=len(extraction.text),
        text_quality=quality_to_dict(extraction.quality),
        attempts=[attempt_to_dict(a) for a in extraction.attempts],
        enhanced_candidates=[CandidateResponse(**c.to_dict()) for c in enhanced],
        standard_candidates=[CandidateResponse(**c.to_dict()) for c in standard],
    )


@app.post("/api/update-company", response_model=UpdateCompanyResponse)
async def update_company(request: UpdateCompanyRequest) -> UpdateCompanyResponse:
    """Write a selected company name to the HubSpot company record."""
    if not request.companyId or not request.companyName:
        raise HTTPException(
            status_code=400, detail="Company ID and company name are required"
        )
    _, crm = _get_components()
    await _push_to_crm(crm, request.companyId, request.companyName)
    return UpdateCompanyResponse(
        success=True,
        company_id=request.companyId,
        company_name=request.companyName,
        message=f'Company name updated to "{request.companyName}"',
    )


@app.post(
    "/api/upload-document",
    response_model=UploadDocumentResponse,
    responses={
        400: {"model": ExtractionFailureResponse},
        422: {"model": ExtractionFailureResponse},
    },
)
async def upload_document(
    document: Annotated[UploadFile, File(...)],
    companyId: Annotated[str, Form(...)],
) -> UploadDocumentResponse | JSONResponse:
    """Extract a document and apply its best candidate to the company record."""
    orchestrator, crm = _get_components()
    result = await _process_upload(orchestrator, document)
    if isinstance(result, ExtractionFailure):
        return _failure_response(result)

    best = result.best
    await _push_to_crm(crm, companyId, best.name)
    logger.info("Applied %s to company %s", best.name, companyId)
    return UploadDocumentResponse(
        success=True,
        company_id=companyId,
        extracted_name=best.name,
        confidence=best.confidence,
        extraction_method=result.strategy,
        options=[CandidateResponse(**c.to_dict()) for c in result.candidates],
        message=f'Company name updated to "{best.name}"',
    )
