"""Pydantic request/response schemas for the FastAPI endpoints."""

from pydantic import BaseModel, Field


class CandidateResponse(BaseModel):
    """A ranked company name option."""

    name: str
    confidence: int
    pattern_name: str
    original_match: str = ""
    context: str = ""


class TextQualityResponse(BaseModel):
    """Quality metrics of the recovered text."""

    readable_ratio: int
    valid_word_count: int
    garbled_ratio: float
    total_words: int = 0
    avg_word_length: float = 0.0


class AttemptResponse(BaseModel):
    """One text extraction strategy tried on the document."""

    strategy: str
    succeeded: bool
    text_length: int = 0
    readable_ratio: int | None = None
    error: str | None = None


class ExtractNamesResponse(BaseModel):
    """Ranked candidates for an uploaded document."""

    success: bool = True
    filename: str
    options: list[CandidateResponse]
    document_length: int
    extraction_method: str
    pattern_tier: str
    text_quality: TextQualityResponse | None = None
    attempts: list[AttemptResponse] = Field(default_factory=list)


class ExtractionFailureResponse(BaseModel):
    """Structured failure when no text or no names were recovered."""

    success: bool = False
    filename: str
    error: str
    message: str
    extracted_text: str = ""
    text_quality: TextQualityResponse | None = None
    attempts: list[AttemptResponse] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


class DebugTextResponse(BaseModel):
    """Recovered text and what each pattern tier makes of it."""

    filename: str
    success: bool
    extraction_method: str | None = None
    text: str = ""
    text_length: int = 0
    text_quality: TextQualityResponse | None = None
    attempts: list[AttemptResponse] = Field(default_factory=list)
    enhanced_candidates: list[CandidateResponse] = Field(default_factory=list)
    standard_candidates: list[CandidateResponse] = Field(default_factory=list)
    error: str | None = None


class UpdateCompanyRequest(BaseModel):
    """Request body for pushing a name to the CRM."""

    companyId: str
    companyName: str


class UpdateCompanyResponse(BaseModel):
    """Outcome of a CRM update."""

    success: bool
    company_id: str
    company_name: str
    message: str


class UploadDocumentResponse(BaseModel):
    """Outcome of the legacy extract-and-apply flow."""

    success: bool
    company_id: str
    extracted_name: str
    confidence: int
    extraction_method: str
    options: list[CandidateResponse]
    message: str


class CapabilitiesResponse(BaseModel):
    """OCR providers available to the service."""

    ocr_space: bool
    vision: bool
    tesseract: bool


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    capabilities: CapabilitiesResponse
    crm_configured: bool
