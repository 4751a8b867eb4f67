"""Structured text extraction for PDF, DOCX and legacy DOC files.

Each parser returns the raw text it could recover and raises on hard
errors; judging whether the text is good enough is left to the caller.
"""

import io
import re
import zipfile

import docx
import pdfplumber
from docx.oxml import parse_xml
from docx.oxml.ns import qn

from company_extractor.utils.logger import get_logger

logger = get_logger(__name__)

_DOCX_PARTS = re.compile(r"^word/(header|document|footnotes|endnotes|footer)\d*\.xml$")
# Read order for DOCX parts; headers precede the body.
_DOCX_PART_ORDER = ("header", "document", "footnotes", "endnotes", "footer")
_NON_PRINTABLE = re.compile(r"[^\x20-\x7E]+")


def parse_pdf(data: bytes) -> str:
    """Extract the text layer of a PDF with pdfplumber's default layout."""
    texts: list[str] = []
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        for page in pdf.pages:
            texts.append(page.extract_text() or "")
        logger.debug("pdfplumber read %d pages", len(pdf.pages))
    return "\n\n".join(texts)


def parse_pdf_enhanced(data: bytes) -> str:
    """Re-read the PDF text layer with tighter reconstruction settings.

    Uses smaller character tolerances and content-stream ordering, which
    recovers text from PDFs whose glyphs are positioned individually.
    """
    texts: list[str] = []
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        for page in pdf.pages:
            text = page.extract_text(
                x_tolerance=1.5,
                y_tolerance=2,
                use_text_flow=True,
                keep_blank_chars=False,
            )
            if not text:
                words = page.extract_words(use_text_flow=True)
                text = " ".join(w["text"] for w in words)
            texts.append(text or "")
    return re.sub(r"[ \t]+", " ", "\n".join(texts)).strip()


def parse_docx(data: bytes) -> str:
    """Extract paragraph and table text from a DOCX body with python-docx."""
    document = docx.Document(io.BytesIO(data))
    parts = [p.text for p in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            parts.append(" ".join(cell.text for cell in row.cells))
    return "\n".join(part for part in parts if part.strip())


def _docx_part_key(name: str) -> tuple[int, str]:
    kind = _DOCX_PARTS.match(name).group(1)
    return _DOCX_PART_ORDER.index(kind), name


def parse_docx_runs(data: bytes) -> str:
    """Collect raw ``w:t`` runs from every WordprocessingML part.

    Reaches text python-docx does not expose through paragraphs, such as
    headers, footers, footnotes and text boxes. Headers come first, then
    the body, notes and footers. Runs are grouped into one line per
    innermost ``w:p`` so text-box paragraphs are not repeated.
    """
    chunks: list[str] = []
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        names = [n for n in archive.namelist() if _DOCX_PARTS.match(n)]
        for name in sorted(names, key=_docx_part_key):
            root = parse_xml(archive.read(name))
            paragraphs: dict[object, list[str]] = {}
            for run in root.iter(qn("w:t")):
                paragraph = next(run.iterancestors(qn("w:p")), root)
                paragraphs.setdefault(paragraph, []).append(run.text or "")
            chunks.extend(
                "".join(texts) for texts in paragraphs.values() if "".join(texts)
            )
    return "\n".join(chunks)


def parse_doc(data: bytes) -> str:
    """Best-effort text from a legacy binary DOC: keep printable ASCII only."""
    return _NON_PRINTABLE.sub(" ", data.decode("latin-1"))
