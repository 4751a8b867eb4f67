"""Raw container text scraping for PDFs that structured parsing cannot read.

Treats the file as an opaque latin-1 buffer and pulls printable text out of
PDF container syntax, falling back to plain printable ASCII runs once PDF
keywords are stripped. Precision is low; the output is only a hint that later
stages must still gate.
"""

import re
from collections.abc import Callable

from company_extractor.utils.logger import get_logger

logger = get_logger(__name__)

MIN_SCRAPED_LENGTH = 20

_FORM_FIELD_VALUE = re.compile(r"/V\s*\(((?:\\.|[^\\)]){1,200})\)")
_LITERAL_STRING = re.compile(r"\(((?:\\.|[^\\)]){2,})\)")
_BRACKETED = re.compile(r"\[([^\]]{2,})\]")
_STREAM = re.compile(r"stream\s*(.*?)\s*endstream", re.DOTALL)
_READABLE_RUN = re.compile(r"[A-Za-z][A-Za-z\s&.\-',]{2,}")
_HAS_LETTER = re.compile(r"[A-Za-z]")
_DISALLOWED = re.compile(r"[^\w\s&.\-',]", re.ASCII)
_PRINTABLE_RUN = re.compile(r"[\x20-\x7E]{6,100}")
_PDF_SYNTAX = re.compile(
    r"%PDF-[\d.]*|%%EOF|<<|>>|\d+\s+\d+\s+R\b|/[^\s/<>\[\]()]+"
    r"|\b(?:obj|endobj|stream|endstream|xref|trailer|startxref)\b"
)
_OCTAL_ESCAPE = re.compile(r"\\([0-7]{1,3})")
_SIMPLE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "b": " ", "f": " "}


def unescape_literal(value: str) -> str:
    """Decode PDF literal string escapes (``\\(``, ``\\n``, ``\\101``)."""
    value = _OCTAL_ESCAPE.sub(lambda m: chr(int(m.group(1), 8) & 0xFF), value)
    return re.sub(
        r"\\(.)",
        lambda m: _SIMPLE_ESCAPES.get(m.group(1), m.group(1)),
        value,
        flags=re.DOTALL,
    )


def _clean(segments: list[str]) -> str:
    kept = [s for s in segments if len(s) > 1 and _HAS_LETTER.search(s)]
    text = _DISALLOWED.sub(" ", " ".join(kept))
    return re.sub(r"\s+", " ", text).strip()


def _scan_form_fields(buffer: str) -> str:
    return _clean([unescape_literal(v) for v in _FORM_FIELD_VALUE.findall(buffer)])


def _scan_literal_strings(buffer: str) -> str:
    return _clean([unescape_literal(v) for v in _LITERAL_STRING.findall(buffer)])


def _scan_brackets(buffer: str) -> str:
    return _clean(_BRACKETED.findall(buffer))


def _scan_streams(buffer: str) -> str:
    runs: list[str] = []
    for content in _STREAM.findall(buffer):
        runs.extend(r for r in _READABLE_RUN.findall(content) if len(r) > 2)
    return _clean(runs)


def _scan_printable_runs(buffer: str) -> str:
    runs = []
    for run in _PRINTABLE_RUN.findall(buffer):
        run = _PDF_SYNTAX.sub(" ", run).strip()
        if len(run) > 5 and _HAS_LETTER.search(run):
            runs.append(run)
    return _clean(runs)


SCANNERS: list[tuple[str, Callable[[str], str]]] = [
    ("form_fields", _scan_form_fields),
    ("literal_strings", _scan_literal_strings),
    ("brackets", _scan_brackets),
    ("streams", _scan_streams),
    ("printable_runs", _scan_printable_runs),
]


def scrape_container_text(data: bytes) -> str:
    """Scan a raw buffer for printable text inside container syntax.

    Scanners run in order and the first one yielding more than
    ``MIN_SCRAPED_LENGTH`` characters wins.

    Returns:
        Scraped text, or an empty string when nothing usable was found.
    """
    buffer = data.decode("latin-1")
    for name, scanner in SCANNERS:
        text = scanner(buffer)
        if len(text) > MIN_SCRAPED_LENGTH:
            logger.debug("Raw scrape via %s recovered %d chars", name, len(text))
            return text
    return ""
