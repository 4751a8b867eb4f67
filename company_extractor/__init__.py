"""Company Name Extractor.

Recovers the legal company name from uploaded documents (PDF, DOCX, DOC
and images) through quality-gated text extraction with OCR fallbacks and
a ranked cascade of entity name heuristics, then writes it to HubSpot.
"""

__version__ = "3.2.0"
