"""
PDF text extraction.

Reads every page with PyMuPDF, drops running header / footer bands and
isolated page numbers, and returns the page texts joined by newlines along
with basic document metadata.
"""
from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

import fitz  # PyMuPDF

logger = logging.getLogger(__name__)

# Fraction of the page height treated as running header / footer
HEADER_BAND = 0.08
FOOTER_BAND = 0.92

_PAGE_NUMBER = re.compile(r"^\d{1,4}$")


@dataclass
class ParsedDocument:
    """
    Output of the DocumentParser.

    Attributes:
        full_text: Text of all pages joined by newlines.
        metadata:  page_count, word_count, title, author, subject, creator,
                   creation_date, file_type.
    """

    full_text: str
    metadata: Dict[str, Any] = field(default_factory=dict)


class DocumentParser:
    """Extracts plain text from PDF files."""

    async def parse_document(self, file_path: str, file_type: str = ".pdf") -> ParsedDocument:
        """
        Parse a document file and return its text and metadata.

        Raises:
            ValueError:   Unsupported file type.
            RuntimeError: Password-protected or unreadable file.
        """
        if file_type.lower().lstrip(".") != "pdf":
            raise ValueError(f"Unsupported file type: {file_type!r}")
        return await asyncio.to_thread(self._parse_pdf, file_path)

    def _parse_pdf(self, file_path: str) -> ParsedDocument:
        try:
            doc = fitz.open(file_path)
        except Exception as exc:
            raise RuntimeError(f"Cannot open PDF file: {exc}") from exc

        try:
            if doc.needs_pass:
                raise RuntimeError(
                    "PDF is password-protected. Please provide an unlocked copy."
                )

            raw_meta = doc.metadata or {}
            page_texts = [_page_text(page) for page in doc]
            page_count = doc.page_count
        finally:
            doc.close()

        full_text = "\n".join(text for text in page_texts if text).strip()
        word_count = len(full_text.split())
        logger.info(
            "Extracted %d words from %d pages of %s", word_count, page_count, file_path
        )

        return ParsedDocument(
            full_text=full_text,
            metadata={
                "page_count": page_count,
                "word_count": word_count,
                "title": raw_meta.get("title", ""),
                "author": raw_meta.get("author", ""),
                "subject": raw_meta.get("subject", ""),
                "creator": raw_meta.get("creator", ""),
                "creation_date": raw_meta.get("creationDate", ""),
                "file_type": "pdf",
            },
        )


def _page_text(page: "fitz.Page") -> str:
    """Body text of one page in reading order."""
    height = page.rect.height
    header_cutoff = height * HEADER_BAND
    footer_cutoff = height * FOOTER_BAND

    lines: List[Tuple[float, float, str]] = []
    for block in page.get_text("dict")["blocks"]:
        if block.get("type") != 0:
            continue
        x0, y0 = block.get("bbox", (0, 0, 0, 0))[:2]
        if y0 < header_cutoff or y0 > footer_cutoff:
            continue

        for line in block.get("lines", []):
            text = " ".join(
                span.get("text", "") for span in line.get("spans", []) if span.get("text", "").strip()
            ).strip()
            if not text or _PAGE_NUMBER.match(text):
                continue
            line_y = line.get("bbox", (x0, y0))[1]
            lines.append((line_y, x0, text))

    # top-to-bottom, then left column before right
    lines.sort(key=lambda item: (item[0], item[1]))
    return "\n".join(text for _y, _x, text in lines)
