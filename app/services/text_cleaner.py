"""
Boilerplate removal for extracted document text.

Strips reference sections, copyright / licensing lines, acknowledgments,
keyword metadata, page-number lines and legal disclaimers before any
analysis runs, then normalises whitespace.
"""
from __future__ import annotations

import re

from app.services.vocabulary import BOILERPLATE_LINES, REFERENCES_SECTION


def clean_text(raw_text: str) -> str:
    """
    Return *raw_text* with boilerplate removed.

    Never raises; returns an empty string when the whole input was
    boilerplate.
    """
    if not raw_text:
        return ""

    text = raw_text.replace("\r\n", "\n").replace("\r", "\n")
    text = REFERENCES_SECTION.sub("", text)

    for pattern in BOILERPLATE_LINES:
        text = pattern.sub("", text)

    text = "\n".join(line.strip() for line in text.split("\n"))
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()
