"""
Single-term definitions for a term the reader selected in a document.

``fallback_term_definition`` answers from a small table of common research
vocabulary and then from the surrounding context; ``TermDefiner`` asks the
LLM first and uses the local answer when the LLM is disabled, unreachable or
returns nothing.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from app.services.errors import EmptyTextError
from app.services.llm_client import OllamaLLMService
from app.services.vocabulary import ACRONYM_TERM, COMMON_DEFINITIONS

logger = logging.getLogger(__name__)

# Context shorter than this is not worth quoting back
MIN_QUOTED_CONTEXT = 50
QUOTED_CONTEXT_CHARS = 200


@dataclass
class TermDefinition:
    term: str
    definition: str
    source: str

    @property
    def fallback(self) -> bool:
        return self.source != "llm"


def fallback_term_definition(term: str, context: str = "") -> str:
    term = term.strip()
    lowered = term.lower()
    is_acronym = bool(ACRONYM_TERM.match(term))

    if lowered in COMMON_DEFINITIONS:
        return f"**{term}** {COMMON_DEFINITIONS[lowered]}"
    for key, body in COMMON_DEFINITIONS.items():
        if key in lowered or lowered in key:
            return f"**{term}** {body}"

    context = (context or "").strip()
    if len(context) > MIN_QUOTED_CONTEXT:
        quoted = context[:QUOTED_CONTEXT_CHARS]
        if is_acronym:
            return (
                f'**{term}** is an acronym that appears in this document. Based on the '
                f'context: "{quoted}...", this term is used in relation to the '
                "document's main topic. The full expansion of this acronym may be "
                "defined elsewhere in the document."
            )
        return (
            f'**{term}** appears to be an important concept in this document. Based on '
            f'the context: "{quoted}...", this term likely relates to the main topic '
            "being discussed."
        )
    if is_acronym:
        return (
            f"**{term}** is an acronym that appears in this document. Look for its "
            "first occurrence, where acronyms are usually spelled out."
        )
    return (
        f"**{term}** is a term that appears in this document. No specific definition "
        "is available, but it seems to be relevant to the document's content."
    )


_TERM_SYSTEM = (
    "You are a helpful assistant that provides concise, accurate definitions. "
    "Keep responses to 2-3 sentences. Focus on essential meaning and "
    "document-specific context."
)

_TERM_PROMPT = """\
Based on the document context, give a concise definition for "{term}".
- If "{term}" is an acronym, find its expansion within the document context first
- Focus on how it is used specifically in this document
- Keep it to 2-3 sentences

Document context: "{context}"\
"""

_TERM_PROMPT_GENERAL = (
    'Provide a concise definition for "{term}". Aim for 2-3 sentences. '
    "Include the essential meaning and key information."
)


class TermDefiner:
    """LLM-first term definitions with the local table as fallback."""

    PROMPT = _TERM_PROMPT
    PROMPT_GENERAL = _TERM_PROMPT_GENERAL
    SYSTEM = _TERM_SYSTEM

    def __init__(self, llm: Optional[OllamaLLMService] = None) -> None:
        self.llm = llm

    async def define(
        self, term: str, context: str = "", general: bool = False
    ) -> TermDefinition:
        if not term or not term.strip():
            raise EmptyTextError("Term is required")
        term = term.strip()
        context = context or ""

        if self.llm is not None and self.llm.is_enabled:
            if general or not context.strip():
                prompt = self.PROMPT_GENERAL.format(term=term)
            else:
                prompt = self.PROMPT.format(term=term, context=context[:2000])
            response = await self.llm.generate(
                prompt, system=self.SYSTEM, max_tokens=150, temperature=0.2
            )
            definition = " ".join(response.split())
            if definition:
                return TermDefinition(term, definition, "llm")
            logger.info("define_term: no LLM answer for %r, using local table", term)

        return TermDefinition(term, fallback_term_definition(term, context), "local")
