"""
Keyword definitions.

``DefinitionProvider`` is the capability used by the analysis pipeline.  Two
implementations exist:

LocalDefinitionProvider
    Looks for a definitional sentence ("X is ...", "X refers to ...") or a
    parenthetical gloss near the term; otherwise writes a generic sentence
    naming the first detected domain.

OllamaDefinitionProvider
    Asks the LLM for a one-to-two sentence definition grounded in the text
    around the term, and delegates to a LocalDefinitionProvider whenever the
    call fails or returns nothing usable.

Neither provider raises; both always return a non-empty definition.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Protocol

from app.services.fingerprint import SemanticFingerprint
from app.services.llm_client import OllamaLLMService
from app.services.vocabulary import DEFINITION_VERBS
from app.utils.helpers import extract_context

logger = logging.getLogger(__name__)

DEFINITION_CONTEXT_CHARS = 200
MAX_DEFINITION_CHARS = 600


@dataclass(frozen=True)
class Definition:
    text: str
    is_from_external_source: bool = False


class DefinitionProvider(Protocol):
    async def define(
        self, word: str, text: str, fingerprint: SemanticFingerprint
    ) -> Definition:
        ...


# ---------------------------------------------------------------------------
# Local heuristic
# ---------------------------------------------------------------------------

class LocalDefinitionProvider:
    """Pattern-based definitions taken from the document itself."""

    async def define(
        self, word: str, text: str, fingerprint: SemanticFingerprint
    ) -> Definition:
        return Definition(self.define_sync(word, text, fingerprint), False)

    def define_sync(
        self, word: str, text: str, fingerprint: SemanticFingerprint
    ) -> str:
        term = (word or "").strip()
        if not term:
            return "A key term in this document."

        window = extract_context(text, term, DEFINITION_CONTEXT_CHARS)
        found = find_definitional_span(term, window) if window else ""
        if found:
            return found

        if fingerprint.domain_indicators:
            return (
                f"{term} is a term used in {fingerprint.domain_indicators[0]} "
                "that is central to this document."
            )
        return f"{term} is a key term in this document."


def find_definitional_span(term: str, window: str) -> str:
    """
    Return the first definitional span for *term* inside *window*.

    Recognised forms, in order:
      "<term> is|are|refers to|means ... ."
      "<term> (<gloss>)"
      "<gloss> (<term>)"
    """
    escaped = re.escape(term)

    verb_form = re.search(
        rf"\b{escaped}\b\s+(?:{DEFINITION_VERBS})\s+[^.!?]{{5,200}}[.!?]?",
        window,
        re.IGNORECASE,
    )
    if verb_form:
        return _sentence(verb_form.group(0))

    gloss_after = re.search(rf"\b{escaped}\s*\(([^()]{{3,120}})\)", window, re.IGNORECASE)
    if gloss_after:
        return _sentence(f"{term} ({gloss_after.group(1).strip()})")

    gloss_before = re.search(
        rf"([A-Za-z][A-Za-z\- ]{{3,80}}?)\s*\(\s*{escaped}\s*\)", window, re.IGNORECASE
    )
    if gloss_before:
        return _sentence(f"{gloss_before.group(1).strip()} ({term})")

    return ""


def _sentence(span: str) -> str:
    span = " ".join(span.split())
    if not span:
        return ""
    span = span[0].upper() + span[1:]
    return span if span[-1] in ".!?" else span + "."


# ---------------------------------------------------------------------------
# Remote (Ollama)
# ---------------------------------------------------------------------------

_DEFINITION_SYSTEM = (
    "You are an expert at explaining academic and technical terminology. "
    "Answer with the definition only."
)

_DEFINITION_PROMPT = """\
Define the term "{word}" in 1-2 sentences as it is used in the passage below.
Detected subject areas: {domains}.

Passage:
---
{context}
---

Definition:\
"""


class OllamaDefinitionProvider:
    """LLM-written definitions with a local fallback."""

    PROMPT = _DEFINITION_PROMPT
    SYSTEM = _DEFINITION_SYSTEM

    def __init__(
        self,
        llm: OllamaLLMService,
        fallback: Optional[LocalDefinitionProvider] = None,
    ) -> None:
        self.llm = llm
        self.fallback = fallback or LocalDefinitionProvider()

    async def define(
        self, word: str, text: str, fingerprint: SemanticFingerprint
    ) -> Definition:
        try:
            context = extract_context(text, word, DEFINITION_CONTEXT_CHARS) or text[:400]
            domains = ", ".join(fingerprint.domain_indicators) or "general"
            prompt = self.PROMPT.format(word=word, domains=domains, context=context)
            response = await self.llm.generate(
                prompt, system=self.SYSTEM, max_tokens=150, temperature=0.3
            )
            definition = _clean_llm_definition(response)
            if definition:
                return Definition(definition, True)
            logger.info("define: no usable LLM definition for %r, using local fallback", word)
        except Exception as exc:
            logger.warning("define: LLM definition failed for %r — %s", word, exc)

        return await self.fallback.define(word, text, fingerprint)


def _clean_llm_definition(response: str) -> str:
    text = (response or "").strip().strip('"').strip()
    text = re.sub(r"^(?:definition)\s*:\s*", "", text, flags=re.IGNORECASE)
    text = " ".join(text.split())
    if not text or len(text) > MAX_DEFINITION_CHARS:
        return ""
    return text


def build_definition_provider(llm: Optional[OllamaLLMService]) -> DefinitionProvider:
    """Remote provider when the LLM is configured, otherwise local heuristics."""
    if llm is not None and llm.is_enabled:
        return OllamaDefinitionProvider(llm)
    return LocalDefinitionProvider()
