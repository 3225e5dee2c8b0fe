"""
Question answering over a single document.

The LLM answers from the supplied document text.  Without it, ``local_reply``
picks a canned answer for the kind of question asked (summary, "what about",
explanation, key points) and fills it with words pulled from the document.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from app.services.errors import EmptyTextError
from app.services.llm_client import OllamaLLMService
from app.services.vocabulary import CHAT_COMMON_WORDS, CHAT_IMPORTANT_WORDS_LIMIT

logger = logging.getLogger(__name__)

_WHAT_ABOUT = re.compile(r"what.*about\s+(.+)", re.IGNORECASE)

_HELP_MENU = """\
Here are some things I can help you with:
- **Summary**: Ask me to summarize the main points
- **Specific topics**: Ask "What does the document say about [topic]?"
- **Explanations**: Ask me to explain concepts or processes
- **Key points**: Ask for the most important information

What would you like to know about the document?"""


@dataclass
class ChatReply:
    response: str
    source: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def important_words(context: str, limit: int = CHAT_IMPORTANT_WORDS_LIMIT) -> List[str]:
    """First *limit* words of *context* longer than three letters, in document order."""
    words = [
        word for word in context.lower().split()
        if len(word) > 3 and word not in CHAT_COMMON_WORDS
    ]
    return words[:limit]


def _pick(words: Sequence[str], index: int, default: str) -> str:
    return words[index] if index < len(words) else default


def local_reply(message: str, context: str) -> str:
    words = important_words(context)
    lowered = message.lower()

    if "summary" in lowered or "summarize" in lowered:
        return (
            "Based on the document, here's a summary of the key points:\n\n"
            f"{', '.join(words[:10])}\n\n"
            f"The document appears to cover topics related to {', '.join(words[:5])}. "
            "The main content discusses these subjects with detailed explanations "
            "and analysis.\n\n"
            "Would you like me to elaborate on any specific aspect of the document?"
        )

    if "what" in lowered and "about" in lowered:
        match = _WHAT_ABOUT.search(message)
        topic = match.group(1).strip().rstrip("?") if match else "the main topics"
        return (
            f"Regarding {topic} in the document:\n\n"
            f"The document contains information about {', '.join(words[:8])}. "
            f"{topic} is discussed in the context of the broader subject matter.\n\n"
            f"Key points related to {topic} include:\n"
            f"- {_pick(words, 0, 'relevant information')}\n"
            f"- {_pick(words, 1, 'important details')}\n"
            f"- {_pick(words, 2, 'significant aspects')}\n\n"
            f"Is there a specific aspect of {topic} you'd like me to explain further?"
        )

    if "explain" in lowered or "how" in lowered:
        return (
            "Let me explain based on the document:\n\n"
            f"The document provides detailed information about {', '.join(words[:6])}.\n\n"
            f"1. **Context**: The document discusses {_pick(words, 0, 'the main subject')} in detail\n"
            f"2. **Process**: It explains the relationship between "
            f"{_pick(words, 1, 'key concepts')} and {_pick(words, 2, 'other elements')}\n"
            f"3. **Application**: The content shows how these concepts apply to "
            f"{_pick(words, 3, 'practical situations')}\n\n"
            "Would you like me to focus on a specific part of the explanation?"
        )

    if "key" in lowered or "important" in lowered or "main" in lowered:
        return (
            "Based on the document, here are the key points:\n\n"
            "**Main Topics:**\n"
            f"- {_pick(words, 0, 'Primary subject matter')}\n"
            f"- {_pick(words, 1, 'Secondary topics')}\n"
            f"- {_pick(words, 2, 'Supporting concepts')}\n\n"
            "**Important Concepts:**\n"
            f"- {_pick(words, 3, 'Key concept 1')}\n"
            f"- {_pick(words, 4, 'Key concept 2')}\n"
            f"- {_pick(words, 5, 'Key concept 3')}\n\n"
            "Is there a specific topic you'd like me to elaborate on?"
        )

    if not words:
        return f"I can help you understand the document!\n\n{_HELP_MENU}"
    return (
        "I can help you understand the document! It covers topics related to "
        f"{', '.join(words[:5])}.\n\n{_HELP_MENU}"
    )


_CHAT_SYSTEM = (
    "You are a research assistant answering questions about one document. "
    "Answer only from the document text provided. If the document does not "
    "contain the answer, say so."
)

_CHAT_PROMPT = """\
Document text (first 4000 characters):
---
{context}
---

Question: {message}

Answer:\
"""


class DocumentChat:
    """Answers questions about a document, LLM first."""

    PROMPT = _CHAT_PROMPT
    SYSTEM = _CHAT_SYSTEM

    def __init__(self, llm: Optional[OllamaLLMService] = None) -> None:
        self.llm = llm

    async def reply(self, message: str, context: str) -> ChatReply:
        if not (message and message.strip()) or not (context and context.strip()):
            raise EmptyTextError("Message and document context are required")

        if self.llm is not None and self.llm.is_enabled:
            response = await self.llm.generate(
                self.PROMPT.format(context=context[:4000], message=message.strip()),
                system=self.SYSTEM,
                max_tokens=600,
                temperature=0.4,
            )
            if response.strip():
                return ChatReply(response.strip(), "llm")
            logger.info("chat: LLM unavailable, answering from local heuristics")

        return ChatReply(local_reply(message, context), "local")
