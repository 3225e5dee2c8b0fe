"""
Thin client for the Ollama /api/generate endpoint.

Every call degrades instead of raising: ``generate`` returns an empty string
and ``generate_json`` returns ``(False, [])`` on timeout, connection failure,
non-200 status, or output that cannot be coaxed into JSON.  Callers switch to
their local fallback on those values.

Public API
----------
OllamaLLMService.generate(prompt, system=None)          -> str
OllamaLLMService.generate_json(prompt, system, retry)   -> (bool, Any)
OllamaLLMService.check_health()                         -> bool
"""
from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Optional, Tuple

import httpx

from app.config import settings

logger = logging.getLogger(__name__)


class OllamaLLMService:
    """
    LLM client via Ollama /api/generate.

    Limits concurrency to MAX_CONCURRENT simultaneous LLM calls.
    Retries JSON parsing up to MAX_JSON_RETRIES times with a simpler prompt.
    Handles small models' tendency to wrap JSON in markdown code fences.
    """

    MAX_CONCURRENT: int = 2
    MAX_JSON_RETRIES: int = 2

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        enabled: Optional[bool] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.OLLAMA_BASE_URL).rstrip("/")
        self.model = model or settings.OLLAMA_LLM_MODEL
        self.llm_timeout = float(timeout if timeout is not None else settings.OLLAMA_TIMEOUT)
        self.timeout = httpx.Timeout(self.llm_timeout, connect=10.0)
        self.enabled = settings.LLM_ENABLED if enabled is None else enabled
        self._transport = transport
        self._semaphore = asyncio.Semaphore(self.MAX_CONCURRENT)

    @property
    def is_enabled(self) -> bool:
        return bool(self.enabled and self.base_url)

    def _client(self, timeout: Any = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout or self.timeout,
            transport=self._transport,
        )

    # ------------------------------------------------------------------
    # Core LLM caller
    # ------------------------------------------------------------------

    async def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: int = 1000,
        temperature: float = 0.3,
    ) -> str:
        """
        POST to Ollama /api/generate and return the response text.

        Returns empty string when disabled or on any error (timeout,
        connection failure, non-200 response).
        """
        if not self.is_enabled:
            return ""

        payload: dict = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "num_predict": max_tokens,
                "temperature": temperature,
            },
        }
        if system:
            payload["system"] = system

        async with self._semaphore:
            try:
                async with self._client() as client:
                    resp = await client.post(f"{self.base_url}/api/generate", json=payload)

                if resp.status_code == 200:
                    return resp.json().get("response", "") or ""

                logger.error(
                    "generate: Ollama returned HTTP %d: %s",
                    resp.status_code,
                    resp.text[:300],
                )
                return ""

            except httpx.TimeoutException:
                logger.error("generate: request timed out after %.0f s", self.llm_timeout)
                return ""
            except httpx.ConnectError as exc:
                logger.error("generate: connection error — %s", exc)
                return ""
            except Exception as exc:
                logger.error("generate: unexpected error — %s", exc)
                return ""

    async def generate_json(
        self,
        prompt: str,
        system: Optional[str] = None,
        retry_prompt: Optional[str] = None,
        max_tokens: int = 1000,
        temperature: float = 0.2,
    ) -> Tuple[bool, Any]:
        """
        Call the LLM and attempt to parse the response as JSON.

        Retries up to MAX_JSON_RETRIES times.  On retry, uses *retry_prompt*
        (a simpler, more directive prompt) if provided, otherwise repeats the
        original prompt.

        Returns ``(success: bool, parsed_value: Any)``.
        """
        prompts = [prompt] + [retry_prompt or prompt] * (self.MAX_JSON_RETRIES - 1)

        for attempt, current_prompt in enumerate(prompts, start=1):
            response_text = await self.generate(
                current_prompt, system=system, max_tokens=max_tokens, temperature=temperature
            )

            if not response_text:
                # Empty response means disabled, timeout or connection error;
                # retrying the same call will likely fail again.
                logger.warning(
                    "generate_json: empty LLM response (attempt %d), skipping retries",
                    attempt,
                )
                return False, []

            success, parsed = self.parse_json_robust(response_text)
            if success:
                if attempt > 1:
                    logger.info(
                        "generate_json: JSON parsed successfully on attempt %d", attempt
                    )
                return True, parsed

            if attempt < self.MAX_JSON_RETRIES:
                logger.warning(
                    "generate_json: JSON parse failed on attempt %d/%d, retrying",
                    attempt,
                    self.MAX_JSON_RETRIES,
                )

        logger.error(
            "generate_json: all %d JSON parse attempts failed", self.MAX_JSON_RETRIES
        )
        return False, []

    async def check_health(self) -> bool:
        """Return True when the Ollama server answers /api/tags with 200."""
        if not self.is_enabled:
            return False
        try:
            async with self._client(timeout=10.0) as client:
                resp = await client.get(f"{self.base_url}/api/tags")
            return resp.status_code == 200
        except Exception as exc:
            logger.warning("check_health: Ollama unreachable — %s", exc)
            return False

    # ------------------------------------------------------------------
    # Robust JSON parsing
    # ------------------------------------------------------------------

    def parse_json_robust(self, response: str) -> Tuple[bool, Any]:
        """
        Try multiple strategies to parse JSON from potentially messy LLM output.

        Handles:
        - Markdown code fences (```json … ```, ``` … ```)
        - Trailing commas before ] or }
        - Python-style True / False / None
        - Surrounding prose — finds the first balanced [...] or {...} block
        - Missing closing bracket (adds one and retries)

        Returns ``(success, parsed_value)``.
        """
        if not response:
            return False, []

        text = response.strip()

        # Strategy 1: direct parse
        ok, val = self._try_json(text)
        if ok:
            return True, val

        # Strategy 2: strip markdown code fences
        stripped = self._strip_code_fences(text)
        if stripped != text:
            ok, val = self._try_json(stripped)
            if ok:
                return True, val
            text = stripped

        # Strategy 3: fix common JSON mangling
        fixed = self._fix_json_issues(text)
        ok, val = self._try_json(fixed)
        if ok:
            return True, val

        # Strategy 4: extract JSON structure from surrounding prose
        for bracket_pair in (("{", "}"), ("[", "]")):
            fragment = self._extract_json_structure(text, *bracket_pair)
            if fragment:
                ok, val = self._try_json(fragment)
                if ok:
                    return True, val
                ok, val = self._try_json(self._fix_json_issues(fragment))
                if ok:
                    return True, val

        # Strategy 5: attempt to close a truncated array / object
        for suffix in ("]", "}", "}]"):
            ok, val = self._try_json(fixed + suffix)
            if ok:
                logger.debug("parse_json_robust: recovered with suffix %r", suffix)
                return True, val

        logger.warning(
            "parse_json_robust: all strategies failed. Preview: %s",
            response[:400],
        )
        return False, []

    @staticmethod
    def _try_json(text: str) -> Tuple[bool, Any]:
        try:
            return True, json.loads(text)
        except (json.JSONDecodeError, ValueError):
            return False, None

    @staticmethod
    def _strip_code_fences(text: str) -> str:
        """Remove ```json / ``` delimiters that LLMs often wrap output in."""
        text = re.sub(r"^```(?:json|python|javascript|text)?\s*\n?", "", text, flags=re.IGNORECASE)
        text = re.sub(r"\n?```\s*$", "", text)
        return text.strip()

    @staticmethod
    def _fix_json_issues(text: str) -> str:
        """Repair the most common JSON mangling patterns from LLMs."""
        # Trailing commas before ] or }
        text = re.sub(r",(\s*[}\]])", r"\1", text)
        # Python → JSON literals
        text = re.sub(r"\bTrue\b", "true", text)
        text = re.sub(r"\bFalse\b", "false", text)
        text = re.sub(r"\bNone\b", "null", text)
        # Strip inline comments (// …)
        text = re.sub(r"(?<!:)//[^\n]*", "", text)
        return text.strip()

    @staticmethod
    def _extract_json_structure(text: str, open_b: str, close_b: str) -> str:
        """
        Find the first complete balanced open_b … close_b structure in *text*.
        Returns the matched fragment, or empty string if not found.
        """
        start = text.find(open_b)
        if start == -1:
            return ""

        depth = 0
        in_string = False
        escape_next = False

        for i, ch in enumerate(text[start:], start=start):
            if escape_next:
                escape_next = False
                continue
            if ch == "\\" and in_string:
                escape_next = True
                continue
            if ch == '"':
                in_string = not in_string
                continue
            if in_string:
                continue
            if ch == open_b:
                depth += 1
            elif ch == close_b:
                depth -= 1
                if depth == 0:
                    return text[start : i + 1]
        return ""
