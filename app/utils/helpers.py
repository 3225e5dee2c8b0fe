"""
Common utility functions and helpers.
"""
from datetime import datetime, timezone
from typing import Any, List, Optional
import hashlib
import re

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def generate_hash(text: str) -> str:
    """
    Generate SHA256 hash of text.

    Args:
        text: Text to hash

    Returns:
        Hex digest of hash
    """
    return hashlib.sha256(text.encode('utf-8')).hexdigest()


def extract_context(text: str, term: str, context_length: int = 100) -> str:
    """
    Return the text surrounding the first case-insensitive occurrence of *term*.

    Args:
        text: Full text content
        term: Term to locate
        context_length: Characters to keep on each side of the term

    Returns:
        Trimmed context window, or empty string if the term is absent
    """
    if not term:
        return ""
    index = text.lower().find(term.lower())
    if index == -1:
        return ""
    start = max(0, index - context_length)
    end = min(len(text), index + len(term) + context_length)
    return text[start:end].strip()


def count_whole_word(text: str, term: str) -> int:
    """Count case-insensitive whole-word occurrences of *term* in *text*."""
    if not term:
        return 0
    pattern = r"(?<![\w-])" + re.escape(term) + r"(?![\w-])"
    return len(re.findall(pattern, text, flags=re.IGNORECASE))


def clamp(value: Any, lo: float, hi: float, default: float) -> float:
    """Parse *value* as float, clamped to [lo, hi]; returns *default* on error."""
    try:
        return max(lo, min(hi, float(value)))
    except (TypeError, ValueError):
        return default


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Safely divide two numbers, returning default if denominator is zero.

    Args:
        numerator: Numerator
        denominator: Denominator
        default: Default value if division fails

    Returns:
        Result of division or default
    """
    return numerator / denominator if denominator != 0 else default


def is_valid_email(value: str) -> bool:
    """Loose e-mail shape check (something@something.tld)."""
    return bool(_EMAIL_RE.match(value or ""))


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def string_list(value: Any, limit: Optional[int] = None) -> List[str]:
    """
    Coerce an untrusted JSON value into a list of non-blank strings.

    A lone string becomes a one-item list; anything else that is not a list
    yields an empty list.
    """
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    items = [str(v).strip() for v in value if str(v).strip()]
    return items[:limit] if limit is not None else items
