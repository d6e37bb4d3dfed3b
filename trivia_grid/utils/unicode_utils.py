"""
Unicode utility functions for the Trivia Grid generator.

This module provides Unicode-aware text processing functions used when loading
entity names and when comparing answer strings.
"""

import unicodedata
import re
from typing import Optional


def clean_unicode_text(text: Optional[str]) -> Optional[str]:
    """
    Clean and normalize Unicode text for entity fields.

    Args:
        text: Input text to clean

    Returns:
        Cleaned text or None if input is invalid
    """
    if not text or not isinstance(text, str):
        return None

    # NFC keeps "Fenerbahçe" typed with a combining cedilla equal to the precomposed form
    cleaned = unicodedata.normalize("NFC", text.strip())
    cleaned = re.sub(r"\s+", " ", cleaned)

    return cleaned if cleaned else None


def is_blank(value) -> bool:
    """True for None, non-strings and strings that are empty after trimming."""
    return not isinstance(value, str) or not value.strip()


def normalize_answer(answer: str) -> str:
    """
    Comparison key for answer deduplication.

    Lower-cased and trimmed only; diacritics are kept so that distinct
    players such as "Çağlar" and "Caglar" are not collapsed.
    """
    return answer.strip().lower()
