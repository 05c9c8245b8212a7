"""Single-emoji validation for model output."""

from typing import Optional

import emoji
import regex


# Extended grapheme cluster
GRAPHEME_RE = regex.compile(r'\X')


def grapheme_count(value: str) -> int:
    """Number of user-perceived characters in value."""
    return len(GRAPHEME_RE.findall(value))


def is_valid_emoji(value: Optional[str]) -> bool:
    """Check that value is exactly one emoji.

    Modifier sequences (skin tones, gender signs, ZWJ sequences, flags and
    keycaps) count as one emoji. Text, multiple emoji and non-emoji symbols
    are rejected.

    Args:
        value: Candidate emoji string

    Returns:
        True if value is a single valid emoji
    """
    if not value:
        return False

    if grapheme_count(value) != 1:
        return False

    return emoji.is_emoji(value)
