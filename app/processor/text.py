"""Whitespace normalization and head/tail truncation of extracted text."""

import re

TRUNCATION_MARKER = "\n\n[... TRUNCATED ...]\n\n"

_HORIZONTAL_WS = re.compile(r"[ \t\f\v]+")
_TRAILING_WS = re.compile(r"[ \t]+\n")
_BLANK_RUNS = re.compile(r"\n{3,}")


def normalize_text(text: str) -> str:
    """Unify line endings, collapse spaces and blank-line runs, trim."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _HORIZONTAL_WS.sub(" ", text)
    text = _TRAILING_WS.sub("\n", text)
    text = _BLANK_RUNS.sub("\n\n", text)
    return text.strip()


def truncate_head_tail(text: str, max_chars: int, head_ratio: float = 0.7) -> str:
    """Keep the start and end of over-long text around TRUNCATION_MARKER.

    Text of at most max_chars is returned unchanged. Otherwise the result is
    exactly max_chars long: head_ratio of the budget left after the marker
    goes to the head, the rest to the tail.
    """
    if len(text) <= max_chars:
        return text
    budget = max_chars - len(TRUNCATION_MARKER)
    if budget <= 0:
        raise ValueError(f"max_chars must exceed the marker length ({len(TRUNCATION_MARKER)})")
    head_len = int(budget * head_ratio)
    tail_len = budget - head_len
    tail = text[-tail_len:] if tail_len > 0 else ""
    return text[:head_len] + TRUNCATION_MARKER + tail
