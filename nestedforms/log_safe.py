"""
Log-safe truncation for submitted params and slot values.
Converts to string, trims if too long; values that cannot be rendered
become a placeholder.
"""

import json
from typing import Any

PLACEHOLDER = "<unrenderable>"


def _trim(s: str, max_string_len: int, words_around: int) -> str:
    if len(s) <= max_string_len:
        return s
    words = s.split()
    first = " ".join(words[:words_around]) if words else ""
    last = " ".join(words[-words_around:]) if words else ""
    result = f"{first}...<len={len(s)}>...{last}"
    # Minified JSON has no spaces, so the word trim returns everything; fall back to a char trim
    if len(result) > max_string_len:
        suffix = f"...<len={len(s)}>..."
        half = max(0, (max_string_len - len(suffix)) // 2)
        result = f"{s[:half]}{suffix}{s[-half:]}" if half else suffix
    return result


def log_safe_output(
    data: Any,
    max_string_len: int = 200,
    words_around: int = 10,
) -> str:
    """
    Produce a log-safe string: trim long strings, or stringify then trim.
    Does not mutate the original.
    """
    if isinstance(data, str):
        return _trim(data, max_string_len, words_around)

    try:
        if isinstance(data, (dict, list)):
            s = json.dumps(data, default=str)
        else:
            s = str(data)
    except (TypeError, ValueError):
        return PLACEHOLDER
    return _trim(s, max_string_len, words_around)
