# services/api/core/text.py
from __future__ import annotations

import logging
import re
import threading
from typing import Optional, Pattern

logger = logging.getLogger(__name__)

# Line breaks (with surrounding whitespace) that do not follow a period.
NEWLINE_PATTERN = r"(?<!\.)\s*[\n\r]+\s*"

_UNSET = object()
_newline_expression: object = _UNSET
_lock = threading.Lock()


def _compile(pattern: str) -> Optional[Pattern[str]]:
    try:
        return re.compile(pattern)
    except re.error as e:
        logger.error(f"Can't create newline expression: {e}")
        return None


def newline_expression() -> Optional[Pattern[str]]:
    """
    Compiled newline pattern, built once per process.

    Returns None if compilation failed; the failure is logged once and
    not retried.
    """
    global _newline_expression
    if _newline_expression is _UNSET:
        with _lock:
            if _newline_expression is _UNSET:
                _newline_expression = _compile(NEWLINE_PATTERN)
    return _newline_expression  # type: ignore[return-value]


def remove_newlines(text: str) -> str:
    """
    Collapse soft line wraps in text copied out of a PDF.

    A break preceded by a period is kept, so paragraph ends survive.
    The result is trimmed.
    """
    expression = newline_expression()
    if expression is None:
        return text
    return expression.sub(" ", text).strip()
