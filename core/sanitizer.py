"""Repair the non-standard ``NaN`` literal emitted by the prediction producer."""

from __future__ import annotations

import json
import re
from typing import Any


# A string literal is matched whole so colons inside it are never considered.
_TOKEN_PATTERN = re.compile(r'("(?:[^"\\]|\\.)*")|(:\s*)NaN(?![\w$])')


class DocumentParseError(ValueError):
    """Raised when a document is not valid JSON after sanitizing."""


def _replace_token(match: re.Match) -> str:
    if match.group(1) is not None:
        return match.group(1)
    return f"{match.group(2)}null"


def sanitize_nan_literals(text: str) -> str:
    """Replace every bare ``NaN`` object value with ``null``; leave all else untouched."""
    return _TOKEN_PATTERN.sub(_replace_token, text)


def _reject_constant(name: str) -> Any:
    raise DocumentParseError(f"Non-standard JSON constant {name!r} is not allowed here")


def parse_document_text(text: str) -> Any:
    """
    Sanitize then parse one raw document.

    Raises:
        DocumentParseError: When the text is not standards-compliant JSON once
            object-value ``NaN`` tokens have been replaced.
    """
    cleaned = sanitize_nan_literals(text)
    try:
        return json.loads(cleaned, parse_constant=_reject_constant)
    except json.JSONDecodeError as error:
        raise DocumentParseError(f"Invalid JSON document: {error}") from error
