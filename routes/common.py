"""
Helpers shared by the API blueprints.
"""

import html
from typing import Any, Dict, Optional

import bleach
from flask import current_app, request

from core.exceptions import QuoteDeskError


def sanitize_text(text: Any, max_length: Optional[int] = None) -> str:
    """
    Strip markup and surrounding whitespace from user input text.

    Text is stored as JSON data, not HTML, so the entities bleach produces
    are decoded again: "Nuts & Bolts" is not stored as "Nuts &amp; Bolts".
    """
    if text is None:
        return ""
    text = str(text).strip()
    if not text:
        return ""
    text = html.unescape(bleach.clean(text, tags=[], strip=True)).strip()
    if max_length and len(text) > max_length:
        text = text[:max_length]
    return text


def sanitize_record(data: Dict[str, Any], max_length: Optional[int] = None) -> Dict[str, Any]:
    """Sanitize every string value of a flat record; other values pass through."""
    return {
        key: sanitize_text(value, max_length) if isinstance(value, str) else value
        for key, value in data.items()
    }


def json_body() -> Dict[str, Any]:
    """
    Parsed JSON object from the request.

    Raises:
        QuoteDeskError: If the body is missing or not a JSON object
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise QuoteDeskError("Request body must be a JSON object")
    return data


def service(name: str) -> Any:
    """Service instance registered on the app by create_app()."""
    return current_app.config[name]
