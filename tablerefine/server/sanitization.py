"""Input cleaning for search terms and action endpoint payloads."""

from __future__ import annotations

import html
from typing import Any, Optional

import bleach

from ..client.normalizer import clean_text
from ..types import ACTION_TYPES, BULK, INLINE

SEARCH_MAX_LENGTH = 255


def sanitize_search(term: Any, max_length: int = SEARCH_MAX_LENGTH) -> Optional[str]:
    """
    Strip markup from a free-text search term.

    Returns ``None`` when nothing searchable is left.
    """
    if term is None:
        return None
    cleaned = bleach.clean(str(term), tags=[], attributes={}, strip=True)
    cleaned = clean_text(html.unescape(cleaned))[:max_length].strip()
    return cleaned or None


def validate_payload(payload: Any) -> list[str]:
    """Return a list of problems with an action endpoint payload."""
    if not isinstance(payload, dict):
        return ["Payload must be a JSON object"]

    errors: list[str] = []
    for field in ("name", "type", "table"):
        value = payload.get(field)
        if not isinstance(value, str) or not value.strip():
            errors.append(f"'{field}' is required")

    action_type = payload.get("type")
    if isinstance(action_type, str) and action_type and action_type not in ACTION_TYPES:
        errors.append(f"'type' must be one of {', '.join(ACTION_TYPES)}")

    if action_type == INLINE and payload.get("id") in (None, ""):
        errors.append("'id' is required for inline actions")

    if action_type == BULK:
        if not isinstance(payload.get("all", False), bool):
            errors.append("'all' must be a boolean")
        for field in ("only", "except"):
            if not isinstance(payload.get(field, []), list):
                errors.append(f"'{field}' must be a list")

    return errors
