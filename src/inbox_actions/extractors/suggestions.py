from __future__ import annotations

import json
import logging
import uuid
from typing import Any, List

from inbox_actions.models import ActionSuggestion

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 50


def _json_span(text: str) -> str | None:
    # Models like to wrap the JSON in prose; take first "{" to last "}".
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def _confidence(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_CONFIDENCE
    if not 0 <= value <= 100:
        return DEFAULT_CONFIDENCE
    return int(round(value))


def parse_suggestions(raw_text: str) -> List[ActionSuggestion]:
    """
    Turn a raw model response into action suggestions.

    Never raises: text without a JSON object, invalid JSON, or a missing
    `suggestions` array all yield an empty list. Type, title and description
    are passed through as given; confidence falls back to 50 and params to {}.
    """
    if not isinstance(raw_text, str):
        return []

    span = _json_span(raw_text)
    if span is None:
        return []

    try:
        parsed = json.loads(span)
    except (ValueError, RecursionError) as exc:
        logger.warning("Failed to parse model response: %s", type(exc).__name__)
        return []

    if not isinstance(parsed, dict):
        return []
    items = parsed.get("suggestions")
    if not isinstance(items, list):
        return []

    batch = uuid.uuid4().hex[:8]
    suggestions: List[ActionSuggestion] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            continue
        params = item.get("params")
        suggestions.append(
            ActionSuggestion(
                id=f"suggestion-{batch}-{index}",
                type=item.get("type"),
                title=item.get("title"),
                description=item.get("description"),
                confidence=_confidence(item.get("confidence")),
                params=dict(params) if isinstance(params, dict) else {},
            )
        )
    return suggestions
