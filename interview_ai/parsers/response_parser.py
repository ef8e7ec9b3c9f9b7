"""Pull a JSON payload out of a (possibly chatty) completion response."""
from __future__ import annotations

import json


def parse(raw_text: str | None) -> dict | list | None:
    """Parse *raw_text* as JSON, falling back to the outermost ``{…}`` span.

    Models often wrap the payload in commentary ("Sure, here you go: {...}").
    Returns ``None`` when neither attempt yields JSON; retrying is the
    caller's business.
    """
    if not raw_text:
        return None
    try:
        value = json.loads(raw_text)
        if isinstance(value, (dict, list)):
            return value
    except json.JSONDecodeError:
        pass

    first = raw_text.find("{")
    last = raw_text.rfind("}")
    if first == -1 or last <= first:
        return None
    try:
        return json.loads(raw_text[first : last + 1])
    except json.JSONDecodeError:
        return None


def extract_items(parsed: dict | list | None) -> list | None:
    """Return the raw question list from a parsed payload, or None."""
    if isinstance(parsed, dict):
        items = parsed.get("questions")
        return items if isinstance(items, list) else None
    if isinstance(parsed, list):
        return parsed
    return None
