"""Display text from provider fields that may be localized objects."""

from typing import Any

from route_eats.models import LocalizedString


def text_of(value: Any, default: str = "") -> str:
    """Return the display string of a ``LocalizedText`` value.

    Accepts a plain string, a ``LocalizedString``, or the raw provider dict
    ``{"text": ..., "languageCode": ...}``.
    """
    if value is None:
        return default
    if isinstance(value, str):
        return value
    if isinstance(value, LocalizedString):
        return value.text or default
    if isinstance(value, dict):
        text = value.get("text")
        return text if isinstance(text, str) else default
    return default
