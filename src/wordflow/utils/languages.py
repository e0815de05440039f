"""Language codes and their human-readable names."""

from typing import Dict, Iterable

LANGUAGES: Dict[str, Dict[str, str]] = {
    "en": {"code": "en", "label": "English", "native_label": "English"},
    "my": {"code": "my", "label": "Bahasa Malaysia", "native_label": "Bahasa Malaysia"},
    "ms": {"code": "ms", "label": "Bahasa Malaysia", "native_label": "Bahasa Malaysia"},
    "zh": {"code": "zh", "label": "Simplified Chinese", "native_label": "中文"},
}

AVAILABLE_TARGET_LANGUAGES = ["my", "zh"]


def language_display_name(code: str) -> str:
    """Return the display name for a language code, or the code itself if unknown."""
    lang = LANGUAGES.get((code or "").lower())
    if not lang:
        return code
    return lang.get("native_label") or lang.get("label") or code


def join_language_names(codes: Iterable[str]) -> str:
    """Comma-joined display names, e.g. ``"Bahasa Malaysia, 中文"``."""
    return ", ".join(language_display_name(code) for code in codes)
