"""
Validation of raw model output.

Model output is untrusted free text. Everything here turns it into exactly one
well-formed result per requested row, or fails the whole batch when the
payload cannot be decoded at all.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence

from ..errors import ResponseParseError
from ..models.extraction import ExtractedLine, ExtractedTranslation
from ..models.row import BatchItemResult, SourceItem, TranslationSlot
from ..models.status import TranslationStatus

logger = logging.getLogger("wordflow.parser")

_FENCE = re.compile(r"```(?:json|JSON)?")


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence wrappers around a JSON payload."""
    return _FENCE.sub("", text or "").strip()


def decode_json_array(raw_text: str) -> List[Any]:
    """
    Decode model output into a JSON array.

    Raises:
        ResponseParseError: if the text is not valid JSON or not an array
    """
    cleaned = strip_code_fences(raw_text)
    try:
        decoded = json.loads(cleaned)
    except (json.JSONDecodeError, TypeError) as e:
        logger.error("JSON parse error: %s | raw response: %.500s", e, raw_text)
        raise ResponseParseError("AI response could not be parsed as JSON", raw_text) from e
    if not isinstance(decoded, list):
        logger.error("Expected a JSON array, got %s | raw response: %.500s", type(decoded).__name__, raw_text)
        raise ResponseParseError("AI response is not a JSON array", raw_text)
    return decoded


def _slot_text(value: Any) -> str:
    """Accept either a ``{"text": ...}`` object or a bare string."""
    if isinstance(value, dict):
        text = value.get("text")
        return text if isinstance(text, str) else ""
    if isinstance(value, str):
        return value
    return ""


def _index_by_id(entries: List[Any]) -> Dict[str, Dict[str, Any]]:
    index: Dict[str, Dict[str, Any]] = {}
    for entry in entries:
        if isinstance(entry, dict) and "id" in entry:
            # first occurrence wins
            index.setdefault(str(entry["id"]), entry)
    return index


def parse_batch_response(
    raw_text: str,
    original_items: Sequence[SourceItem],
    target_languages: Sequence[str],
) -> List[BatchItemResult]:
    """
    Reconcile a batch response against the ids that were requested.

    Iterates the original items, never the parsed array, so the result always
    has the same length and id set as the request. Entries the model omitted
    come back with empty text and ``partial`` status.

    Args:
        raw_text: Model output as a plain string
        original_items: Items sent in the request
        target_languages: Requested language codes

    Returns:
        One BatchItemResult per original item, in request order

    Raises:
        ResponseParseError: if the payload cannot be decoded
    """
    entries = _index_by_id(decode_json_array(raw_text))

    results = []
    missing = []
    for item in original_items:
        match = entries.get(str(item.id))
        translations = {}
        if match is None:
            missing.append(item.id)
            for lang in target_languages:
                translations[lang] = TranslationSlot(text="", status=TranslationStatus.PARTIAL)
        else:
            returned = match.get("translations")
            if not isinstance(returned, dict):
                returned = {}
            for lang in target_languages:
                translations[lang] = TranslationSlot(
                    text=_slot_text(returned.get(lang)),
                    status=TranslationStatus.REVIEW,
                )
        results.append(BatchItemResult(id=item.id, translations=translations))

    if missing:
        logger.warning("Model response omitted %d of %d ids: %s", len(missing), len(original_items), missing)
    return results


def parse_ocr_response(raw_text: str) -> List[ExtractedLine]:
    """Parse OCR output. Malformed output yields an empty list."""
    try:
        parsed = decode_json_array(raw_text)
    except ResponseParseError:
        return []
    lines = []
    for index, item in enumerate(parsed):
        if not isinstance(item, dict):
            continue
        lines.append(ExtractedLine(
            id=str(item.get("id") or index + 1),
            text=_slot_text(item.get("text")),
        ))
    return lines


def parse_extract_and_translate_response(
    raw_text: str,
    target_languages: Optional[Sequence[str]] = None,
) -> List[ExtractedTranslation]:
    """Parse combined extract+translate output. Malformed output yields an empty list."""
    try:
        parsed = decode_json_array(raw_text)
    except ResponseParseError:
        return []
    lines = []
    for index, item in enumerate(parsed):
        if not isinstance(item, dict):
            continue
        returned = item.get("translations")
        if not isinstance(returned, dict):
            returned = {}
        langs = list(target_languages) if target_languages else list(returned.keys())
        lines.append(ExtractedTranslation(
            id=str(item.get("id") or index + 1),
            source_text=_slot_text(item.get("text")),
            translations={lang: _slot_text(returned.get(lang)) for lang in langs},
        ))
    return lines
