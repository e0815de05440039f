"""Provider capability interface and SDK response normalization."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Union

from ..errors import CapabilityNotSupportedError, RateLimitedError, is_rate_limit_error
from ..models.extraction import ExtractedLine, ExtractedTranslation
from ..models.row import BatchItemResult, BatchOptions, ConnectionStatus, GlossaryTerm, SourceItem

logger = logging.getLogger("wordflow.providers")

CAPABILITY_EXTRACT_TEXT = "extract_text"
CAPABILITY_EXTRACT_AND_TRANSLATE = "extract_and_translate"


def extract_response_text(response: Any, _depth: int = 0) -> str:
    """
    Normalize the response shapes of the vendor SDKs into one plain string.

    Handles, in order: plain strings, LangChain messages (``.content`` as a
    string or a list of content parts), a ``.text`` attribute that may be a
    function, a nested ``.response.text()``, the raw generate-content shape
    ``.candidates[0].content.parts[0].text`` and raw chat-completion dicts.
    """
    if response is None:
        return ""
    if isinstance(response, str):
        return response

    if isinstance(response, dict):
        choices = response.get("choices")
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            message = choices[0].get("message") or {}
            if isinstance(message.get("content"), str):
                return message["content"]
        for key in ("content", "text"):
            if isinstance(response.get(key), str):
                return response[key]
        return ""

    content = getattr(response, "content", None)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(_part_text(part) for part in content)

    text = getattr(response, "text", None)
    if callable(text):
        text = text()
    if isinstance(text, str):
        return text

    nested = getattr(response, "response", None)
    if nested is not None and nested is not response and _depth < 2:
        return extract_response_text(nested, _depth + 1)

    candidates = getattr(response, "candidates", None)
    if candidates:
        parts = getattr(getattr(candidates[0], "content", None), "parts", None) or []
        if parts:
            return _part_text(parts[0])
    return ""


def _part_text(part: Any) -> str:
    if isinstance(part, str):
        return part
    if isinstance(part, dict):
        return part.get("text", "") if part.get("type", "text") == "text" else ""
    text = getattr(part, "text", "")
    return text if isinstance(text, str) else ""


def coerce_items(items: Sequence[Union[SourceItem, Dict[str, Any]]]) -> List[SourceItem]:
    return [item if isinstance(item, SourceItem) else SourceItem.model_validate(item) for item in items]


def coerce_options(options: Optional[Union[BatchOptions, Dict[str, Any]]]) -> BatchOptions:
    if options is None:
        return BatchOptions()
    if isinstance(options, BatchOptions):
        return options
    return BatchOptions.model_validate(options)


class BaseProvider(ABC):
    """
    Uniform capability interface over LLM backends.

    Required: ``initialize``, ``generate_batch``, ``test_connection``.
    Optional capabilities are advertised in ``capabilities`` and checked with
    ``supports``; calling one that is not advertised raises
    CapabilityNotSupportedError.
    """

    name: str = "base"
    description: str = ""
    capabilities: FrozenSet[str] = frozenset()

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, endpoint: Optional[str] = None):
        self.api_key = api_key
        self.model = model
        self.endpoint = endpoint
        self.client: Any = None

    @abstractmethod
    def initialize(self) -> bool:
        """Validate credentials and create the client. Idempotent."""

    @abstractmethod
    async def generate_batch(
        self,
        items: Sequence[Union[SourceItem, Dict[str, Any]]],
        options: Optional[Union[BatchOptions, Dict[str, Any]]] = None,
    ) -> List[BatchItemResult]:
        """Translate ``items``; returns exactly one result per item."""

    @abstractmethod
    async def test_connection(self) -> ConnectionStatus:
        """Send a trivial request and report whether it succeeded."""

    def supports(self, capability: str) -> bool:
        return capability in self.capabilities

    async def extract_text_from_image(self, image_bytes: bytes, mime_type: str) -> List[ExtractedLine]:
        raise CapabilityNotSupportedError(self.name, CAPABILITY_EXTRACT_TEXT)

    async def extract_and_translate(
        self,
        image_bytes: bytes,
        mime_type: str,
        target_languages: Sequence[str],
        glossary_terms: Optional[List[GlossaryTerm]] = None,
    ) -> List[ExtractedTranslation]:
        raise CapabilityNotSupportedError(self.name, CAPABILITY_EXTRACT_AND_TRANSLATE)

    def _raise_provider_error(self, error: Exception) -> None:
        """Translate SDK errors: rate limits become RateLimitedError, the rest pass through."""
        if isinstance(error, RateLimitedError):
            raise error
        if is_rate_limit_error(error):
            logger.warning("[%s] Rate limited: %s", self.name, error)
            raise RateLimitedError(str(error)) from error
        logger.error("[%s] Error: %s", self.name, error)
        raise error
