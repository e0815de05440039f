"""Google Gemini provider (multimodal generate-content)."""

import base64
import logging
import time
from typing import Any, Dict, List, Optional, Sequence, Union

from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from ..config import get_settings
from ..errors import ProviderNotConfiguredError
from ..models.extraction import ExtractedLine, ExtractedTranslation
from ..models.row import BatchItemResult, BatchOptions, ConnectionStatus, GlossaryTerm, SourceItem
from ..prompts.translation import (
    OCR_EXTRACTION_PROMPT,
    build_extract_and_translate_prompt,
    build_translation_prompt,
)
from ..services.parser import (
    parse_batch_response,
    parse_extract_and_translate_response,
    parse_ocr_response,
)
from .base import (
    CAPABILITY_EXTRACT_AND_TRANSLATE,
    CAPABILITY_EXTRACT_TEXT,
    BaseProvider,
    coerce_items,
    coerce_options,
    extract_response_text,
)

logger = logging.getLogger("wordflow.providers.gemini")


def build_image_message(prompt: str, image_bytes: bytes, mime_type: str) -> HumanMessage:
    """A multimodal message: the instruction part followed by the inline image part."""
    data = base64.b64encode(image_bytes).decode("ascii")
    return HumanMessage(content=[
        {"type": "text", "text": prompt},
        {"type": "image_url", "image_url": f"data:{mime_type};base64,{data}"},
    ])


class GeminiProvider(BaseProvider):
    """Gemini through LangChain's ChatGoogleGenerativeAI; also reads text from images."""

    name = "gemini"
    description = "Google Gemini (multimodal generate-content)"
    capabilities = frozenset({CAPABILITY_EXTRACT_TEXT, CAPABILITY_EXTRACT_AND_TRANSLATE})

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, endpoint: Optional[str] = None,
                 temperature: float = 0.3):
        settings = get_settings()
        super().__init__(
            api_key=api_key or settings.gemini_api_key,
            model=model or settings.gemini_model,
            endpoint=endpoint,
        )
        self.temperature = temperature

    def initialize(self) -> bool:
        if not self.api_key:
            logger.warning("[gemini] No API key found")
            return False
        if self.client is None:
            self.client = ChatGoogleGenerativeAI(
                google_api_key=self.api_key,
                model=self.model,
                temperature=self.temperature,
            )
        return True

    def _require_client(self) -> None:
        if not self.initialize():
            raise ProviderNotConfiguredError(self.name)

    async def _invoke(self, message: HumanMessage) -> str:
        try:
            response = await self.client.ainvoke([message])
        except Exception as e:
            self._raise_provider_error(e)
        return extract_response_text(response)

    async def generate_batch(
        self,
        items: Sequence[Union[SourceItem, Dict[str, Any]]],
        options: Optional[Union[BatchOptions, Dict[str, Any]]] = None,
    ) -> List[BatchItemResult]:
        self._require_client()
        items = coerce_items(items)
        options = coerce_options(options)

        prompt = build_translation_prompt(
            items,
            options.template,
            options.target_languages,
            options.glossary_terms,
            options.source_language,
        )
        logger.info("[gemini] Batch request: %d items -> %s", len(items), options.target_languages)

        start = time.time()
        text = await self._invoke(HumanMessage(content=prompt))
        logger.info("[gemini] Response in %dms", int((time.time() - start) * 1000))

        return parse_batch_response(text, items, options.target_languages)

    async def test_connection(self) -> ConnectionStatus:
        if not self.initialize():
            return ConnectionStatus(success=False, message="API Key missing")
        try:
            response = await self.client.ainvoke([HumanMessage(content="Say 'OK'")])
            return ConnectionStatus(success=True, message=extract_response_text(response))
        except Exception as e:
            return ConnectionStatus(success=False, message=str(e))

    async def extract_text_from_image(self, image_bytes: bytes, mime_type: str) -> List[ExtractedLine]:
        self._require_client()
        logger.info("[gemini] Extracting text from image (%s, %d bytes)", mime_type, len(image_bytes))
        text = await self._invoke(build_image_message(OCR_EXTRACTION_PROMPT, image_bytes, mime_type))
        lines = parse_ocr_response(text)
        logger.info("[gemini] Extracted %d text lines", len(lines))
        return lines

    async def extract_and_translate(
        self,
        image_bytes: bytes,
        mime_type: str,
        target_languages: Sequence[str],
        glossary_terms: Optional[List[GlossaryTerm]] = None,
    ) -> List[ExtractedTranslation]:
        self._require_client()
        prompt = build_extract_and_translate_prompt(target_languages, glossary_terms)
        text = await self._invoke(build_image_message(prompt, image_bytes, mime_type))
        lines = parse_extract_and_translate_response(text, target_languages)
        logger.info("[gemini] Extracted and translated %d lines", len(lines))
        return lines
