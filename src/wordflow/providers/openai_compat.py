"""OpenAI-compatible chat-completion provider (e.g. ILMUchat)."""

import logging
import time
from typing import Any, Dict, List, Optional, Sequence, Union

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from ..config import get_settings
from ..errors import ProviderNotConfiguredError
from ..models.row import BatchItemResult, BatchOptions, ConnectionStatus, SourceItem
from ..prompts.translation import build_system_prompt, build_user_prompt
from ..services.parser import parse_batch_response
from .base import BaseProvider, coerce_items, coerce_options, extract_response_text

logger = logging.getLogger("wordflow.providers.openai_compat")

DEFAULT_MAX_TOKENS = 4096
TEST_MAX_TOKENS = 10


def normalize_base_url(endpoint: Optional[str]) -> Optional[str]:
    """Accept either an API root or a full ``.../chat/completions`` URL."""
    if not endpoint:
        return None
    endpoint = endpoint.rstrip("/")
    suffix = "/chat/completions"
    if endpoint.endswith(suffix):
        endpoint = endpoint[: -len(suffix)]
    return endpoint


class OpenAICompatibleProvider(BaseProvider):
    """Chat completions with system/user roles against any OpenAI-compatible endpoint."""

    name = "openai_compat"
    description = "OpenAI-compatible chat completions (ILMUchat and similar)"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, endpoint: Optional[str] = None,
                 temperature: float = 0.3, max_tokens: int = DEFAULT_MAX_TOKENS):
        settings = get_settings()
        super().__init__(
            api_key=api_key or settings.openai_compat_api_key,
            model=model or settings.openai_compat_model,
            endpoint=normalize_base_url(endpoint or settings.openai_compat_endpoint),
        )
        self.temperature = temperature
        self.max_tokens = max_tokens

    def initialize(self) -> bool:
        if not self.api_key:
            logger.warning("[openai_compat] No API key found")
            return False
        if self.client is None:
            self.client = ChatOpenAI(
                api_key=self.api_key,
                model=self.model,
                base_url=self.endpoint,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        return True

    async def _execute(self, messages: List[Any], **kwargs) -> str:
        start = time.time()
        logger.debug("[openai_compat] Requesting %s (model=%s)", self.endpoint, self.model)
        try:
            response = await self.client.ainvoke(messages, **kwargs)
        except Exception as e:
            self._raise_provider_error(e)
        logger.info("[openai_compat] Response in %dms", int((time.time() - start) * 1000))
        return extract_response_text(response)

    async def generate_batch(
        self,
        items: Sequence[Union[SourceItem, Dict[str, Any]]],
        options: Optional[Union[BatchOptions, Dict[str, Any]]] = None,
    ) -> List[BatchItemResult]:
        if not self.initialize():
            raise ProviderNotConfiguredError(self.name)
        items = coerce_items(items)
        options = coerce_options(options)

        system_prompt = build_system_prompt(
            options.template,
            options.target_languages,
            options.glossary_terms,
            options.source_language,
            example_items=items,
        )
        user_prompt = build_user_prompt(items, options.target_languages)
        logger.info("[openai_compat] Batch request: %d items -> %s", len(items), options.target_languages)

        content = await self._execute([
            SystemMessage(content=system_prompt),
            HumanMessage(content=user_prompt),
        ])
        return parse_batch_response(content, items, options.target_languages)

    async def test_connection(self) -> ConnectionStatus:
        if not self.initialize():
            return ConnectionStatus(success=False, message="API Key missing")
        try:
            content = await self._execute([HumanMessage(content="Say 'OK'")], max_tokens=TEST_MAX_TOKENS)
            return ConnectionStatus(success=True, message=content or "Connected")
        except Exception as e:
            return ConnectionStatus(success=False, message=str(e))
