"""Tests for the provider implementations."""

import json

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from src.wordflow.config import Settings
from src.wordflow.errors import (
    CapabilityNotSupportedError,
    ProviderNotConfiguredError,
    RateLimitedError,
    ResponseParseError,
)
from src.wordflow.models.row import BatchOptions, GlossaryTerm, SourceItem, Template
from src.wordflow.models.status import TranslationStatus
from src.wordflow.providers.base import CAPABILITY_EXTRACT_TEXT, extract_response_text
from src.wordflow.providers.gemini import GeminiProvider, build_image_message
from src.wordflow.providers.openai_compat import OpenAICompatibleProvider, normalize_base_url


@pytest.fixture
def mock_settings():
    """Settings with both providers configured."""
    return Settings(
        GEMINI_API_KEY="test-gemini-key",
        OPENAI_COMPAT_API_KEY="test-compat-key",
        OPENAI_COMPAT_ENDPOINT="https://llm.example.com/v1/chat/completions",
    )


@pytest.fixture
def items():
    return [SourceItem(id="1", text="Hello", context="banner"), SourceItem(id="2", text="Sign up")]


@pytest.fixture
def options():
    return BatchOptions(
        source_language="en",
        target_languages=["ms"],
        template=Template(prompt_body="Translate into {{targetLanguage}}."),
        glossary_terms=[GlossaryTerm(source_term="Sign up", translations={"ms": "Daftar"})],
    )


def model_reply(items, lang="ms"):
    return AIMessage(content=json.dumps([
        {"id": item.id, "translations": {lang: {"text": f"{item.text}-{lang}"}}} for item in items
    ]))


class TestExtractResponseText:
    """Test normalization of vendor response shapes."""

    def test_plain_string(self):
        assert extract_response_text("hi") == "hi"

    def test_langchain_message(self):
        assert extract_response_text(AIMessage(content="hi")) == "hi"

    def test_content_parts(self):
        message = AIMessage(content=[{"type": "text", "text": "a"}, {"type": "text", "text": "b"}])
        assert extract_response_text(message) == "ab"

    def test_callable_text(self):
        response = MagicMock(spec=["text"])
        response.text = lambda: "from text()"
        assert extract_response_text(response) == "from text()"

    def test_nested_response(self):
        inner = MagicMock(spec=["text"])
        inner.text = "nested"
        outer = MagicMock(spec=["response"])
        outer.response = inner
        assert extract_response_text(outer) == "nested"

    def test_candidates(self):
        part = MagicMock(spec=["text"])
        part.text = "candidate"
        content = MagicMock(spec=["parts"])
        content.parts = [part]
        candidate = MagicMock(spec=["content"])
        candidate.content = content
        response = MagicMock(spec=["candidates"])
        response.candidates = [candidate]
        assert extract_response_text(response) == "candidate"

    def test_chat_completion_dict(self):
        response = {"choices": [{"message": {"content": "[]"}}]}
        assert extract_response_text(response) == "[]"

    def test_unknown_shape(self):
        assert extract_response_text(None) == ""
        assert extract_response_text({"foo": 1}) == ""


class TestGeminiProvider:
    """Test GeminiProvider."""

    @patch("src.wordflow.providers.gemini.ChatGoogleGenerativeAI")
    def test_initialize_creates_client_once(self, mock_gemini, mock_settings):
        with patch("src.wordflow.providers.gemini.get_settings", return_value=mock_settings):
            provider = GeminiProvider()
        assert provider.initialize()
        assert provider.initialize()
        mock_gemini.assert_called_once()
        assert mock_gemini.call_args[1]["google_api_key"] == "test-gemini-key"
        assert mock_gemini.call_args[1]["model"] == "gemini-2.0-flash"

    def test_not_configured(self):
        with patch("src.wordflow.providers.gemini.get_settings", return_value=Settings(GEMINI_API_KEY=None)):
            provider = GeminiProvider()
        assert not provider.initialize()

    @pytest.mark.asyncio
    async def test_generate_batch_requires_key(self, items, options):
        with patch("src.wordflow.providers.gemini.get_settings", return_value=Settings(GEMINI_API_KEY=None)):
            provider = GeminiProvider()
        with pytest.raises(ProviderNotConfiguredError):
            await provider.generate_batch(items, options)

    @pytest.mark.asyncio
    @patch("src.wordflow.providers.gemini.ChatGoogleGenerativeAI")
    async def test_generate_batch(self, mock_gemini, mock_settings, items, options):
        client = MagicMock()
        client.ainvoke = AsyncMock(return_value=model_reply(items))
        mock_gemini.return_value = client
        with patch("src.wordflow.providers.gemini.get_settings", return_value=mock_settings):
            provider = GeminiProvider()

        results = await provider.generate_batch(items, options)

        assert [r.id for r in results] == ["1", "2"]
        assert results[1].translations["ms"].text == "Sign up-ms"
        assert results[1].translations["ms"].status == TranslationStatus.REVIEW
        prompt = client.ainvoke.call_args[0][0][0].content
        assert "Bahasa Malaysia" in prompt
        assert "Daftar" in prompt

    @pytest.mark.asyncio
    @patch("src.wordflow.providers.gemini.ChatGoogleGenerativeAI")
    async def test_generate_batch_accepts_dicts(self, mock_gemini, mock_settings, items):
        client = MagicMock()
        client.ainvoke = AsyncMock(return_value=model_reply(items))
        mock_gemini.return_value = client
        with patch("src.wordflow.providers.gemini.get_settings", return_value=mock_settings):
            provider = GeminiProvider()

        results = await provider.generate_batch(
            [{"id": 1, "text": "Hello"}, {"id": 2, "text": "Sign up"}],
            {"target_languages": ["ms"], "template": {"prompt_body": "Be brief."}},
        )
        assert [r.id for r in results] == ["1", "2"]

    @pytest.mark.asyncio
    @patch("src.wordflow.providers.gemini.ChatGoogleGenerativeAI")
    async def test_rate_limit_is_classified(self, mock_gemini, mock_settings, items, options):
        client = MagicMock()
        client.ainvoke = AsyncMock(side_effect=Exception("429 Resource has been exhausted"))
        mock_gemini.return_value = client
        with patch("src.wordflow.providers.gemini.get_settings", return_value=mock_settings):
            provider = GeminiProvider()

        with pytest.raises(RateLimitedError):
            await provider.generate_batch(items, options)

    @pytest.mark.asyncio
    @patch("src.wordflow.providers.gemini.ChatGoogleGenerativeAI")
    async def test_other_errors_propagate(self, mock_gemini, mock_settings, items, options):
        client = MagicMock()
        client.ainvoke = AsyncMock(side_effect=ConnectionError("network down"))
        mock_gemini.return_value = client
        with patch("src.wordflow.providers.gemini.get_settings", return_value=mock_settings):
            provider = GeminiProvider()

        with pytest.raises(ConnectionError):
            await provider.generate_batch(items, options)

    @pytest.mark.asyncio
    @patch("src.wordflow.providers.gemini.ChatGoogleGenerativeAI")
    async def test_unparseable_reply(self, mock_gemini, mock_settings, items, options):
        client = MagicMock()
        client.ainvoke = AsyncMock(return_value=AIMessage(content="I cannot help with that"))
        mock_gemini.return_value = client
        with patch("src.wordflow.providers.gemini.get_settings", return_value=mock_settings):
            provider = GeminiProvider()

        with pytest.raises(ResponseParseError):
            await provider.generate_batch(items, options)

    @pytest.mark.asyncio
    @patch("src.wordflow.providers.gemini.ChatGoogleGenerativeAI")
    async def test_extract_text_from_image(self, mock_gemini, mock_settings):
        client = MagicMock()
        client.ainvoke = AsyncMock(return_value=AIMessage(content='[{"id": 1, "text": "Sale"}]'))
        mock_gemini.return_value = client
        with patch("src.wordflow.providers.gemini.get_settings", return_value=mock_settings):
            provider = GeminiProvider()

        lines = await provider.extract_text_from_image(b"\x89PNG", "image/png")

        assert [(l.id, l.text) for l in lines] == [("1", "Sale")]
        message = client.ainvoke.call_args[0][0][0]
        assert message.content[0]["type"] == "text"
        assert message.content[1]["image_url"].startswith("data:image/png;base64,")

    @pytest.mark.asyncio
    @patch("src.wordflow.providers.gemini.ChatGoogleGenerativeAI")
    async def test_test_connection(self, mock_gemini, mock_settings):
        client = MagicMock()
        client.ainvoke = AsyncMock(return_value=AIMessage(content="OK"))
        mock_gemini.return_value = client
        with patch("src.wordflow.providers.gemini.get_settings", return_value=mock_settings):
            provider = GeminiProvider()

        status = await provider.test_connection()
        assert status.success
        assert status.message == "OK"

    def test_image_message_parts(self):
        message = build_image_message("Read this", b"abc", "image/jpeg")
        assert isinstance(message, HumanMessage)
        assert message.content[0] == {"type": "text", "text": "Read this"}
        assert message.content[1]["image_url"] == "data:image/jpeg;base64,YWJj"


class TestOpenAICompatibleProvider:
    """Test OpenAICompatibleProvider."""

    def test_normalize_base_url(self):
        assert normalize_base_url("https://x.test/v1/chat/completions") == "https://x.test/v1"
        assert normalize_base_url("https://x.test/v1/") == "https://x.test/v1"
        assert normalize_base_url(None) is None

    @patch("src.wordflow.providers.openai_compat.ChatOpenAI")
    def test_initialize(self, mock_openai, mock_settings):
        with patch("src.wordflow.providers.openai_compat.get_settings", return_value=mock_settings):
            provider = OpenAICompatibleProvider()
        assert provider.initialize()
        kwargs = mock_openai.call_args[1]
        assert kwargs["base_url"] == "https://llm.example.com/v1"
        assert kwargs["model"] == "ilmu-preview"
        assert kwargs["max_tokens"] == 4096

    @pytest.mark.asyncio
    @patch("src.wordflow.providers.openai_compat.ChatOpenAI")
    async def test_generate_batch_uses_system_and_user_roles(self, mock_openai, mock_settings, items, options):
        client = MagicMock()
        client.ainvoke = AsyncMock(return_value=model_reply(items))
        mock_openai.return_value = client
        with patch("src.wordflow.providers.openai_compat.get_settings", return_value=mock_settings):
            provider = OpenAICompatibleProvider()

        results = await provider.generate_batch(items, options)

        assert results[0].translations["ms"].text == "Hello-ms"
        messages = client.ainvoke.call_args[0][0]
        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[1], HumanMessage)
        assert "Daftar" in messages[0].content
        assert '"id": "2"' in messages[1].content

    @pytest.mark.asyncio
    @patch("src.wordflow.providers.openai_compat.ChatOpenAI")
    async def test_test_connection_failure(self, mock_openai, mock_settings):
        client = MagicMock()
        client.ainvoke = AsyncMock(side_effect=RuntimeError("401 Unauthorized"))
        mock_openai.return_value = client
        with patch("src.wordflow.providers.openai_compat.get_settings", return_value=mock_settings):
            provider = OpenAICompatibleProvider()

        status = await provider.test_connection()
        assert not status.success
        assert "401" in status.message

    @pytest.mark.asyncio
    async def test_image_capability_not_supported(self, mock_settings):
        with patch("src.wordflow.providers.openai_compat.get_settings", return_value=mock_settings):
            provider = OpenAICompatibleProvider()
        assert not provider.supports(CAPABILITY_EXTRACT_TEXT)
        with pytest.raises(CapabilityNotSupportedError):
            await provider.extract_text_from_image(b"abc", "image/png")
