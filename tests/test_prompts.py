"""Tests for translation prompt assembly."""

import json
import re

import pytest

from src.wordflow.errors import MissingTemplateError
from src.wordflow.models.row import GlossaryTerm, SourceItem, Template
from src.wordflow.prompts.translation import (
    build_extract_and_translate_prompt,
    build_system_prompt,
    build_translation_prompt,
    build_user_prompt,
    process_template,
)


@pytest.fixture
def items():
    return [
        SourceItem(id="r1", text="Hello", context="banner"),
        SourceItem(id="r2", text="Buy now", context=None),
    ]


@pytest.fixture
def template():
    return Template(name="Friendly", prompt_body="Translate into {{targetLanguage}} with a warm tone.")


def _payload_block(prompt: str):
    match = re.search(r"## Input Data \(JSON\).*?```json\n(.*?)\n```", prompt, re.S)
    assert match, "payload block not found"
    return json.loads(match.group(1))


class TestProcessTemplate:
    """Test style template resolution."""

    def test_replaces_placeholder_with_language_names(self, template):
        result = process_template(template, ["my", "zh"])
        assert result == "Translate into Bahasa Malaysia, 中文 with a warm tone."

    def test_placeholder_variants(self):
        body = "A {{TargetLanguage}} B {{target_language}} C {targetLanguage}"
        result = process_template(Template(prompt_body=body), ["ms"])
        assert result == "A Bahasa Malaysia B Bahasa Malaysia C Bahasa Malaysia"

    def test_unknown_code_is_used_verbatim(self, template):
        assert "fr" in process_template(template, ["fr"])

    @pytest.mark.parametrize("bad", [None, Template(prompt_body=None), Template(prompt_body="   ")])
    def test_missing_template_raises(self, bad):
        with pytest.raises(MissingTemplateError):
            process_template(bad, ["ms"])


class TestBuildTranslationPrompt:
    """Test the single-string translation prompt."""

    def test_payload_round_trips_ids_text_and_context(self, items, template):
        prompt = build_translation_prompt(items, template, ["ms"])
        payload = _payload_block(prompt)
        assert payload == [
            {"id": "r1", "text": "Hello", "context": "banner"},
            {"id": "r2", "text": "Buy now", "context": None},
        ]

    def test_languages_and_instructions_present(self, items, template):
        prompt = build_translation_prompt(items, template, ["ms", "zh"], source_language="en")
        assert "Translate from English to: Bahasa Malaysia, 中文" in prompt
        assert "with a warm tone" in prompt
        assert '"ms", "zh"' in prompt
        assert "{{targetLanguage}}" not in prompt

    def test_glossary_section_omitted_when_empty(self, items, template):
        prompt = build_translation_prompt(items, template, ["ms"], glossary=[])
        assert "Mandatory Glossary" not in prompt

    def test_glossary_section_included(self, items, template):
        glossary = [GlossaryTerm(source_term="Buy", translations={"ms": "Beli"})]
        prompt = build_translation_prompt(items, template, ["ms"], glossary=glossary)
        assert "## Mandatory Glossary" in prompt
        assert "| Buy |" in prompt

    def test_example_uses_first_item_id(self, items, template):
        prompt = build_translation_prompt(items, template, ["ms"])
        assert '"id": "r1"' in prompt

    def test_missing_template_raises(self, items):
        with pytest.raises(MissingTemplateError):
            build_translation_prompt(items, None, ["ms"])


class TestChatPrompts:
    """Test the system/user prompt pair for chat providers."""

    def test_system_prompt(self, items, template):
        glossary = [GlossaryTerm(source_term="Hello", translations={"ms": "Helo"})]
        prompt = build_system_prompt(template, ["ms"], glossary, "en", example_items=items)
        assert "Target Languages: Bahasa Malaysia" in prompt
        assert "- Hello:" in prompt
        assert "Never translate" in prompt

    def test_user_prompt_carries_payload(self, items):
        prompt = build_user_prompt(items, ["ms", "zh"])
        assert prompt.startswith("Translate the following items to ms, zh")
        assert '"id": "r2"' in prompt

    def test_extract_and_translate_prompt(self):
        prompt = build_extract_and_translate_prompt(["zh"])
        assert "中文" in prompt
        assert "{name}" in prompt
        assert "Mandatory Glossary" not in prompt
