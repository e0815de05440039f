"""Prompts for batch translation and image text extraction."""

import json
import re
from typing import List, Optional, Sequence

from ..errors import MissingTemplateError
from ..models.row import GlossaryTerm, SourceItem, Template
from ..utils.languages import join_language_names, language_display_name
from .glossary import build_glossary_list, build_glossary_table


TRANSLATION_PROMPT = """You are a professional translator. Translate from {source_language} to: {target_languages}.

## Instructions
{instructions}

{glossary_section}## Input Data (JSON)
Each object has an "id" (return it unchanged), the "text" to translate and an optional "context" describing where the text is used. Never translate the context.
```json
{payload}
```

## Required Output Format
Return a JSON array with exactly one object per input "id". Each object must have the "id" and a "translations" object containing every target language code: {language_codes}.
Example:
```json
{example}
```

IMPORTANT:
- Return ONLY valid JSON.
- Ensure every target language is present in the "translations" object.
"""


SYSTEM_PROMPT = """You are a professional translator.
Source Language: {source_language}
Target Languages: {target_languages}

## Instructions
{instructions}
{glossary_section}
## Output Requirements
Return ONLY a valid JSON array with this exact structure, one object per input "id":
{example}

Rules:
- Return ONLY valid JSON (no markdown, no extra text)
- Include ALL target languages ({language_codes}) in each translations object
- Never translate the "context" field"""


USER_PROMPT = """Translate the following items to {language_codes}:

```json
{payload}
```"""


OCR_EXTRACTION_PROMPT = """You are an OCR expert. Extract ALL text from this image.

## Instructions:
1. Identify every piece of text visible in the image
2. Extract each distinct text element as a separate line
3. Preserve the original text exactly as it appears
4. Include headings, body text, buttons, labels, etc.
5. Order the text from top to bottom, left to right

## Output Format:
Return a JSON array where each item has:
- "id": A sequential number starting from 1
- "text": The extracted text exactly as it appears in the image

Example:
```json
[
  {"id": 1, "text": "Welcome to our service"},
  {"id": 2, "text": "Sign Up"}
]
```

IMPORTANT:
- Return ONLY the JSON array, no other text
- If no text is found, return an empty array []
- Preserve line breaks within text as \\n"""


EXTRACT_AND_TRANSLATE_PROMPT = """You are an OCR and translation expert. Extract ALL text from this image and translate each line to: {target_languages}.

## Instructions:
1. Identify every piece of text visible in the image
2. Extract each distinct text element as a separate line
3. Translate each line to every target language
4. Preserve any placeholders like {{name}} or {{{{variable}}}}
{glossary_section}
## Output Format:
Return a JSON array where each item has:
- "id": A sequential number starting from 1
- "text": The original text from the image
- "translations": an object keyed by {language_codes}

Example:
```json
{example}
```

IMPORTANT: Return ONLY the JSON array, no other text."""


_LANGUAGE_PLACEHOLDER = re.compile(r"\{\{\s*target_?language\s*\}\}|\{\s*target_?language\s*\}", re.IGNORECASE)


def process_template(template: Optional[Template], target_languages: Sequence[str]) -> str:
    """
    Resolve a style template into instructions for the model.

    Every ``{{targetLanguage}}`` placeholder (any case, also the
    ``{{target_language}}`` and single-brace spellings) becomes the comma-joined
    display names of the target languages.

    Raises:
        MissingTemplateError: if no template or prompt body was supplied
    """
    if template is None or not (template.prompt_body or "").strip():
        raise MissingTemplateError()
    names = join_language_names(target_languages)
    return _LANGUAGE_PLACEHOLDER.sub(lambda _: names, template.prompt_body)


def _payload(items: Sequence[SourceItem]) -> str:
    return json.dumps(
        [{"id": item.id, "text": item.text, "context": item.context} for item in items],
        ensure_ascii=False,
        indent=2,
    )


def _output_example(items: Sequence[SourceItem], target_languages: Sequence[str]) -> str:
    first_id = items[0].id if items else "1"
    langs = list(target_languages) or ["lang1"]
    example = [{
        "id": first_id,
        "translations": {lang: {"text": "Translated text..."} for lang in langs},
    }]
    return json.dumps(example, ensure_ascii=False, indent=2)


def _language_codes(target_languages: Sequence[str]) -> str:
    return ", ".join(f'"{lang}"' for lang in target_languages)


def build_translation_prompt(
    source_items: Sequence[SourceItem],
    template: Optional[Template],
    target_languages: Sequence[str],
    glossary: Optional[List[GlossaryTerm]] = None,
    source_language: str = "en",
) -> str:
    """
    Assemble the single-string translation prompt.

    Args:
        source_items: Rows to translate as ``{id, text, context}``
        template: Style template; required
        target_languages: Target language codes
        glossary: Already-filtered glossary terms; the section is omitted when empty
        source_language: Source language code

    Returns:
        Formatted prompt string
    """
    instructions = process_template(template, target_languages)
    glossary_section = build_glossary_table(glossary or [])
    return TRANSLATION_PROMPT.format(
        source_language=language_display_name(source_language),
        target_languages=join_language_names(target_languages),
        instructions=instructions,
        glossary_section=f"{glossary_section}\n\n" if glossary_section else "",
        payload=_payload(source_items),
        language_codes=_language_codes(target_languages),
        example=_output_example(source_items, target_languages),
    )


def build_system_prompt(
    template: Optional[Template],
    target_languages: Sequence[str],
    glossary: Optional[List[GlossaryTerm]] = None,
    source_language: str = "en",
    example_items: Sequence[SourceItem] = (),
) -> str:
    """System message for chat-completion providers."""
    instructions = process_template(template, target_languages)
    glossary_section = build_glossary_list(glossary or [])
    return SYSTEM_PROMPT.format(
        source_language=language_display_name(source_language),
        target_languages=join_language_names(target_languages),
        instructions=instructions,
        glossary_section=f"\n{glossary_section}\n" if glossary_section else "",
        example=_output_example(example_items, target_languages),
        language_codes=_language_codes(target_languages),
    )


def build_user_prompt(source_items: Sequence[SourceItem], target_languages: Sequence[str]) -> str:
    """User message carrying the JSON payload for chat-completion providers."""
    return USER_PROMPT.format(
        language_codes=", ".join(target_languages),
        payload=_payload(source_items),
    )


def build_extract_and_translate_prompt(
    target_languages: Sequence[str],
    glossary: Optional[List[GlossaryTerm]] = None,
) -> str:
    glossary_section = build_glossary_list(glossary or [])
    langs = list(target_languages) or ["lang1"]
    example = json.dumps(
        [{"id": 1, "text": "Welcome", "translations": {lang: "..." for lang in langs}}],
        ensure_ascii=False,
        indent=2,
    )
    return EXTRACT_AND_TRANSLATE_PROMPT.format(
        target_languages=join_language_names(target_languages),
        glossary_section=f"\n{glossary_section}\n" if glossary_section else "",
        language_codes=_language_codes(target_languages),
        example=example,
    )
