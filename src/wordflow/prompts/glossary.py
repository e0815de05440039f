"""Lite-RAG glossary filtering and the glossary sections of prompts."""

import json
import logging
from typing import Iterable, List, Optional

from ..models.row import GlossaryTerm

logger = logging.getLogger("wordflow.glossary")


def filter_relevant(terms: Optional[Iterable[GlossaryTerm]], texts: Iterable[str]) -> List[GlossaryTerm]:
    """
    Keep only the glossary terms that occur in the given texts.

    Matching is plain case-insensitive substring containment against one
    concatenation of all texts. No tokenization or stemming: an overlapping but
    irrelevant term may slip in, a real match is never dropped.

    Args:
        terms: Approved glossary terms (may be None or empty)
        texts: Source texts of the current batch

    Returns:
        The matching terms, in their original order
    """
    if not terms:
        return []
    terms = list(terms)
    combined = " ".join(text or "" for text in texts).lower()
    relevant = [
        term for term in terms
        if term.source_term and term.source_term.lower() in combined
    ]
    logger.debug("Glossary filtered %d terms -> %d relevant", len(terms), len(relevant))
    return relevant


def build_glossary_table(terms: List[GlossaryTerm]) -> str:
    """Markdown table section for single-prompt providers. Empty when no terms."""
    if not terms:
        return ""
    lines = [
        f"| {term.source_term} | {json.dumps(term.translations, ensure_ascii=False)} |"
        for term in terms
    ]
    return (
        "## Mandatory Glossary\n"
        "Use these exact translations if the term appears:\n"
        "| Term | Translations |\n"
        "|---|---|\n"
        + "\n".join(lines)
    )


def build_glossary_list(terms: List[GlossaryTerm]) -> str:
    """Bullet list section for chat system prompts. Empty when no terms."""
    if not terms:
        return ""
    lines = [
        f"- {term.source_term}: {json.dumps(term.translations, ensure_ascii=False)}"
        for term in terms
    ]
    return (
        "## Mandatory Glossary\n"
        "Use these exact translations if the term appears:\n"
        + "\n".join(lines)
    )
