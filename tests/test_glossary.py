"""Tests for glossary filtering and the glossary prompt sections."""

import pytest

from src.wordflow.models.row import GlossaryTerm
from src.wordflow.prompts.glossary import build_glossary_list, build_glossary_table, filter_relevant


@pytest.fixture
def glossary():
    """Approved glossary terms."""
    return [
        GlossaryTerm(source_term="Dashboard", translations={"ms": "Papan Pemuka", "zh": "仪表板"}),
        GlossaryTerm(source_term="Sign Up", translations={"ms": "Daftar"}),
        GlossaryTerm(source_term="Checkout", translations={"ms": "Pembayaran"}),
    ]


class TestFilterRelevant:
    """Test lite-RAG glossary filtering."""

    def test_keeps_only_terms_present_in_texts(self, glossary):
        relevant = filter_relevant(glossary, ["Open your dashboard", "Welcome back"])
        assert [t.source_term for t in relevant] == ["Dashboard"]

    def test_match_is_case_insensitive(self, glossary):
        relevant = filter_relevant(glossary, ["SIGN UP today"])
        assert [t.source_term for t in relevant] == ["Sign Up"]

    def test_preserves_original_order(self, glossary):
        relevant = filter_relevant(glossary, ["checkout", "sign up and see the dashboard"])
        assert [t.source_term for t in relevant] == ["Dashboard", "Sign Up", "Checkout"]

    def test_result_is_subset_of_input(self, glossary):
        relevant = filter_relevant(glossary, ["Dashboard Checkout"])
        assert all(term in glossary for term in relevant)

    def test_substring_matching_allows_false_positives(self):
        terms = [GlossaryTerm(source_term="cat", translations={"ms": "kucing"})]
        # "category" contains "cat"; over-inclusion is accepted
        assert len(filter_relevant(terms, ["Browse by category"])) == 1

    def test_match_across_text_boundary(self):
        terms = [GlossaryTerm(source_term="free trial", translations={"ms": "percubaan percuma"})]
        assert len(filter_relevant(terms, ["Start your free", "trial"])) == 1

    def test_empty_inputs(self, glossary):
        assert filter_relevant([], ["Dashboard"]) == []
        assert filter_relevant(None, ["Dashboard"]) == []
        assert filter_relevant(glossary, []) == []

    def test_empty_source_term_never_matches(self):
        terms = [GlossaryTerm(source_term="", translations={"ms": "x"})]
        assert filter_relevant(terms, ["anything"]) == []


class TestGlossarySections:
    """Test rendering of glossary prompt sections."""

    def test_table_lists_every_term(self, glossary):
        table = build_glossary_table(glossary[:2])
        assert table.startswith("## Mandatory Glossary")
        assert "| Dashboard |" in table
        assert "仪表板" in table
        assert "| Sign Up |" in table

    def test_list_format(self, glossary):
        section = build_glossary_list(glossary[:1])
        assert "- Dashboard:" in section
        assert "Papan Pemuka" in section

    def test_empty_sections(self):
        assert build_glossary_table([]) == ""
        assert build_glossary_list([]) == ""
