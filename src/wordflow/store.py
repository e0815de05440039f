"""
Simple in-memory stores for rows and the approved glossary.

They stand in for the external document store: the queue only talks to them
through ``update_rows`` and ``fetch_approved_glossary``.
"""

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional

from .models.row import GlossaryTerm, Row, RowUpdate, TranslationSlot
from .models.status import ReviewAction, RowStatus, TranslationStatus, review_target

logger = logging.getLogger("wordflow.store")


class RowNotFoundError(KeyError):
    """Unknown project or row id."""


class InMemoryRowStore:
    """Rows grouped per project, in insertion order."""

    def __init__(self):
        self._projects: Dict[str, "OrderedDict[str, Row]"] = {}

    def add_rows(self, project_id: str, rows: Iterable[Row]) -> List[Row]:
        project = self._projects.setdefault(project_id, OrderedDict())
        added = []
        for row in rows:
            project[row.id] = row.model_copy(deep=True)
            added.append(project[row.id].model_copy(deep=True))
        return added

    def has_project(self, project_id: str) -> bool:
        return project_id in self._projects

    def get_rows(
        self,
        project_id: str,
        status: Optional[RowStatus] = None,
        ids: Optional[Iterable[str]] = None,
    ) -> List[Row]:
        project = self._projects.get(project_id, OrderedDict())
        if ids is not None:
            wanted = [str(i) for i in ids]
            missing = [i for i in wanted if i not in project]
            if missing:
                raise RowNotFoundError(f"Unknown rows in project '{project_id}': {missing}")
            rows = [project[i] for i in wanted]
        else:
            rows = list(project.values())
        if status is not None:
            rows = [row for row in rows if row.status == RowStatus(status)]
        return [row.model_copy(deep=True) for row in rows]

    def get_row(self, project_id: str, row_id: str) -> Row:
        return self.get_rows(project_id, ids=[row_id])[0]

    def _stored(self, project_id: str, row_id: str) -> Row:
        try:
            return self._projects[project_id][str(row_id)]
        except KeyError:
            raise RowNotFoundError(f"Row '{row_id}' not found in project '{project_id}'")

    def update_rows(self, project_id: str, updates: Iterable[RowUpdate]) -> None:
        """Apply partial updates. ``translations`` are merged per language."""
        for update in updates:
            try:
                row = self._stored(project_id, update.id)
            except RowNotFoundError:
                logger.warning("Skipping update for unknown row %s/%s", project_id, update.id)
                continue
            for field, value in update.changes.items():
                if field == "translations":
                    for lang, slot in (value or {}).items():
                        row.translations[lang] = TranslationSlot.model_validate(slot)
                elif field == "status":
                    row.status = RowStatus(value)
                elif field in Row.model_fields and field != "id":
                    setattr(row, field, value)

    def apply_review(self, project_id: str, row_id: str, action: ReviewAction) -> Row:
        """Approve, reject or reset a row according to the state machine."""
        row = self._stored(project_id, row_id)
        target = review_target(row.status, action)
        row.status = target
        slot_status = {
            RowStatus.APPROVED: TranslationStatus.APPROVED,
            RowStatus.REJECTED: TranslationStatus.REJECTED,
            RowStatus.PENDING: TranslationStatus.PENDING,
        }[target]
        for slot in row.translations.values():
            slot.status = slot_status
        return row.model_copy(deep=True)

    def edit_translation(self, project_id: str, row_id: str, language: str, text: str) -> Row:
        """Manual edit: overwrite the text, keep the row status."""
        row = self._stored(project_id, row_id)
        slot = row.translations.get(language)
        if slot is None:
            row.translations[language] = TranslationSlot(text=text, status=TranslationStatus.REVIEW)
        else:
            slot.text = text
        return row.model_copy(deep=True)

    def clear(self) -> int:
        count = sum(len(rows) for rows in self._projects.values())
        self._projects.clear()
        return count


class InMemoryGlossaryStore:
    """Approved glossary terms keyed by lowercase source term."""

    def __init__(self):
        self._terms: "OrderedDict[str, GlossaryTerm]" = OrderedDict()

    def add_terms(self, terms: Iterable[GlossaryTerm]) -> List[GlossaryTerm]:
        added = []
        for term in terms:
            self._terms[term.source_term.lower()] = term.model_copy(deep=True)
            added.append(term)
        return added

    def delete_term(self, source_term: str) -> bool:
        return self._terms.pop(source_term.lower(), None) is not None

    def fetch_approved_glossary(self) -> List[GlossaryTerm]:
        return [term.model_copy(deep=True) for term in self._terms.values()]

    def clear(self) -> int:
        count = len(self._terms)
        self._terms.clear()
        return count


# Global instances
row_store = InMemoryRowStore()
glossary_store = InMemoryGlossaryStore()


def get_row_store() -> InMemoryRowStore:
    """Get the global row store instance."""
    return row_store


def get_glossary_store() -> InMemoryGlossaryStore:
    """Get the global glossary store instance."""
    return glossary_store
