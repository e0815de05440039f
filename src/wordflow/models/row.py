"""Data model for content rows, glossary terms, templates and batches."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from .status import RowStatus, TranslationStatus


class TranslationSlot(BaseModel):
    """Translated text for one target language."""
    text: str = Field("", description="Translated text")
    status: TranslationStatus = Field(TranslationStatus.PENDING, description="Status of this language slot")


class Row(BaseModel):
    """A unit of translatable content."""
    id: str = Field(..., description="Opaque identifier, stable for the row's lifetime")
    source_text: str = Field("", description="Text in the source language")
    context: Optional[str] = Field(None, description="Hint such as 'banner' or 'page: Homepage/Hero'; never translated")
    translations: Dict[str, TranslationSlot] = Field(default_factory=dict)
    status: RowStatus = Field(RowStatus.PENDING)
    template_used: Optional[str] = None
    translated_at: Optional[str] = None
    error_message: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return str(v)


class GlossaryTerm(BaseModel):
    """An approved term and its mandatory translations."""
    source_term: str = Field(..., description="The term as it appears in source-language text")
    translations: Dict[str, str] = Field(default_factory=dict, description="Language code -> required translation")
    category: Optional[str] = Field(None, description="Free-form grouping, e.g. 'brand' or 'product'")


class Template(BaseModel):
    """A style template. ``prompt_body`` may contain ``{{targetLanguage}}``."""
    name: str = Field("Default")
    prompt_body: Optional[str] = Field(None, description="Style instructions for the model")
    variables: List[str] = Field(default_factory=list)


class SourceItem(BaseModel):
    """What a provider receives for one row: never the stale translations."""
    id: str
    text: str = ""
    context: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return str(v)

    @classmethod
    def from_row(cls, row: Row) -> "SourceItem":
        return cls(id=row.id, text=row.source_text, context=row.context)


class BatchItemResult(BaseModel):
    """One parsed result per requested row."""
    id: str
    translations: Dict[str, TranslationSlot] = Field(default_factory=dict)

    @property
    def is_partial(self) -> bool:
        return any(slot.status == TranslationStatus.PARTIAL for slot in self.translations.values())


class BatchOptions(BaseModel):
    """Options passed to ``BaseProvider.generate_batch``."""
    source_language: str = "en"
    target_languages: List[str] = Field(default_factory=list)
    template: Optional[Template] = None
    glossary_terms: List[GlossaryTerm] = Field(default_factory=list)


class RowUpdate(BaseModel):
    """A partial update sent to the row store."""
    id: str
    changes: Dict[str, Any] = Field(default_factory=dict)


class Batch(BaseModel):
    """An ephemeral group of rows sent to the provider in one request."""
    batch_id: str
    project_id: str
    rows: List[Row]
    template: Template
    target_languages: List[str]
    source_language: str = "en"
    glossary: List[GlossaryTerm] = Field(default_factory=list)

    @property
    def row_ids(self) -> List[str]:
        return [row.id for row in self.rows]


class QueueProgress(BaseModel):
    """Caller-visible progress of a run, counted in batches."""
    current: int = 0
    total: int = 0


class ConnectionStatus(BaseModel):
    success: bool
    message: str = ""
