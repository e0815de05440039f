"""Translation queue API schemas."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from ..models.row import Template


class TranslateRequest(BaseModel):
    """API request model for queueing rows for translation."""
    row_ids: Optional[List[str]] = Field(
        None, description="Rows to translate; every pending row of the project when omitted"
    )
    target_languages: List[str] = Field(..., min_length=1, description="Language codes to translate into")
    source_language: Optional[str] = Field(None, description="Source language code; defaults to the configured one")
    template: Optional[Template] = Field(None, description="Style template with a prompt body")
    provider: Optional[str] = Field(None, description="Provider name; the default provider when omitted")
    api_key: Optional[str] = Field(None, description="Optional per-user API key for the provider")
    batch_size: Optional[int] = Field(None, ge=1, description="Rows per request; the configured default when omitted")


class TranslateResponse(BaseModel):
    project_id: str
    queued_rows: int
    batches: int
    run: Dict[str, Any] = Field(..., description="Snapshot of the run after enqueueing")


class CancelRequest(BaseModel):
    abort: bool = Field(False, description="Also abort the in-flight provider request")


class CancelResponse(BaseModel):
    project_id: str
    reverted_rows: int
    run: Dict[str, Any]
