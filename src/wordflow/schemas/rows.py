"""Row and review API schemas."""

from typing import List, Optional
from pydantic import BaseModel, Field

from ..models.row import Row
from ..models.status import ReviewAction


class RowInput(BaseModel):
    """A row as submitted by a client; status and translations start empty."""
    id: str = Field(..., description="Row identifier, unique within the project")
    source_text: str = Field(..., description="Text in the source language")
    context: Optional[str] = Field(None, description="Placement hint shown to the model, never translated")


class AddRowsRequest(BaseModel):
    rows: List[RowInput] = Field(..., min_length=1, description="Rows to add to the project")


class RowsResponse(BaseModel):
    project_id: str
    rows: List[Row]
    count: int


class ReviewRequest(BaseModel):
    action: ReviewAction = Field(..., description="approve, reject or reset")


class EditTranslationRequest(BaseModel):
    """Manual edit of one language slot."""
    language: str = Field(..., description="Target language code, e.g. 'ms'")
    text: str = Field(..., description="Replacement translation text")
