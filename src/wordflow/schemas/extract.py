"""Image extraction API schemas."""

from typing import List
from pydantic import BaseModel

from ..models.extraction import ExtractedLine, ExtractedTranslation


class ExtractResponse(BaseModel):
    provider: str
    lines: List[ExtractedLine]
    count: int


class ExtractTranslateResponse(BaseModel):
    provider: str
    target_languages: List[str]
    items: List[ExtractedTranslation]
    count: int
