from typing import Dict
from pydantic import BaseModel, Field


class ExtractedLine(BaseModel):
    """A single line of text found in an image."""
    id: str
    text: str = ""


class ExtractedTranslation(BaseModel):
    """A line of text found in an image together with its translations."""
    id: str
    source_text: str = ""
    translations: Dict[str, str] = Field(default_factory=dict)

    @property
    def translated(self) -> bool:
        return any(self.translations.values())
