"""Glossary API schemas."""

from typing import List
from pydantic import BaseModel, Field

from ..models.row import GlossaryTerm


class AddTermsRequest(BaseModel):
    terms: List[GlossaryTerm] = Field(..., min_length=1, description="Approved terms to add or replace")


class GlossaryResponse(BaseModel):
    terms: List[GlossaryTerm]
    count: int


class RelevantTermsRequest(BaseModel):
    """Preview which approved terms would be sent along with these texts."""
    texts: List[str] = Field(..., min_length=1, description="Source texts of a prospective batch")
