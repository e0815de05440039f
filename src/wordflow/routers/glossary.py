"""Approved glossary endpoints."""

from fastapi import APIRouter, HTTPException
from ..prompts.glossary import filter_relevant
from ..schemas.glossary import AddTermsRequest, GlossaryResponse, RelevantTermsRequest
from ..store import get_glossary_store

router = APIRouter(prefix="/glossary", tags=["Glossary"])


@router.get("/terms", response_model=GlossaryResponse)
async def list_terms():
    terms = get_glossary_store().fetch_approved_glossary()
    return GlossaryResponse(terms=terms, count=len(terms))


@router.post("/terms", response_model=GlossaryResponse)
async def add_terms(request: AddTermsRequest):
    """Add approved terms. A term with the same source text (ignoring case) is replaced."""
    added = get_glossary_store().add_terms(request.terms)
    return GlossaryResponse(terms=added, count=len(added))


@router.delete("/terms/{source_term}")
async def delete_term(source_term: str):
    if not get_glossary_store().delete_term(source_term):
        raise HTTPException(status_code=404, detail=f"Glossary term '{source_term}' not found")
    return {"status": "deleted", "source_term": source_term}


@router.post("/relevant", response_model=GlossaryResponse)
async def relevant_terms(request: RelevantTermsRequest):
    """Return the approved terms that appear in the given texts, as a batch would receive them."""
    terms = filter_relevant(get_glossary_store().fetch_approved_glossary(), request.texts)
    return GlossaryResponse(terms=terms, count=len(terms))
