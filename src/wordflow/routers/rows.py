"""Row endpoints: adding content, listing it and the review workflow."""

from typing import Optional

from fastapi import APIRouter, HTTPException
from ..models.row import Row
from ..models.status import RowStatus
from ..schemas.rows import AddRowsRequest, EditTranslationRequest, ReviewRequest, RowsResponse
from ..store import get_row_store
from ..utils.helpers import to_http_exception

router = APIRouter(prefix="/projects/{project_id}/rows", tags=["Rows"])


@router.post("", response_model=RowsResponse)
async def add_rows(project_id: str, request: AddRowsRequest):
    """Add rows to a project. Re-adding an existing id replaces that row."""
    rows = [Row(id=item.id, source_text=item.source_text, context=item.context) for item in request.rows]
    added = get_row_store().add_rows(project_id, rows)
    return RowsResponse(project_id=project_id, rows=added, count=len(added))


@router.get("", response_model=RowsResponse)
async def list_rows(project_id: str, status: Optional[RowStatus] = None):
    store = get_row_store()
    if not store.has_project(project_id):
        raise HTTPException(status_code=404, detail=f"Project '{project_id}' not found")
    rows = store.get_rows(project_id, status=status)
    return RowsResponse(project_id=project_id, rows=rows, count=len(rows))


@router.get("/{row_id}", response_model=Row)
async def get_row(project_id: str, row_id: str):
    try:
        return get_row_store().get_row(project_id, row_id)
    except Exception as e:
        raise to_http_exception(e)


@router.post("/{row_id}/review", response_model=Row)
async def review_row(project_id: str, row_id: str, request: ReviewRequest):
    """
    Approve, reject or reset a row.

    Approve and reject are allowed from ``review`` and ``partial``; reset
    returns a rejected row to ``pending``. Anything else is a 409.
    """
    try:
        return get_row_store().apply_review(project_id, row_id, request.action)
    except Exception as e:
        raise to_http_exception(e)


@router.patch("/{row_id}", response_model=Row)
async def edit_translation(project_id: str, row_id: str, request: EditTranslationRequest):
    """Overwrite the text of one language slot; the row status is unchanged."""
    try:
        return get_row_store().edit_translation(project_id, row_id, request.language, request.text)
    except Exception as e:
        raise to_http_exception(e)
