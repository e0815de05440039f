"""Translation queue endpoints."""

from typing import Optional

from fastapi import APIRouter, HTTPException
from sse_starlette.sse import EventSourceResponse
from ..config import get_settings
from ..models.status import RowStatus, is_enqueueable
from ..providers.router import get_provider_router
from ..schemas.translate import CancelRequest, CancelResponse, TranslateRequest, TranslateResponse
from ..store import get_glossary_store, get_row_store
from ..utils.helpers import to_http_exception
from ..workflows.runner import get_run_registry
from ..workflows.streaming import stream_run_progress

router = APIRouter(prefix="/projects/{project_id}/translate", tags=["Translation"])
settings = get_settings()


def _project_runner(project_id: str):
    runner = get_run_registry().get(project_id)
    if runner is None:
        raise HTTPException(status_code=404, detail=f"No translation run for project '{project_id}'")
    return runner


@router.post("", response_model=TranslateResponse)
async def translate_rows(project_id: str, request: TranslateRequest):
    """
    Queue rows for translation.

    Rows are marked ``queued`` before this returns and translated in the
    background, one batch at a time. Calling this while a run is processing
    appends to the same run. Provider, template and language problems are
    reported as 400 before any row is touched.
    """
    try:
        if request.batch_size and request.batch_size > settings.max_batch_size:
            raise HTTPException(
                status_code=400,
                detail=f"Batch size {request.batch_size} exceeds maximum allowed {settings.max_batch_size}"
            )

        row_store = get_row_store()
        if not row_store.has_project(project_id):
            raise HTTPException(status_code=404, detail=f"Project '{project_id}' not found")

        if request.row_ids is None:
            rows = row_store.get_rows(project_id, status=RowStatus.PENDING)
        else:
            rows = row_store.get_rows(project_id, ids=request.row_ids)
            busy = [row.id for row in rows if not is_enqueueable(row.status)]
            if busy:
                raise HTTPException(status_code=409, detail=f"Rows already queued or translating: {busy}")

        provider = get_provider_router().get_provider(request.provider, api_key=request.api_key)
        runner = get_run_registry().get_or_create(
            project_id,
            provider,
            row_store.update_rows,
            get_glossary_store().fetch_approved_glossary,
        )
        batches = runner.enqueue(
            rows,
            request.template,
            request.target_languages,
            request.source_language,
            batch_size=request.batch_size,
        )
        return TranslateResponse(
            project_id=project_id,
            queued_rows=len(rows),
            batches=batches,
            run=runner.snapshot(),
        )
    except Exception as e:
        raise to_http_exception(e)


@router.post("/cancel", response_model=CancelResponse)
async def cancel_translation(project_id: str, request: Optional[CancelRequest] = None):
    """Cancel the run; queued and in-flight rows go back to ``pending``."""
    runner = _project_runner(project_id)
    reverted = runner.cancel(abort=bool(request and request.abort))
    return CancelResponse(project_id=project_id, reverted_rows=reverted, run=runner.snapshot())


@router.get("/progress")
async def get_progress(project_id: str):
    return _project_runner(project_id).snapshot()


@router.get(
    "/stream",
    tags=["Streaming"],
    responses={
        200: {
            "description": """
A stream of Server-Sent Events (SSE) for the project's translation run.
Past events are replayed, then new ones follow until the run is idle or cancelled.

**Event Type: `batch_completed`**
```json
{
  "timestamp": "...",
  "type": "batch_completed",
  "project_id": "...",
  "batch_id": "...",
  "progress": {"current": 1, "total": 3},
  "rows": 10,
  "partial_rows": 0
}
```
            """,
            "content": {"text/event-stream": {"schema": {"type": "string"}}}
        }
    }
)
async def stream_progress(project_id: str, replay: bool = True):
    """Stream progress of the project's translation run."""
    runner = _project_runner(project_id)
    return EventSourceResponse(stream_run_progress(runner, replay=replay))
