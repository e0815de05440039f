"""System endpoints: health check and cleanup of in-memory state."""

from fastapi import APIRouter
from ..schemas.system import HealthResponse
from ..providers.router import get_provider_router
from ..store import get_glossary_store, get_row_store
from ..utils.languages import AVAILABLE_TARGET_LANGUAGES, LANGUAGES
from ..workflows.runner import get_run_registry

router = APIRouter(prefix="", tags=["System"])


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Check API status, configured providers and running translation runs."""
    return HealthResponse(
        status="healthy",
        version="1.0.0",
        available_providers=get_provider_router().get_available_providers(),
        active_runs=get_run_registry().active_runs(),
    )


@router.get("/languages", summary="Get Supported Languages")
async def get_languages():
    """Language codes with display names, and the codes offered as translation targets."""
    return {"languages": list(LANGUAGES.values()), "targets": AVAILABLE_TARGET_LANGUAGES}


@router.post("/system/reset", summary="Clear In-Memory State")
async def reset_state():
    """
    Cancels every run and clears rows and glossary terms. Intended for local
    development; nothing is persisted outside the process.
    """
    get_run_registry().clear()
    cleared_rows = get_row_store().clear()
    cleared_terms = get_glossary_store().clear()
    return {"status": "reset", "cleared_rows": cleared_rows, "cleared_terms": cleared_terms}
