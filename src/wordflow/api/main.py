"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import get_settings
from ..providers.router import get_provider_router
from ..workflows.runner import get_run_registry
from ..routers import (
    system,
    providers,
    rows,
    translate,
    glossary,
    extract,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    print("Starting WordFlow Translation API...")
    print(f"Available providers: {list(get_provider_router().get_available_providers().keys())}")
    yield
    # Shutdown
    get_run_registry().clear()
    print("Shutting down WordFlow Translation API...")


# Initialize FastAPI app
app = FastAPI(
    title="WordFlow Translation Queue API",
    description="""
A human-in-the-loop translation service for website and marketing copy.
Rows are translated by an LLM in batches and then reviewed by a person.

**Key Features:**
- Batch translation into several languages per request, with style templates.
- Approved glossary terms enforced in every batch that mentions them.
- Rate-limit aware queue with exponential backoff and cancellation.
- Real-time progress via Server-Sent Events (SSE).
- Text extraction and translation from images (Gemini).
    """,
    version="1.0.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include all routers
app.include_router(system.router)
app.include_router(providers.router)
app.include_router(rows.router)
app.include_router(translate.router)
app.include_router(glossary.router)
app.include_router(extract.router)


def create_app() -> FastAPI:
    """Factory function to create the FastAPI app."""
    return app
