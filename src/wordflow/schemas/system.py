"""System API schemas."""

from typing import Dict, Any, List
from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="API status")
    version: str = Field(..., description="API version")
    available_providers: Dict[str, Dict[str, Any]] = Field(..., description="Providers with credentials configured")
    active_runs: List[Dict[str, Any]] = Field(default_factory=list, description="Translation runs currently processing")


class ConnectionTestResponse(BaseModel):
    provider: str
    success: bool
    message: str = ""
