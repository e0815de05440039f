"""Provider endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from ..api.dependencies import router_limiter
from ..providers.router import PROVIDERS, get_provider_router
from ..schemas.system import ConnectionTestResponse
from ..utils.helpers import to_http_exception

router = APIRouter(prefix="/providers", tags=["Providers"])


@router.get("", summary="Get Configured Providers")
async def get_providers():
    """
    Get the providers that have an API key configured.

    Example response:
    ```json
    {
        "gemini": {
            "description": "Google Gemini (multimodal generate-content)",
            "model": "gemini-2.0-flash",
            "capabilities": ["extract_and_translate", "extract_text"],
            "default": true
        }
    }
    ```
    """
    return get_provider_router().get_available_providers()


@router.get("/registered", summary="Get All Registered Providers")
async def get_registered_providers():
    return {name: {"description": cls.description, "capabilities": sorted(cls.capabilities)}
            for name, cls in PROVIDERS.items()}


@router.post("/default/{name}")
async def set_default_provider(name: str):
    try:
        return {"default_provider": get_provider_router().set_provider(name)}
    except Exception as e:
        raise to_http_exception(e)


@router.post(
    "/{name}/test-connection",
    response_model=ConnectionTestResponse,
    dependencies=[Depends(router_limiter)],
)
async def test_connection(name: str, x_api_key: Optional[str] = Header(None)):
    """Send a trivial prompt to the provider and report the outcome."""
    try:
        provider = get_provider_router().get_provider(name, api_key=x_api_key)
        status = await provider.test_connection()
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e)
    return ConnectionTestResponse(provider=provider.name, success=status.success, message=status.message)
