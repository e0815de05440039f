"""Image text extraction endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Header, HTTPException, UploadFile
from ..api.dependencies import router_limiter
from ..providers.base import CAPABILITY_EXTRACT_AND_TRANSLATE, CAPABILITY_EXTRACT_TEXT, BaseProvider
from ..providers.router import get_provider_router
from ..schemas.extract import ExtractResponse, ExtractTranslateResponse
from ..store import get_glossary_store
from ..utils.helpers import to_http_exception

router = APIRouter(prefix="/extract", tags=["Extraction"])


def _parse_languages(raw: str) -> List[str]:
    return [code.strip() for code in raw.split(",") if code.strip()]


async def _read_image(image: UploadFile):
    if not (image.content_type or "").startswith("image/"):
        raise HTTPException(status_code=400, detail=f"Expected an image upload, got '{image.content_type}'")
    data = await image.read()
    if not data:
        raise HTTPException(status_code=400, detail="Uploaded image is empty")
    return data, image.content_type


def _capable_provider(name: Optional[str], api_key: Optional[str], capability: str) -> BaseProvider:
    provider = get_provider_router().get_provider(name, api_key=api_key)
    if not provider.supports(capability):
        raise HTTPException(status_code=400, detail=f"Provider '{provider.name}' does not support '{capability}'")
    return provider


@router.post("/image", response_model=ExtractResponse, dependencies=[Depends(router_limiter)])
async def extract_image_text(
    image: UploadFile = File(...),
    provider: Optional[str] = Form(None),
    x_api_key: Optional[str] = Header(None),
):
    """Extract every visible line of text from an image (screenshot, banner, mockup)."""
    try:
        data, mime_type = await _read_image(image)
        backend = _capable_provider(provider, x_api_key, CAPABILITY_EXTRACT_TEXT)
        lines = await backend.extract_text_from_image(data, mime_type)
    except Exception as e:
        raise to_http_exception(e)
    return ExtractResponse(provider=backend.name, lines=lines, count=len(lines))


@router.post("/image/translate", response_model=ExtractTranslateResponse, dependencies=[Depends(router_limiter)])
async def extract_and_translate_image(
    image: UploadFile = File(...),
    target_languages: str = Form(..., description="Comma-separated language codes, e.g. 'ms,zh'"),
    provider: Optional[str] = Form(None),
    x_api_key: Optional[str] = Header(None),
):
    """
    Extract the text of an image and translate it in a single request.

    The whole approved glossary is sent along since the source text is not
    known before extraction.
    """
    try:
        languages = _parse_languages(target_languages)
        if not languages:
            raise HTTPException(status_code=400, detail="At least one target language is required")
        data, mime_type = await _read_image(image)
        backend = _capable_provider(provider, x_api_key, CAPABILITY_EXTRACT_AND_TRANSLATE)
        glossary = get_glossary_store().fetch_approved_glossary()
        items = await backend.extract_and_translate(data, mime_type, languages, glossary)
    except Exception as e:
        raise to_http_exception(e)
    return ExtractTranslateResponse(provider=backend.name, target_languages=languages, items=items, count=len(items))
