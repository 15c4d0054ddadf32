"""
Slide rendering endpoint for carousel posts.
"""

import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from models.requests import (
    REQUIRED_FIELDS,
    ErrorResponse,
    RenderDimensions,
    RenderSlideRequest,
    RenderSlideResponse,
)
from services.exceptions import RenderError, RequestValidationError
from services.font_loader import list_supported_families
from services.render_service import render_slide
from services.template_styles import list_templates
from utils.images import encode_png_base64

router = APIRouter(prefix="/api/render-slide", tags=["render"])

logger = logging.getLogger(__name__)


def _error(status_code: int, error: str, details: str = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, details=details).model_dump(exclude_none=True),
    )


def _missing_fields(body: Dict[str, Any]) -> bool:
    return any(not body.get(name) for name in REQUIRED_FIELDS)


@router.options("")
async def render_slide_preflight():
    return Response(status_code=200)


@router.post("")
async def render_slide_endpoint(request: Request):
    """
    Render a carousel slide to a base64 PNG.

    Returns 400 for missing or malformed fields and 500 when rendering fails.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _error(400, "Invalid request", "Body must be JSON")

    if not isinstance(body, dict) or _missing_fields(body):
        return _error(400, "Missing required fields", "Required: " + ", ".join(REQUIRED_FIELDS))

    try:
        render_request = RenderSlideRequest.model_validate(body)
    except ValidationError as e:
        logger.info(f"Rejected render request: {e.error_count()} validation errors")
        return _error(400, "Invalid request", str(e))

    http_client = getattr(request.app.state, "http_client", None)
    try:
        result = await render_slide(render_request, client=http_client)
    except RequestValidationError as e:
        return _error(400, str(e.args[0]), e.details)
    except RenderError as e:
        logger.error(f"Render error: {e}")
        return _error(500, "Render failed", str(e))
    except Exception as e:
        logger.exception(f"Unexpected render error: {e}")
        return _error(500, "Render failed", str(e) or "Unknown error")

    response = RenderSlideResponse(
        image_base64=encode_png_base64(result.png),
        dimensions=RenderDimensions(width=result.width, height=result.height),
        render_time_ms=result.render_time_ms,
    )
    return JSONResponse(content=response.model_dump())


@router.get("/templates")
async def get_render_options():
    """Templates and font families the renderer understands"""
    return {"templates": list_templates(), "fonts": list_supported_families()}
