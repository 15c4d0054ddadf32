"""
End-to-end slide rendering: fonts, assets, composition and rasterization.

Collaborator failures are absorbed here before composition: a missing asset or
logo simply drops that image and missing fonts fall back to the default family.
Only rasterization failures propagate.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional

import httpx

from config.render_config import get_render_config
from models.requests import RenderSlideRequest
from models.slide import Brand
from services.asset_fetcher import fetch_image
from services.exceptions import RequestValidationError
from services.font_loader import FontLoader, font_loader
from services.slide_composer import compose_slide
from services.slide_rasterizer import SlideRasterizer
from services.template_styles import CANVAS_HEIGHT, CANVAS_WIDTH

logger = logging.getLogger(__name__)


@dataclass
class RenderResult:
    png: bytes
    width: int
    height: int
    render_time_ms: int


def resolve_output_width(request: RenderSlideRequest) -> int:
    """Output width from the request; height alone is converted using the canvas ratio."""
    config = get_render_config()
    output = request.output
    if output and output.width:
        width = output.width
    elif output and output.height:
        width = round(output.height * CANVAS_WIDTH / CANVAS_HEIGHT)
    else:
        width = config.default_output_width

    if width > config.max_output_width:
        raise RequestValidationError(
            "Invalid request",
            details=f"output width {width} exceeds maximum {config.max_output_width}",
        )
    return width


async def resolve_brand_logo(brand: Brand, client: Optional[httpx.AsyncClient] = None) -> Brand:
    """Replace a remote logo URL with a data URI; drop logos that cannot be fetched."""
    logo = brand.logo_url
    if not logo or logo.startswith("data:"):
        return brand
    if not logo.startswith(("http://", "https://")):
        logger.warning(f"Unsupported logo reference for brand '{brand.name}', omitting logo")
        return brand.model_copy(update={"logo_url": None})

    asset = await fetch_image(logo, client=client)
    return brand.model_copy(update={"logo_url": asset.data_uri if asset else None})


async def render_slide(
    request: RenderSlideRequest,
    client: Optional[httpx.AsyncClient] = None,
    fonts: Optional[FontLoader] = None,
) -> RenderResult:
    """
    Render one slide request to PNG.

    Args:
        request: Validated render request
        client: Optional HTTP client used for asset and logo fetches
        fonts: Font loader; defaults to the process-wide loader

    Returns:
        RenderResult with PNG bytes, final dimensions and elapsed time

    Raises:
        RequestValidationError: output size out of range
        RasterizationError: the layout could not be drawn
    """
    start_time = time.perf_counter()
    width = resolve_output_width(request)
    loader = fonts or font_loader

    font_faces, asset_image, brand = await asyncio.gather(
        asyncio.to_thread(loader.load_fonts, request.brand.font_family),
        fetch_image(request.asset_url, client=client),
        resolve_brand_logo(request.brand, client=client),
    )

    content = request.to_slide_content(asset_image=asset_image, brand=brand)
    tree = compose_slide(content)

    rasterizer = SlideRasterizer(font_faces)
    rasterized = await asyncio.to_thread(rasterizer.render, tree, width)

    render_time_ms = int((time.perf_counter() - start_time) * 1000)
    logger.info(
        f"Rendered {request.slide_type.value} slide {request.slide_number}/{request.total_slides} "
        f"template={request.template or 'default'} in {render_time_ms}ms"
    )
    return RenderResult(
        png=rasterized.png,
        width=rasterized.width,
        height=rasterized.height,
        render_time_ms=render_time_ms,
    )
