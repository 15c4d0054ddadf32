"""
Tests for the end-to-end render service.
"""

import asyncio
import io
import struct
import zlib

import httpx
import pytest
from PIL import Image

from models.requests import RenderSlideRequest
from models.slide import Brand
from services.exceptions import RequestValidationError
from services.font_loader import FontLoader
from services.render_service import render_slide, resolve_brand_logo, resolve_output_width

BRAND = {"name": "Acme", "color_primary": "#336699", "color_secondary": "#FF9900"}


def png_bytes(color=(0, 128, 0)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), color).save(buffer, "PNG")
    return buffer.getvalue()


def make_request(**overrides) -> RenderSlideRequest:
    payload = {"slide_number": 2, "total_slides": 4, "slide_type": "content", "title": "Habits", "brand": BRAND}
    payload.update(overrides)
    return RenderSlideRequest.model_validate(payload)


@pytest.mark.parametrize("output, expected", [
    (None, 1080),
    ({"width": 540}, 540),
    ({"height": 675}, 540),
    ({"width": 720, "height": 9999}, 720),
])
def test_output_width_resolution(output, expected):
    assert resolve_output_width(make_request(output=output)) == expected


def test_output_width_above_maximum_is_rejected():
    with pytest.raises(RequestValidationError) as exc_info:
        resolve_output_width(make_request(output={"width": 10000}))
    assert "exceeds maximum" in exc_info.value.details


def test_data_uri_logo_is_kept():
    brand = Brand(logo_url="data:image/png;base64,AAAA", **BRAND)
    assert asyncio.run(resolve_brand_logo(brand)) is brand


def test_remote_logo_becomes_data_uri():
    body = png_bytes()

    async def run():
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=body, headers={"Content-Type": "image/png"}))
        async with httpx.AsyncClient(transport=transport) as client:
            return await resolve_brand_logo(Brand(logo_url="https://cdn.example.com/logo.png", **BRAND), client)

    brand = asyncio.run(run())
    assert brand.logo_url.startswith("data:image/png;base64,")
    assert brand.name == "Acme"


def test_unfetchable_logo_is_dropped():
    async def run():
        transport = httpx.MockTransport(lambda request: httpx.Response(500))
        async with httpx.AsyncClient(transport=transport) as client:
            return await resolve_brand_logo(Brand(logo_url="https://cdn.example.com/logo.png", **BRAND), client)

    assert asyncio.run(run()).logo_url is None


def test_unsupported_logo_reference_is_dropped():
    brand = Brand(logo_url="ftp://example.com/logo.png", **BRAND)
    assert asyncio.run(resolve_brand_logo(brand)).logo_url is None


def test_render_slide_produces_png(tmp_path):
    request = make_request(output={"width": 540})
    result = asyncio.run(render_slide(request, fonts=FontLoader(fonts_dir=tmp_path, default_family="Inter")))

    image = Image.open(io.BytesIO(result.png))
    assert (result.width, result.height) == (540, 675)
    assert image.size == (540, 675)
    assert result.render_time_ms >= 0


def test_render_slide_survives_failed_asset(tmp_path):
    requested = []

    def handler(request):
        requested.append(str(request.url))
        return httpx.Response(404)

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await render_slide(
                make_request(
                    slide_type="cta",
                    asset_url="https://cdn.example.com/photo.jpg",
                    use_asset_as="background",
                    brand={**BRAND, "logoUrl": "https://cdn.example.com/logo.png"},
                    output={"width": 216},
                ),
                client=client,
                fonts=FontLoader(fonts_dir=tmp_path, default_family="Inter"),
            )

    result = asyncio.run(run())
    assert (result.width, result.height) == (216, 270)
    assert sorted(requested) == ["https://cdn.example.com/logo.png", "https://cdn.example.com/photo.jpg"]


def test_logo_with_oversized_header_is_dropped():
    # 8x8 PNG whose IHDR claims 20000x20000
    data = bytearray(png_bytes())
    header = struct.pack(">II", 20000, 20000) + bytes(data[24:29])
    data[16:29] = header
    data[29:33] = struct.pack(">I", zlib.crc32(b"IHDR" + header) & 0xFFFFFFFF)

    async def run():
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=bytes(data), headers={"Content-Type": "image/png"}))
        async with httpx.AsyncClient(transport=transport) as client:
            return await resolve_brand_logo(Brand(logo_url="https://cdn.example.com/logo.png", **BRAND), client)

    assert asyncio.run(run()).logo_url is None
