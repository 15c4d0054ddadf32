"""
Tests for the /api/render-slide endpoint.
"""

import base64
import io

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from api.requests import api_render_slide
from api.server import app
from services.exceptions import RasterizationError

BRAND = {"name": "Acme", "color_primary": "#336699", "color_secondary": "#FF9900"}
VALID_BODY = {
    "slide_number": 1,
    "total_slides": 5,
    "slide_type": "cover",
    "title": "Launch Day",
    "template": "soft_pastel",
    "brand": BRAND,
    "output": {"width": 270},
}


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def decode_png(payload) -> Image.Image:
    return Image.open(io.BytesIO(base64.b64decode(payload["image_base64"])))


def test_missing_fields_returns_400(client):
    response = client.post("/api/render-slide", json={"slide_number": 1, "slide_type": "cover", "brand": BRAND})

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error": "Missing required fields",
        "details": "Required: slide_number, slide_type, title, brand",
    }


def test_empty_title_counts_as_missing(client):
    response = client.post("/api/render-slide", json={**VALID_BODY, "title": ""})
    assert response.status_code == 400
    assert response.json()["error"] == "Missing required fields"


def test_malformed_json_returns_400(client):
    response = client.post(
        "/api/render-slide",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_invalid_slide_type_returns_400(client):
    response = client.post("/api/render-slide", json={**VALID_BODY, "slide_type": "banner"})
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request"


def test_output_width_too_large_returns_400(client):
    response = client.post("/api/render-slide", json={**VALID_BODY, "output": {"width": 100000}})
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_renders_slide(client):
    response = client.post("/api/render-slide", json=VALID_BODY)

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["dimensions"] == {"width": 270, "height": 338}
    assert isinstance(payload["render_time_ms"], int)
    image = decode_png(payload)
    assert image.format == "PNG"
    assert image.size == (270, 338)


def test_renders_with_fetched_asset(client):
    buffer = io.BytesIO()
    Image.new("RGB", (10, 10), (255, 0, 0)).save(buffer, "PNG")
    body = buffer.getvalue()

    original = client.app.state.http_client
    client.app.state.http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, content=body, headers={"Content-Type": "image/png"}))
    )
    try:
        response = client.post("/api/render-slide", json={
            **VALID_BODY,
            "template": "minimal_clean",
            "asset_url": "https://cdn.example.com/photo.png",
            "use_asset_as": "background",
            "output": {"width": 108},
        })
    finally:
        client.app.state.http_client = original

    assert response.status_code == 200
    image = decode_png(response.json()).convert("RGB")
    # Red photo under a 40% black overlay
    r, g, b = image.getpixel((1, 1))
    assert abs(r - 153) <= 3 and g <= 3 and b <= 3


def test_render_failure_returns_500(client, monkeypatch):
    async def failing_render(request, client=None, fonts=None):
        raise RasterizationError("Failed to rasterize slide")

    monkeypatch.setattr(api_render_slide, "render_slide", failing_render)
    response = client.post("/api/render-slide", json=VALID_BODY)

    assert response.status_code == 500
    assert response.json()["success"] is False
    assert response.json()["error"] == "Render failed"


def test_get_is_not_allowed(client):
    response = client.get("/api/render-slide")
    assert response.status_code == 405
    assert response.json() == {"success": False, "error": "Method not allowed"}


def test_options_returns_200(client):
    assert client.options("/api/render-slide").status_code == 200


def test_cors_preflight(client):
    response = client.options(
        "/api/render-slide",
        headers={
            "Origin": "https://app.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] in ("*", "https://app.example.com")


def test_response_carries_request_id(client):
    response = client.post("/api/render-slide", json={})
    assert response.status_code == 400
    assert "x-request-id" in response.headers


def test_templates_endpoint(client):
    response = client.get("/api/render-slide/templates")
    assert response.status_code == 200
    payload = response.json()
    assert "soft_pastel" in payload["templates"]
    assert "Inter" in payload["fonts"]


def test_health(client):
    assert client.get("/api/health").json()["status"] == "healthy"
