"""
Tests for the carousel JSON rendering script.
"""

import json

from PIL import Image

from scripts.render_carousel_from_json import build_requests, main

CAROUSEL = {
    "brand": {"name": "Acme", "color_primary": "#336699", "color_secondary": "#FF9900"},
    "template": "bold_contrast",
    "output": {"width": 108},
    "slides": [
        {"slide_type": "cover", "title": "Five habits"},
        {"slide_type": "content", "title": "Sleep", "body_text": "Eight hours."},
        {"slide_type": "cta", "title": "Follow for more", "template": "minimal_clean"},
    ],
}


def test_build_requests_numbers_slides_and_shares_settings():
    requests = build_requests(CAROUSEL)

    assert [(r.slide_number, r.total_slides) for r in requests] == [(1, 3), (2, 3), (3, 3)]
    assert [r.template for r in requests] == ["bold_contrast", "bold_contrast", "minimal_clean"]
    assert all(r.brand.color_primary == "#336699" for r in requests)
    assert requests[0].output.width == 108


def test_main_writes_one_png_per_slide(tmp_path):
    carousel_path = tmp_path / "carousel.json"
    carousel_path.write_text(json.dumps(CAROUSEL), encoding="utf-8")
    out_dir = tmp_path / "out"

    assert main([str(carousel_path), "--out", str(out_dir)]) == 0

    written = sorted(p.name for p in out_dir.iterdir())
    assert written == ["carousel_slide_001.png", "carousel_slide_002.png", "carousel_slide_003.png"]
    with Image.open(out_dir / "carousel_slide_002.png") as image:
        assert image.size == (108, 135)


def test_main_reports_invalid_definition(tmp_path, capsys):
    carousel_path = tmp_path / "carousel.json"
    carousel_path.write_text(json.dumps({"slides": [{"slide_type": "cover", "title": "No brand"}]}), encoding="utf-8")

    assert main([str(carousel_path), "--out", str(tmp_path / "out")]) == 1
    assert "Invalid carousel definition" in capsys.readouterr().err


def test_main_reports_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "missing.json")]) == 1
    assert "Could not read" in capsys.readouterr().err
