"""
Render every slide of a carousel JSON file to PNG files.

The file holds shared settings plus a list of slides:

    {"brand": {...}, "template": "soft_pastel", "slides": [{"slide_type": "cover", "title": "..."}]}

slide_number and total_slides are filled in from the list order.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

from pydantic import ValidationError

sys.path.append(str(Path(__file__).resolve().parent.parent))

from config.logging_config import apply_logging_config  # noqa: E402
from models.requests import RenderSlideRequest  # noqa: E402
from services.exceptions import RenderError  # noqa: E402
from services.render_service import render_slide  # noqa: E402

logger = logging.getLogger(__name__)


def build_requests(carousel: Dict[str, Any]) -> List[RenderSlideRequest]:
    """Merge carousel-level settings into each slide and validate it."""
    slides = carousel.get("slides", [])
    shared = {key: carousel[key] for key in ("brand", "template", "output") if key in carousel}
    requests = []
    for index, slide in enumerate(slides):
        payload = {**shared, **slide, "slide_number": index + 1, "total_slides": len(slides)}
        requests.append(RenderSlideRequest.model_validate(payload))
    return requests


async def render_carousel(carousel: Dict[str, Any], out_dir: Path) -> List[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for request in build_requests(carousel):
        result = await render_slide(request)
        target = out_dir / f"carousel_slide_{request.slide_number:03d}.png"
        target.write_bytes(result.png)
        logger.info(f"Wrote {target} ({result.width}x{result.height}, {result.render_time_ms}ms)")
        written.append(target)
    return written


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Render a carousel JSON file to PNG images")
    parser.add_argument("carousel_json", help="Path to the carousel JSON file")
    parser.add_argument("--out", default="./render_out", help="Output directory")
    args = parser.parse_args(argv)

    apply_logging_config()

    carousel_path = Path(args.carousel_json).resolve()
    try:
        carousel = json.loads(carousel_path.read_text(encoding="utf-8"))
        written = asyncio.run(render_carousel(carousel, Path(args.out).resolve()))
    except (OSError, json.JSONDecodeError) as e:
        print(f"Could not read {carousel_path}: {e}", file=sys.stderr)
        return 1
    except ValidationError as e:
        print(f"Invalid carousel definition: {e}", file=sys.stderr)
        return 1
    except RenderError as e:
        print(f"Render failed: {e}", file=sys.stderr)
        return 1

    print(f"Rendered {len(written)} slides to {Path(args.out).resolve()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
