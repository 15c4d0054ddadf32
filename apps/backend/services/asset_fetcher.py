"""
Remote image fetching for slide assets and brand logos.

Every failure (network error, bad status, oversized or non-image body) degrades
to None so that a slide still renders without the image.
"""

import logging
from typing import Optional

import httpx

from config.render_config import get_render_config
from models.slide import AssetImage
from services.exceptions import AssetFetchError
from utils.images import sniff_media_type

logger = logging.getLogger(__name__)


async def _download(client: httpx.AsyncClient, url: str, max_bytes: int, max_pixels: int) -> AssetImage:
    try:
        async with client.stream("GET", url) as response:
            if response.status_code < 200 or response.status_code >= 300:
                raise AssetFetchError(url, f"Asset request returned HTTP {response.status_code}")

            declared = response.headers.get("Content-Length")
            if declared and declared.isdigit() and int(declared) > max_bytes:
                raise AssetFetchError(url, f"Asset too large ({declared} bytes, limit {max_bytes})")

            chunks = []
            received = 0
            async for chunk in response.aiter_bytes():
                received += len(chunk)
                if received > max_bytes:
                    raise AssetFetchError(url, f"Asset exceeded {max_bytes} bytes")
                chunks.append(chunk)
            header_type = response.headers.get("Content-Type", "").split(";")[0].strip().lower()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise AssetFetchError(url, "Failed to fetch asset image", cause=e)

    data = b"".join(chunks)
    sniffed = sniff_media_type(data, max_pixels=max_pixels)
    if sniffed is None:
        raise AssetFetchError(url, "Asset is not a decodable image of acceptable size", context={"content_type": header_type})

    media_type = header_type if header_type.startswith("image/") else sniffed
    return AssetImage(data=data, media_type=media_type)


async def fetch_image(url: Optional[str], client: Optional[httpx.AsyncClient] = None) -> Optional[AssetImage]:
    """
    Fetch an image by URL.

    Args:
        url: http(s) URL of the image
        client: Optional shared client; a short-lived one is created otherwise

    Returns:
        The decoded asset, or None if it could not be fetched
    """
    if not url:
        return None

    config = get_render_config()
    try:
        if client is not None:
            asset = await _download(client, url, config.max_asset_bytes, config.max_image_pixels)
        else:
            async with httpx.AsyncClient(follow_redirects=True, timeout=config.asset_fetch_timeout) as own_client:
                asset = await _download(own_client, url, config.max_asset_bytes, config.max_image_pixels)
    except AssetFetchError as e:
        logger.warning(f"Continuing without asset image: {e}")
        return None

    logger.info(f"Fetched asset image {url} ({len(asset.data)} bytes, {asset.media_type})")
    return asset
