"""
Builds the layout tree for a single carousel slide.

Node order matters: background layers are appended before the content wrapper
so that later nodes draw on top, and foreground nodes follow reading order.
"""

import logging
from typing import List

from models.layout import (
    ContainerNode,
    HeadingNode,
    ImageNode,
    LayoutNodeBase,
    OverlayNode,
    ParagraphNode,
    TextSpanNode,
)
from models.slide import AssetRole, SlideContent, SlideType
from services.template_styles import StyleRecord, resolve_styles

logger = logging.getLogger(__name__)

SWIPE_LABEL = "Desliza →"
CTA_POINTER = "👆"


def _style(element) -> dict:
    return dict(element)


def _background_layers(content: SlideContent, styles: StyleRecord) -> List[LayoutNodeBase]:
    if content.use_asset_as != AssetRole.BACKGROUND or content.asset_image is None:
        return []
    return [
        ImageNode(src=content.asset_image.data_uri, style=_style(styles.background_image), role="background_image"),
        OverlayNode(style=_style(styles.overlay), role="overlay"),
    ]


def _foreground(content: SlideContent, styles: StyleRecord) -> List[LayoutNodeBase]:
    nodes: List[LayoutNodeBase] = []
    has_asset = content.asset_image is not None

    if content.slide_type == SlideType.CONTENT:
        nodes.append(TextSpanNode(
            text=f"{content.slide_number}/{content.total_slides}",
            style=_style(styles.slide_number),
            role="slide_number",
        ))

    if content.use_asset_as == AssetRole.FEATURED and has_asset:
        nodes.append(ImageNode(
            src=content.asset_image.data_uri,
            style=_style(styles.featured_asset),
            role="featured_asset",
        ))
    elif content.emoji and not has_asset:
        # Any asset image suppresses the emoji, whatever its role
        nodes.append(TextSpanNode(text=content.emoji, style=_style(styles.emoji), role="emoji"))

    title_style = styles.title_large if content.slide_type == SlideType.COVER else styles.title_medium
    nodes.append(HeadingNode(text=content.title, style=_style(title_style), role="title"))

    if content.subtitle:
        nodes.append(ParagraphNode(text=content.subtitle, style=_style(styles.subtitle), role="subtitle"))

    if content.body_text:
        nodes.append(ParagraphNode(text=content.body_text, style=_style(styles.body_text), role="body_text"))

    if content.slide_type == SlideType.COVER:
        nodes.append(TextSpanNode(text=SWIPE_LABEL, style=_style(styles.swipe_indicator), role="swipe_indicator"))

    if content.slide_type == SlideType.CTA:
        nodes.append(TextSpanNode(text=CTA_POINTER, style=_style(styles.cta_arrow), role="cta_arrow"))
        if content.brand.logo_url:
            nodes.append(ImageNode(src=content.brand.logo_url, style=_style(styles.brand_logo), role="brand_logo"))

    return nodes


def compose_slide(content: SlideContent) -> ContainerNode:
    """
    Compose the layout tree for one slide.

    Args:
        content: Validated slide content (title must be non-empty)

    Returns:
        Root container node: background layers first, then the content wrapper
    """
    styles = resolve_styles(content.template, content.brand)

    children: List[LayoutNodeBase] = _background_layers(content, styles)
    children.append(ContainerNode(
        children=_foreground(content, styles),
        style=_style(styles.content_wrapper),
        role="content_wrapper",
    ))

    logger.debug(
        f"Composed {content.slide_type.value} slide {content.slide_number}/{content.total_slides} "
        f"with template '{content.template}' ({len(children)} top-level nodes)"
    )
    return ContainerNode(children=children, style=_style(styles.container), role="container")
