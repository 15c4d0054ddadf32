"""
Template style resolution for carousel slides.

Maps a template name plus brand colors to a complete, read-only style record
covering every element a slide can draw. Unknown template names resolve to the
base style set, so resolution never fails.
"""

import logging
from dataclasses import dataclass, fields
from enum import Enum
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional

from models.slide import Brand
from utils.colors import adjust_color_lightness

logger = logging.getLogger(__name__)

CANVAS_WIDTH = 1080
CANVAS_HEIGHT = 1350
DEFAULT_FONT_FAMILY = "Inter"

WHITE = "#FFFFFF"

ElementStyle = Mapping[str, Any]


class TemplateName(str, Enum):
    DEFAULT = "default"
    MODERN_GRADIENT = "modern_gradient"
    MINIMAL_CLEAN = "minimal_clean"
    BOLD_CONTRAST = "bold_contrast"
    SOFT_PASTEL = "soft_pastel"

    @classmethod
    def parse(cls, name: Optional[str]) -> "TemplateName":
        """Return the matching template, or DEFAULT for unknown or empty names."""
        try:
            return cls(name)
        except ValueError:
            if name:
                logger.debug(f"Unknown template '{name}', using default styles")
            return cls.DEFAULT


@dataclass(frozen=True)
class StyleRecord:
    """One style mapping per element kind. Values are read-only."""
    container: ElementStyle
    content_wrapper: ElementStyle
    background_image: ElementStyle
    overlay: ElementStyle
    featured_asset: ElementStyle
    title_large: ElementStyle
    title_medium: ElementStyle
    subtitle: ElementStyle
    body_text: ElementStyle
    emoji: ElementStyle
    slide_number: ElementStyle
    swipe_indicator: ElementStyle
    cta_arrow: ElementStyle
    brand_logo: ElementStyle

    @classmethod
    def element_kinds(cls):
        return [f.name for f in fields(cls)]

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {name: dict(getattr(self, name)) for name in self.element_kinds()}


@dataclass(frozen=True)
class BrandColors:
    primary: str
    secondary: str


def _base_styles(font_family: str) -> Dict[str, Dict[str, Any]]:
    """Fixed geometry shared by every template."""
    return {
        "container": {
            "width": f"{CANVAS_WIDTH}px",
            "height": f"{CANVAS_HEIGHT}px",
            "display": "flex",
            "flexDirection": "column",
            "alignItems": "center",
            "justifyContent": "center",
            "position": "relative",
            "fontFamily": font_family or DEFAULT_FONT_FAMILY,
            "overflow": "hidden",
        },
        "content_wrapper": {
            "display": "flex",
            "flexDirection": "column",
            "alignItems": "center",
            "justifyContent": "center",
            "padding": "60px",
            "zIndex": 10,
            "width": "100%",
            "height": "100%",
        },
        "background_image": {
            "position": "absolute",
            "top": 0,
            "left": 0,
            "width": "100%",
            "height": "100%",
            "objectFit": "cover",
            "zIndex": 1,
        },
        "overlay": {
            "position": "absolute",
            "top": 0,
            "left": 0,
            "width": "100%",
            "height": "100%",
            "backgroundColor": "rgba(0,0,0,0.4)",
            "zIndex": 2,
        },
        "featured_asset": {
            "width": "400px",
            "height": "400px",
            "objectFit": "contain",
            "marginBottom": "40px",
        },
        "title_large": {
            "fontSize": "72px",
            "fontWeight": 700,
            "textAlign": "center",
            "margin": "20px 0",
            "lineHeight": 1.2,
            "maxWidth": "900px",
        },
        "title_medium": {
            "fontSize": "56px",
            "fontWeight": 700,
            "textAlign": "center",
            "margin": "16px 0",
            "lineHeight": 1.3,
            "maxWidth": "900px",
        },
        "subtitle": {
            "fontSize": "36px",
            "textAlign": "center",
            "margin": "12px 0",
            "opacity": 0.9,
            "maxWidth": "800px",
        },
        "body_text": {
            "fontSize": "32px",
            "textAlign": "center",
            "lineHeight": 1.6,
            "margin": "24px 0",
            "maxWidth": "800px",
        },
        "emoji": {
            "fontSize": "120px",
            "marginBottom": "30px",
        },
        "slide_number": {
            "position": "absolute",
            "top": "40px",
            "right": "40px",
            "fontSize": "28px",
            "opacity": 0.7,
            "fontWeight": 600,
        },
        "swipe_indicator": {
            "position": "absolute",
            "bottom": "60px",
            "fontSize": "32px",
            "opacity": 0.8,
            "fontWeight": 500,
        },
        "cta_arrow": {
            "fontSize": "80px",
            "marginTop": "30px",
        },
        "brand_logo": {
            "width": "140px",
            "height": "140px",
            "objectFit": "contain",
            "marginTop": "40px",
            "opacity": 0.95,
        },
    }


# Template overrides: element kind -> properties merged over the base style

def _modern_gradient(colors: BrandColors) -> Dict[str, Dict[str, Any]]:
    return {
        "container": {"background": f"linear-gradient(135deg, {colors.primary} 0%, {colors.secondary} 100%)"},
        "title_large": {"color": WHITE},
        "title_medium": {"color": WHITE},
        "subtitle": {"color": WHITE},
        "body_text": {"color": WHITE},
        "slide_number": {"color": WHITE},
        "swipe_indicator": {"color": WHITE},
        "cta_arrow": {"color": WHITE},
    }


def _minimal_clean(colors: BrandColors) -> Dict[str, Dict[str, Any]]:
    return {
        "container": {"backgroundColor": WHITE},
        "title_large": {"color": colors.primary},
        "title_medium": {"color": colors.primary},
        "subtitle": {"color": "#4B5563"},
        "body_text": {"color": "#6B7280"},
        "slide_number": {"color": colors.secondary},
        "swipe_indicator": {"color": colors.primary},
        "cta_arrow": {"color": colors.primary},
    }


def _bold_contrast(colors: BrandColors) -> Dict[str, Dict[str, Any]]:
    return {
        "container": {"backgroundColor": colors.primary},
        "title_large": {"color": WHITE, "fontSize": "80px"},
        "title_medium": {"color": WHITE, "fontSize": "64px"},
        "subtitle": {"color": colors.secondary},
        "body_text": {"color": WHITE},
        "slide_number": {"color": colors.secondary},
        "swipe_indicator": {"color": WHITE},
        "cta_arrow": {"color": WHITE},
    }


def _soft_pastel(colors: BrandColors) -> Dict[str, Dict[str, Any]]:
    pastel_bg = adjust_color_lightness(colors.primary, 0.92)
    dark_text = adjust_color_lightness(colors.primary, 0.25)
    return {
        "container": {"backgroundColor": pastel_bg},
        "title_large": {"color": dark_text},
        "title_medium": {"color": dark_text},
        "subtitle": {"color": adjust_color_lightness(colors.primary, 0.4)},
        "body_text": {"color": adjust_color_lightness(colors.primary, 0.35)},
        "slide_number": {"color": colors.primary},
        "swipe_indicator": {"color": dark_text},
        "cta_arrow": {"color": dark_text},
    }


def _no_overrides(colors: BrandColors) -> Dict[str, Dict[str, Any]]:
    return {}


TEMPLATE_OVERRIDES: Dict[TemplateName, Callable[[BrandColors], Dict[str, Dict[str, Any]]]] = {
    TemplateName.DEFAULT: _no_overrides,
    TemplateName.MODERN_GRADIENT: _modern_gradient,
    TemplateName.MINIMAL_CLEAN: _minimal_clean,
    TemplateName.BOLD_CONTRAST: _bold_contrast,
    TemplateName.SOFT_PASTEL: _soft_pastel,
}


@lru_cache(maxsize=None)
def _resolve_cached(template: TemplateName, primary: str, secondary: str, font_family: str) -> StyleRecord:
    styles = _base_styles(font_family)
    overrides = TEMPLATE_OVERRIDES[template](BrandColors(primary=primary, secondary=secondary))
    for kind, props in overrides.items():
        styles[kind] = {**styles[kind], **props}
    return StyleRecord(**{kind: MappingProxyType(props) for kind, props in styles.items()})


def resolve_styles(template_name: Optional[str], brand: Brand) -> StyleRecord:
    """
    Resolve the full style record for a template and brand.

    Args:
        template_name: One of the TemplateName values; anything else gets the defaults
        brand: Brand whose colors and font family feed the template

    Returns:
        StyleRecord shared between calls with the same inputs
    """
    template = TemplateName.parse(template_name)
    return _resolve_cached(
        template,
        brand.color_primary,
        brand.color_secondary,
        brand.font_family or DEFAULT_FONT_FAMILY,
    )


def list_templates():
    return [t.value for t in TemplateName]
