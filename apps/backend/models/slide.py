import base64
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SlideType(str, Enum):
    """Position of a slide within a carousel"""
    COVER = "cover"
    CONTENT = "content"
    CTA = "cta"


class AssetRole(str, Enum):
    """How an asset image is placed on the slide"""
    FEATURED = "featured"
    BACKGROUND = "background"


class Brand(BaseModel):
    """
    Brand identity applied to every slide of a carousel.

    Attributes:
        name: Display name of the brand
        color_primary: Primary color as #RRGGBB
        color_secondary: Secondary color as #RRGGBB
        font_family: Font family name used for all text
        logo_url: Logo reference, a data URI once resolved for rendering
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = ""
    color_primary: str
    color_secondary: str
    font_family: str = "Inter"
    logo_url: Optional[str] = Field(default=None, alias="logoUrl")


class AssetImage(BaseModel):
    """A fetched and decoded image payload"""
    model_config = ConfigDict(frozen=True)

    data: bytes
    media_type: str = "image/png"

    @property
    def data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.media_type};base64,{encoded}"


class SlideContent(BaseModel):
    """Everything needed to compose one slide. Created fresh per render."""
    model_config = ConfigDict(frozen=True)

    slide_number: int = Field(ge=1, description="1-based position in the carousel")
    total_slides: int = Field(ge=1)
    slide_type: SlideType
    title: str = Field(min_length=1)
    subtitle: Optional[str] = None
    body_text: Optional[str] = None
    emoji: Optional[str] = None
    template: Optional[str] = None
    use_asset_as: Optional[AssetRole] = None
    asset_image: Optional[AssetImage] = None
    brand: Brand
