from typing import Optional

from pydantic import BaseModel, Field

from models.slide import AssetImage, AssetRole, Brand, SlideContent, SlideType

REQUIRED_FIELDS = ("slide_number", "slide_type", "title", "brand")


class OutputOptions(BaseModel):
    """Requested output size. Only PNG is produced."""
    width: Optional[int] = Field(default=None, ge=1)
    height: Optional[int] = Field(default=None, ge=1)
    format: str = "png"


class RenderSlideRequest(BaseModel):
    """Body of POST /api/render-slide"""
    slide_number: int = Field(ge=1)
    total_slides: int = Field(default=1, ge=1)
    slide_type: SlideType
    title: str = Field(min_length=1)
    subtitle: Optional[str] = None
    body_text: Optional[str] = None
    emoji: Optional[str] = None
    brand: Brand
    template: Optional[str] = None
    asset_url: Optional[str] = Field(default=None, description="Image fetched before composing; failures render without it")
    use_asset_as: Optional[AssetRole] = None
    output: Optional[OutputOptions] = None

    def to_slide_content(self, asset_image: Optional[AssetImage] = None, brand: Optional[Brand] = None) -> SlideContent:
        """Build composer input; brand may be replaced by one with a resolved logo."""
        return SlideContent(
            slide_number=self.slide_number,
            total_slides=self.total_slides,
            slide_type=self.slide_type,
            title=self.title,
            subtitle=self.subtitle,
            body_text=self.body_text,
            emoji=self.emoji,
            template=self.template,
            use_asset_as=self.use_asset_as,
            asset_image=asset_image,
            brand=brand or self.brand,
        )


class RenderDimensions(BaseModel):
    width: int
    height: int


class RenderSlideResponse(BaseModel):
    success: bool = True
    image_base64: str
    dimensions: RenderDimensions
    render_time_ms: int


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: Optional[str] = None
