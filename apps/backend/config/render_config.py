"""
Configuration for the slide rendering service.

Every value can be overridden through environment variables (a .env file is
loaded by the server entry point).
"""

import os
from dataclasses import dataclass, field, asdict
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

from services.exceptions import InvalidConfigError
from utils.images import MAX_IMAGE_PIXELS


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(',') if item.strip()]


@dataclass
class RenderConfig:
    """Rendering, fetch and server settings"""

    # Fonts
    fonts_dir: Path = field(default_factory=lambda: Path(os.getenv('FONTS_DIR', str(Path.cwd() / 'fonts'))))
    default_font_family: str = field(default_factory=lambda: os.getenv('DEFAULT_FONT_FAMILY', 'Inter'))

    # Asset fetch
    asset_fetch_timeout: float = field(default_factory=lambda: float(os.getenv('ASSET_FETCH_TIMEOUT', '10.0')))
    max_asset_bytes: int = field(default_factory=lambda: int(os.getenv('MAX_ASSET_BYTES', str(10 * 1024 * 1024))))
    max_image_pixels: int = field(default_factory=lambda: int(os.getenv('MAX_IMAGE_PIXELS', str(MAX_IMAGE_PIXELS))))

    # Output
    default_output_width: int = field(default_factory=lambda: int(os.getenv('DEFAULT_OUTPUT_WIDTH', '1080')))
    default_output_height: int = field(default_factory=lambda: int(os.getenv('DEFAULT_OUTPUT_HEIGHT', '1350')))
    max_output_width: int = field(default_factory=lambda: int(os.getenv('MAX_OUTPUT_WIDTH', '4320')))

    # Server
    cors_allow_origins: List[str] = field(default_factory=lambda: _split_csv(os.getenv('CORS_ALLOW_ORIGINS', '*')))
    host: str = field(default_factory=lambda: os.getenv('HOST', '0.0.0.0'))
    port: int = field(default_factory=lambda: int(os.getenv('PORT', '9090')))

    def validate(self):
        """Validate configuration values"""
        if self.asset_fetch_timeout <= 0:
            raise InvalidConfigError(f"asset_fetch_timeout must be positive, got {self.asset_fetch_timeout}")

        if self.max_asset_bytes < 1024:
            raise InvalidConfigError(f"max_asset_bytes must be at least 1024, got {self.max_asset_bytes}")

        if self.max_image_pixels < 1:
            raise InvalidConfigError(f"max_image_pixels must be positive, got {self.max_image_pixels}")

        if self.default_output_width < 1 or self.default_output_width > self.max_output_width:
            raise InvalidConfigError(
                f"default_output_width must be between 1 and {self.max_output_width}, got {self.default_output_width}"
            )

        if self.default_output_height < 1:
            raise InvalidConfigError(f"default_output_height must be at least 1, got {self.default_output_height}")

        if not self.default_font_family:
            raise InvalidConfigError("default_font_family must not be empty")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['fonts_dir'] = str(self.fonts_dir)
        return data


@lru_cache(maxsize=1)
def get_render_config() -> RenderConfig:
    """Get singleton configuration instance"""
    config = RenderConfig()
    config.validate()
    return config
