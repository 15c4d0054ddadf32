"""
Exception hierarchy for the rendering collaborators.

The style resolver and slide composer never raise; these exceptions belong to
the I/O edges (configuration, fonts, asset fetch, rasterization) so that the
HTTP layer can map them to responses.
"""

from typing import Optional, Dict, Any


class RenderError(Exception):
    """Base exception for all rendering errors"""

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.cause = cause
        self.context = context or {}

    def __str__(self):
        parts = [super().__str__()]
        if self.cause:
            parts.append(f" (caused by: {type(self.cause).__name__}: {str(self.cause)})")
        if self.context:
            parts.append(f" Context: {self.context}")
        return "".join(parts)


# === Request exceptions ===

class RequestValidationError(RenderError):
    """Render request is missing fields or malformed"""

    def __init__(self, message: str, details: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.details = details


# === Collaborator exceptions ===

class FontLoadError(RenderError):
    """A font file could not be read"""

    def __init__(self, font_file: str, message: str, **kwargs):
        super().__init__(message, **kwargs)
        self.font_file = font_file
        self.context.update({'font_file': font_file})


class AssetFetchError(RenderError):
    """Remote asset image could not be fetched or decoded"""

    def __init__(self, url: str, message: str, **kwargs):
        super().__init__(message, **kwargs)
        self.url = url
        self.context.update({'url': url})


class RasterizationError(RenderError):
    """Layout tree could not be drawn"""
    pass


# === Configuration exceptions ===

class ConfigurationError(RenderError):
    """Configuration error"""
    pass


class InvalidConfigError(ConfigurationError):
    """Invalid configuration value"""
    pass
