"""
Font file loading for the rasterizer.

Maps a font family to its regular/bold TTF files inside the fonts directory and
keeps the loaded bytes in a process-wide cache. The cache is filled lazily on the
first request for a family, is never evicted and is safe for concurrent readers.
"""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from config.render_config import get_render_config
from services.exceptions import FontLoadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FontResource:
    """A single loaded font face."""
    name: str
    data: bytes
    weight: int
    style: str = "normal"


@dataclass(frozen=True)
class FontFile:
    file: str
    weight: int


FONT_FILES: Dict[str, List[FontFile]] = {
    "Inter": [FontFile("Inter-Regular.ttf", 400), FontFile("Inter-Bold.ttf", 700)],
    "Roboto": [FontFile("Roboto-Regular.ttf", 400), FontFile("Roboto-Bold.ttf", 700)],
    "Open Sans": [FontFile("OpenSans-Regular.ttf", 400), FontFile("OpenSans-Bold.ttf", 700)],
    "Montserrat": [FontFile("Montserrat-Regular.ttf", 400), FontFile("Montserrat-Bold.ttf", 700)],
    "Poppins": [FontFile("Poppins-Regular.ttf", 400), FontFile("Poppins-Bold.ttf", 700)],
}


class FontLoader:
    """Loads and caches font faces per family."""

    def __init__(self, fonts_dir: Optional[Path] = None, default_family: Optional[str] = None):
        self._fonts_dir = Path(fonts_dir) if fonts_dir else None
        self._default_family = default_family
        self._cache: Dict[Tuple[str, str], List[FontResource]] = {}
        self._lock = threading.Lock()

    @property
    def fonts_dir(self) -> Path:
        if self._fonts_dir is None:
            self._fonts_dir = get_render_config().fonts_dir
        return self._fonts_dir

    @property
    def default_family(self) -> str:
        if self._default_family is None:
            self._default_family = get_render_config().default_font_family
        return self._default_family

    def get_font_files(self, family: str) -> List[FontFile]:
        """Font files for a family; unknown families use the default family's files."""
        return FONT_FILES.get(family) or FONT_FILES.get(self.default_family) or FONT_FILES["Inter"]

    def _read_font(self, font_file: FontFile) -> bytes:
        path = self.fonts_dir / font_file.file
        try:
            return path.read_bytes()
        except OSError as e:
            raise FontLoadError(font_file.file, f"Failed to load font {font_file.file}", cause=e)

    def load_fonts(self, family: Optional[str] = None) -> List[FontResource]:
        """
        Load every face of a font family.

        Args:
            family: Font family name; empty means the default family

        Returns:
            Loaded faces. Falls back to the default family when none of the
            requested family's files are readable; empty only when the default
            family is unreadable as well.
        """
        family = family or self.default_family
        cache_key = (str(self.fonts_dir), family)

        with self._lock:
            cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        fonts: List[FontResource] = []
        for font_file in self.get_font_files(family):
            try:
                data = self._read_font(font_file)
            except FontLoadError as e:
                logger.warning(str(e))
                continue
            fonts.append(FontResource(name=family, data=data, weight=font_file.weight))

        if not fonts:
            if family != self.default_family:
                logger.warning(f"No usable fonts for '{family}', falling back to {self.default_family}")
                fonts = self.load_fonts(self.default_family)
                if fonts:
                    with self._lock:
                        fonts = self._cache.setdefault(cache_key, fonts)
                return fonts
            logger.error(f"Default font family {self.default_family} could not be loaded from {self.fonts_dir}")
            return []

        with self._lock:
            # First writer wins so every reader sees the same list
            fonts = self._cache.setdefault(cache_key, fonts)
        logger.info(f"Loaded {len(fonts)} font faces for '{family}'")
        return fonts


def list_supported_families() -> List[str]:
    return list(FONT_FILES.keys())


font_loader = FontLoader()
