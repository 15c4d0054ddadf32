"""
Slide Rasterizer - draws a composed layout tree to a PNG with Pillow.

Supports exactly what the slide composer produces: a root container with a solid
or linear-gradient background, absolutely positioned image/overlay layers, and
one content wrapper laid out as a centered flex column with absolutely
positioned decorations.
"""

import io
import logging
import math
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from models.layout import ContainerNode, ImageNode, LayoutNodeBase, OverlayNode, TextNode
from services.exceptions import RasterizationError
from services.font_loader import FontResource
from utils.colors import interpolate_color, parse_css_color, parse_linear_gradient
from utils.images import decode_data_uri, open_image

logger = logging.getLogger(__name__)

DEFAULT_TEXT_COLOR = (0, 0, 0, 255)
DEFAULT_LINE_HEIGHT = 1.2

# Used only when no brand font could be loaded
SYSTEM_FONT_PATHS = [
    '/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf',
    '/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf',
    '/System/Library/Fonts/Helvetica.ttc',
    'C:\\Windows\\Fonts\\arial.ttf',
]

Box = Tuple[int, int, int, int]


@dataclass
class RasterizedSlide:
    png: bytes
    width: int
    height: int


@dataclass
class _FlowItem:
    node: LayoutNodeBase
    width: int
    height: int
    margin_top: int
    margin_bottom: int
    lines: Optional[List[str]] = None
    font: Optional[ImageFont.FreeTypeFont] = None
    line_height: int = 0


def _px(value: Any, reference: Optional[int] = None) -> Optional[float]:
    """Parse 40, '40px' or '100%' (relative to reference) into pixels."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    v = str(value).strip()
    try:
        if v.endswith('px'):
            return float(v[:-2])
        if v.endswith('%'):
            return float(v[:-1]) / 100.0 * (reference or 0)
        return float(v)
    except ValueError:
        logger.warning(f"Invalid length value: {value}")
        return None


def _margins(style: Dict[str, Any]) -> Tuple[int, int]:
    """Vertical margins (top, bottom) from margin / marginTop / marginBottom."""
    top = bottom = 0.0
    margin = style.get('margin')
    if margin is not None:
        parts = str(margin).split()
        values = [_px(p) or 0.0 for p in parts]
        if len(values) == 1:
            top = bottom = values[0]
        elif len(values) in (2, 3):
            top, bottom = values[0], values[2] if len(values) == 3 else values[0]
        elif len(values) >= 4:
            top, bottom = values[0], values[2]
    if 'marginTop' in style:
        top = _px(style['marginTop']) or 0.0
    if 'marginBottom' in style:
        bottom = _px(style['marginBottom']) or 0.0
    return int(top), int(bottom)


def _is_absolute(node: LayoutNodeBase) -> bool:
    return node.style.get('position') == 'absolute'


def _z_index(node: LayoutNodeBase) -> int:
    try:
        return int(node.style.get('zIndex', 0))
    except (TypeError, ValueError):
        return 0


class SlideRasterizer:
    """Renders a slide layout tree to PNG bytes"""

    def __init__(self, fonts: List[FontResource]):
        self.fonts = sorted(fonts, key=lambda f: f.weight)
        self._font_cache: Dict[Tuple[int, int], ImageFont.FreeTypeFont] = {}

    # ------------------------------------------------------------------ fonts

    def get_font(self, size: int, weight: int = 400) -> ImageFont.FreeTypeFont:
        """Nearest-weight face from the loaded fonts, cached per (weight, size)"""
        face = min(self.fonts, key=lambda f: abs(f.weight - weight)) if self.fonts else None
        cache_key = (face.weight if face else -1, size)
        if cache_key in self._font_cache:
            return self._font_cache[cache_key]

        font = None
        if face is not None:
            try:
                font = ImageFont.truetype(io.BytesIO(face.data), size)
            except OSError as e:
                logger.warning(f"Failed to load font face {face.name} ({face.weight}): {e}")
        if font is None:
            font = self._system_font(size)

        self._font_cache[cache_key] = font
        return font

    def _system_font(self, size: int) -> ImageFont.FreeTypeFont:
        for path in SYSTEM_FONT_PATHS:
            if os.path.exists(path):
                try:
                    return ImageFont.truetype(path, size)
                except OSError:
                    continue
        return ImageFont.load_default(size=size)

    # --------------------------------------------------------------- entry

    def render(self, tree: ContainerNode, width: Optional[int] = None) -> RasterizedSlide:
        """
        Draw the tree and encode it as PNG.

        Args:
            tree: Root container produced by the slide composer
            width: Output width; the canvas is scaled keeping its aspect ratio

        Returns:
            RasterizedSlide with PNG bytes and final dimensions
        """
        try:
            canvas_w = int(_px(tree.style.get('width')) or 1080)
            canvas_h = int(_px(tree.style.get('height')) or 1350)
            img = Image.new('RGBA', (canvas_w, canvas_h), (0, 0, 0, 0))

            self._paint_background(img, tree.style)
            canvas = (0, 0, canvas_w, canvas_h)
            for child in sorted(tree.children, key=_z_index):
                self._render_node(img, child, canvas)

            if width and width != canvas_w:
                height = max(1, round(canvas_h * width / canvas_w))
                img = img.resize((width, height), Image.LANCZOS)

            buffer = io.BytesIO()
            img.save(buffer, 'PNG')
        except (OSError, ValueError, TypeError) as e:
            raise RasterizationError("Failed to rasterize slide", cause=e)

        logger.debug(f"Rasterized slide at {img.width}x{img.height}")
        return RasterizedSlide(png=buffer.getvalue(), width=img.width, height=img.height)

    # ---------------------------------------------------------- backgrounds

    def _paint_background(self, img: Image.Image, style: Dict[str, Any]):
        gradient = parse_linear_gradient(style.get('background'))
        if gradient:
            angle, colors = gradient
            self._render_linear_gradient(img, colors, angle)
            return
        color = parse_css_color(style.get('backgroundColor') or style.get('background'))
        if color:
            self._fill(img, (0, 0, img.width, img.height), color)

    def _render_linear_gradient(self, img: Image.Image, colors: List[str], angle: float):
        """CSS linear-gradient: 0deg points up, 90deg points right"""
        width, height = img.size
        gradient = Image.new('RGBA', (width, height))
        draw = ImageDraw.Draw(gradient)

        angle_rad = math.radians(angle)
        dir_x, dir_y = math.sin(angle_rad), -math.cos(angle_rad)
        length = abs(width * dir_x) + abs(height * dir_y)
        start_x = width / 2 - dir_x * length / 2
        start_y = height / 2 - dir_y * length / 2
        perp_x, perp_y = -dir_y, dir_x
        scale = max(width, height) * 2

        for i in range(int(length) + 1):
            r, g, b = interpolate_color(colors, i / length if length else 0)
            cx = start_x + dir_x * i
            cy = start_y + dir_y * i
            draw.line([
                (cx - perp_x * scale, cy - perp_y * scale),
                (cx + perp_x * scale, cy + perp_y * scale)
            ], fill=(r, g, b, 255), width=2)

        img.alpha_composite(gradient)

    def _fill(self, img: Image.Image, box: Box, color: Tuple[int, int, int, int]):
        layer = Image.new('RGBA', img.size, (0, 0, 0, 0))
        ImageDraw.Draw(layer).rectangle([box[0], box[1], box[2] - 1, box[3] - 1], fill=color)
        img.alpha_composite(layer)

    # ---------------------------------------------------------------- nodes

    def _absolute_box(self, node: LayoutNodeBase, parent: Box) -> Box:
        px0, py0, px1, py1 = parent
        pw, ph = px1 - px0, py1 - py0
        x = px0 + int(_px(node.style.get('left'), pw) or 0)
        y = py0 + int(_px(node.style.get('top'), ph) or 0)
        w = int(_px(node.style.get('width'), pw) or pw)
        h = int(_px(node.style.get('height'), ph) or ph)
        return (x, y, x + w, y + h)

    def _render_node(self, img: Image.Image, node: LayoutNodeBase, parent: Box):
        if isinstance(node, ContainerNode):
            self._render_column(img, node, parent)
        elif isinstance(node, OverlayNode):
            color = parse_css_color(node.style.get('backgroundColor'))
            if color:
                self._fill(img, self._absolute_box(node, parent), color)
        elif isinstance(node, ImageNode):
            self._render_image(img, node, self._absolute_box(node, parent))
        else:
            item = self._measure_text(node, parent[2] - parent[0])
            self._render_text(img, item, self._place_absolute(item, parent))

    def _render_column(self, img: Image.Image, node: ContainerNode, box: Box):
        """Flex column, centered on both axes, absolute children placed separately"""
        pad = int(_px(node.style.get('padding')) or 0)
        inner = (box[0] + pad, box[1] + pad, box[2] - pad, box[3] - pad)
        inner_w = inner[2] - inner[0]
        inner_h = inner[3] - inner[1]

        flow: List[_FlowItem] = []
        absolute: List[LayoutNodeBase] = []
        for child in node.children:
            (absolute if _is_absolute(child) else flow).append(child)

        items = [self._measure(child, inner_w) for child in flow]
        total = sum(i.margin_top + i.height + i.margin_bottom for i in items)
        y = inner[1] + (inner_h - total) // 2

        for item in items:
            y += item.margin_top
            x = inner[0] + (inner_w - item.width) // 2
            target = (x, y, x + item.width, y + item.height)
            if isinstance(item.node, ImageNode):
                self._render_image(img, item.node, target)
            elif isinstance(item.node, ContainerNode):
                self._render_column(img, item.node, target)
            else:
                self._render_text(img, item, target)
            y += item.height + item.margin_bottom

        for child in sorted(absolute, key=_z_index):
            if isinstance(child, (ImageNode, OverlayNode, ContainerNode)):
                self._render_node(img, child, box)
            else:
                item = self._measure_text(child, box[2] - box[0])
                self._render_text(img, item, self._place_absolute(item, box))

    def _place_absolute(self, item: _FlowItem, box: Box) -> Box:
        style = item.node.style
        bw = box[2] - box[0]
        bh = box[3] - box[1]
        if 'left' in style:
            x = box[0] + int(_px(style['left'], bw) or 0)
        elif 'right' in style:
            x = box[2] - int(_px(style['right'], bw) or 0) - item.width
        else:
            x = box[0] + (bw - item.width) // 2
        if 'top' in style:
            y = box[1] + int(_px(style['top'], bh) or 0)
        elif 'bottom' in style:
            y = box[3] - int(_px(style['bottom'], bh) or 0) - item.height
        else:
            y = box[1] + (bh - item.height) // 2
        return (x, y, x + item.width, y + item.height)

    # -------------------------------------------------------------- measure

    def _measure(self, node: LayoutNodeBase, available_width: int) -> _FlowItem:
        margin_top, margin_bottom = _margins(node.style)
        if isinstance(node, ImageNode):
            w = int(_px(node.style.get('width'), available_width) or available_width)
            h = int(_px(node.style.get('height')) or w)
            return _FlowItem(node, min(w, available_width), h, margin_top, margin_bottom)
        if isinstance(node, ContainerNode):
            return _FlowItem(node, available_width, 0, margin_top, margin_bottom)
        return self._measure_text(node, available_width)

    def _measure_text(self, node: TextNode, available_width: int) -> _FlowItem:
        style = node.style
        size = int(_px(style.get('fontSize')) or 16)
        weight = int(style.get('fontWeight', 400))
        font = self.get_font(size, weight)

        max_width = int(_px(style.get('maxWidth'), available_width) or available_width)
        max_width = min(max_width, available_width)
        lines = self._wrap_text(node.text, font, max_width)
        line_height = int(round(size * float(style.get('lineHeight', DEFAULT_LINE_HEIGHT))))

        widths = [self._text_width(font, line) for line in lines]
        margin_top, margin_bottom = _margins(style)
        return _FlowItem(
            node=node,
            width=max(widths) if widths else 0,
            height=line_height * len(lines),
            margin_top=margin_top,
            margin_bottom=margin_bottom,
            lines=lines,
            font=font,
            line_height=line_height,
        )

    @staticmethod
    def _text_width(font: ImageFont.FreeTypeFont, text: str) -> int:
        bbox = font.getbbox(text)
        return int(bbox[2] - bbox[0])

    def _wrap_text(self, text: str, font: ImageFont.FreeTypeFont, max_width: int) -> List[str]:
        """Wrap text to fit within max_width, keeping explicit line breaks"""
        lines = []
        for paragraph in text.split('\n'):
            words = paragraph.split()
            current_line: List[str] = []
            for word in words:
                test_line = ' '.join(current_line + [word])
                if self._text_width(font, test_line) <= max_width:
                    current_line.append(word)
                else:
                    if current_line:
                        lines.append(' '.join(current_line))
                        current_line = [word]
                    else:
                        # Word is too long, force break
                        lines.append(word)
            if current_line:
                lines.append(' '.join(current_line))
            elif not words:
                lines.append('')
        return lines if lines else ['']

    # ----------------------------------------------------------------- draw

    def _render_text(self, img: Image.Image, item: _FlowItem, box: Box):
        style = item.node.style
        r, g, b, a = parse_css_color(style.get('color')) or DEFAULT_TEXT_COLOR
        alpha = int(a * float(style.get('opacity', 1.0)))

        layer = Image.new('RGBA', img.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        center_x = (box[0] + box[2]) / 2
        size = item.font.size if hasattr(item.font, 'size') else item.line_height
        for index, line in enumerate(item.lines or []):
            # Glyph box sits in the middle of its line box
            line_y = box[1] + index * item.line_height + (item.line_height - size) / 2
            draw.text((center_x, line_y), line, font=item.font, fill=(r, g, b, alpha), anchor='ma')
        img.alpha_composite(layer)

    def _render_image(self, img: Image.Image, node: ImageNode, box: Box):
        """Paste a data-URI image into box honouring objectFit (cover / contain)"""
        if not node.src.startswith('data:'):
            logger.warning(f"Skipping unresolved image source for {node.role}")
            return
        data = decode_data_uri(node.src)
        source = open_image(data) if data else None
        if source is None:
            logger.warning(f"Skipping undecodable image for {node.role}")
            return

        width = max(1, box[2] - box[0])
        height = max(1, box[3] - box[1])
        im = source.convert('RGBA')
        iw, ih = im.size
        if node.style.get('objectFit') == 'cover':
            scale = max(width / iw, height / ih)
        else:
            scale = min(width / iw, height / ih)
        im = im.resize((max(1, int(iw * scale)), max(1, int(ih * scale))), Image.LANCZOS)

        # Center inside the box, cropping whatever overflows it
        layer = Image.new('RGBA', (width, height), (0, 0, 0, 0))
        layer.paste(im, ((width - im.size[0]) // 2, (height - im.size[1]) // 2), im)

        opacity = float(node.style.get('opacity', 1.0))
        if opacity < 1.0:
            alpha = layer.getchannel('A').point(lambda v: int(v * opacity))
            layer.putalpha(alpha)

        full = Image.new('RGBA', img.size, (0, 0, 0, 0))
        full.paste(layer, (box[0], box[1]))
        img.alpha_composite(full)
