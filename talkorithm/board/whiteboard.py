"""Whiteboard — the sketchpad whose snapshot rides along with a chat turn."""

from __future__ import annotations

import base64
import io
import logging
import math
from dataclasses import dataclass
from enum import Enum

from PIL import Image, ImageDraw

from talkorithm.config import settings

logger = logging.getLogger(__name__)

COLORS = ("#0b1420", "#2563ff", "#16a34a", "#f97316", "#dc2626", "#8b5cf6")

MIN_WIDTH = 320
MIN_HEIGHT = 220
MIN_STROKE = 2
MAX_STROKE = 10
DEFAULT_STROKE = 3

TRANSPARENT = (0, 0, 0, 0)
PNG_DATA_URL_PREFIX = "data:image/png;base64,"


class Tool(str, Enum):
    PEN = "pen"
    ERASE = "erase"
    LINE = "line"


@dataclass(frozen=True)
class Point:
    x: float
    y: float


class Whiteboard:
    """A drawable canvas in logical pixels, backed by a Pillow RGBA image.

    The backing image is the logical size scaled by *pixel_ratio*, the way a
    browser canvas is scaled by the device pixel ratio. Pointer coordinates
    are logical; stroke widths scale with the ratio.
    """

    def __init__(
        self,
        width: int | None = None,
        height: int | None = None,
        pixel_ratio: float | None = None,
    ) -> None:
        self.pixel_ratio = pixel_ratio or settings.board_pixel_ratio or 1.0
        self.tool = Tool.PEN
        self.color = COLORS[0]
        self.size = DEFAULT_STROKE
        self._dirty = False
        self._drawing = False
        self._last: Point | None = None
        self._line_start: Point | None = None
        self.resize(width or settings.board_width, height or settings.board_height)

    # -- Geometry --------------------------------------------------------------

    def resize(self, width: float, height: float) -> None:
        """Resize to at least the minimum logical size.

        The backing image is recreated, so existing strokes are lost. The
        dirty flag is left untouched.
        """
        self.width = max(MIN_WIDTH, math.floor(width))
        self.height = max(MIN_HEIGHT, math.floor(height))
        backing = (
            math.floor(self.width * self.pixel_ratio),
            math.floor(self.height * self.pixel_ratio),
        )
        self._image = Image.new("RGBA", backing, TRANSPARENT)
        logger.debug("Whiteboard resized to %dx%d (backing %dx%d)", self.width, self.height, *backing)

    @property
    def image(self) -> Image.Image:
        """The backing raster (read-only use)."""
        return self._image

    # -- Tool state ------------------------------------------------------------

    def set_tool(self, tool: Tool | str) -> None:
        self.tool = Tool(tool)

    def set_color(self, color: str) -> None:
        """Pick a stroke colour; picking a colour switches back to the pen."""
        if color not in COLORS:
            raise ValueError(f"Unknown colour {color!r}; choose one of {', '.join(COLORS)}")
        self.color = color
        self.tool = Tool.PEN

    def set_size(self, size: int) -> None:
        """Set the stroke width, clamped to the slider range."""
        self.size = min(MAX_STROKE, max(MIN_STROKE, int(size)))

    # -- Pointer events --------------------------------------------------------

    def pointer_down(self, x: float, y: float) -> None:
        point = Point(x, y)
        self._drawing = True
        self._last = point
        self._line_start = point

    def pointer_move(self, x: float, y: float) -> None:
        if not self._drawing or self._last is None:
            return
        point = Point(x, y)
        if self.tool is not Tool.LINE:
            self._stroke(self._last, point)
            self._dirty = True
        self._last = point

    def pointer_up(self, x: float, y: float) -> None:
        if not self._drawing:
            return
        self._drawing = False

        if self.tool is Tool.LINE and self._line_start is not None:
            self._stroke(self._line_start, Point(x, y))
            self._dirty = True

        self._last = None
        self._line_start = None

    pointer_leave = pointer_up

    def _stroke(self, start: Point, end: Point) -> None:
        """Draw a round-capped segment with the current tool settings."""
        ratio = self.pixel_ratio
        width = max(1, round(self.size * ratio))
        fill = TRANSPARENT if self.tool is Tool.ERASE else self.color
        x0, y0 = start.x * ratio, start.y * ratio
        x1, y1 = end.x * ratio, end.y * ratio

        # Plain (non-blending) draw: transparent fill clears pixels for erase
        draw = ImageDraw.Draw(self._image)
        draw.line([(x0, y0), (x1, y1)], fill=fill, width=width)
        radius = width / 2
        for cx, cy in ((x0, y0), (x1, y1)):
            draw.ellipse([cx - radius, cy - radius, cx + radius, cy + radius], fill=fill)

    # -- Handle ----------------------------------------------------------------

    def clear(self) -> None:
        """Wipe the canvas and reset the dirty flag."""
        self._image.paste(TRANSPARENT, (0, 0, *self._image.size))
        self._dirty = False

    def has_content(self) -> bool:
        """True once anything has been drawn since the last clear."""
        return self._dirty

    def snapshot(self) -> str | None:
        """PNG data-URL of the canvas, or None if nothing was drawn."""
        if not self._dirty:
            return None
        buf = io.BytesIO()
        self._image.save(buf, format="PNG")
        return PNG_DATA_URL_PREFIX + base64.b64encode(buf.getvalue()).decode("ascii")
