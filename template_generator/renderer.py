"""Paint a printable dot, line, or graph-paper grid onto a Pillow image.

The grid is anchored at the canvas center so that marks are symmetric about
both axes, and a margin band clips marks near the edges. Rendering is split
into stages that can be called on their own:

1. ``offset_sequence``  - signed distances from the center along one axis
2. ``axis_positions``   - offsets moved onto the canvas and clipped to the margin band
3. ``plan_marks``       - dots or rule segments for a request's style
4. ``render``           - background fill followed by the planned marks

All inputs are in pixels. Unit conversion happens in ``template_generator.utils``.
"""

from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, NamedTuple, Optional, Tuple, Union

import numpy as np
from PIL import Image, ImageColor, ImageDraw

logger = logging.getLogger(__name__)


# ---------------------------
# Limits
# ---------------------------

# Upper bound on candidate offsets per axis. A 10000 px page at 1 px spacing
# stays below it; a sub-pixel spacing on a large page does not.
MAX_MARKS_PER_AXIS = 10_000

# Upper bound on dots per page. A letter page at 100 px/in and 1 px spacing
# stays below it.
MAX_DOTS = 1_000_000

# Absorbs float error when the last offset lands exactly on the canvas edge.
_EDGE_EPSILON = 1e-9

SURFACE_MODES = ("RGB", "RGBA")

Color = Union[str, Tuple[int, ...]]
RGBA = Tuple[int, int, int, int]


class InvalidParameter(ValueError):
    """Raised when a render request cannot be painted."""


class GridStyle(Enum):
    DOT = "dot"
    LINE = "line"
    GRAPH = "graph"

    @classmethod
    def parse(cls, value: Union["GridStyle", str]) -> "GridStyle":
        """Return the style named by ``value`` (case-insensitive)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        choices = ", ".join(style.value for style in cls)
        raise InvalidParameter(f"Unknown grid style {value!r} (expected one of: {choices})")


@dataclass(frozen=True)
class RenderRequest:
    width: int
    height: int
    style: Union[GridStyle, str]
    distance: float
    size: float
    color: Color = "#000000"
    background_color: Color = "#ffffff"
    margin: float = 0.0


class Segment(NamedTuple):
    x0: float
    y0: float
    x1: float
    y1: float


@dataclass
class MarkPlan:
    """Marks for one request, before any painting."""
    dots: List[Tuple[float, float]] = field(default_factory=list)
    segments: List[Segment] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.dots) + len(self.segments)


# ---------------------------
# Validation
# ---------------------------


def parse_color(value: Color) -> RGBA:
    """Normalize a hex/named color string or an RGB(A) tuple to RGBA."""
    if isinstance(value, str):
        try:
            return ImageColor.getcolor(value, "RGBA")
        except ValueError as e:
            raise InvalidParameter(f"Unrecognized color: {value!r}") from e

    if isinstance(value, (tuple, list)) and len(value) in (3, 4):
        channels = tuple(value)
        if all(isinstance(c, int) and 0 <= c <= 255 for c in channels):
            if len(channels) == 3:
                channels = channels + (255,)
            return channels  # type: ignore[return-value]

    raise InvalidParameter(f"Unrecognized color: {value!r}")


def _validate(request: RenderRequest) -> GridStyle:
    style = GridStyle.parse(request.style)

    if not (_is_whole(request.width) and _is_whole(request.height)):
        raise InvalidParameter("Image dimensions must be whole pixels.")
    if request.width <= 0 or request.height <= 0:
        raise InvalidParameter("Image dimensions must be positive.")
    if not _is_finite(request.distance) or request.distance <= 0:
        raise InvalidParameter(f"distance must be positive, got {request.distance!r}")
    if not _is_finite(request.size) or request.size < 0:
        raise InvalidParameter(f"size must be >= 0, got {request.size!r}")
    if not _is_finite(request.margin) or request.margin < 0:
        raise InvalidParameter(f"margin must be >= 0, got {request.margin!r}")

    parse_color(request.color)
    parse_color(request.background_color)

    candidates = []
    for extent in (request.width, request.height):
        steps = (extent / 2 + request.distance) / request.distance
        if steps >= MAX_MARKS_PER_AXIS:
            raise InvalidParameter(
                f"distance {request.distance!r} is too small for a {extent}px axis "
                f"(more than {MAX_MARKS_PER_AXIS} marks)"
            )
        candidates.append(2 * int(steps) + 1)

    if style is GridStyle.DOT and candidates[0] * candidates[1] > MAX_DOTS:
        raise InvalidParameter(
            f"distance {request.distance!r} is too small for a "
            f"{request.width}x{request.height}px dot grid (more than {MAX_DOTS} dots)"
        )

    return style


def _is_whole(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _is_finite(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool) and math.isfinite(value)


# ---------------------------
# Mark planning
# ---------------------------


def offset_sequence(half_extent: float, distance: float) -> np.ndarray:
    """Signed offsets ``0, +d, -d, +2d, -2d, ...`` up to ``half_extent + distance``.

    Offsets are exact multiples of ``distance``. Zero appears once.
    """
    if distance <= 0:
        raise InvalidParameter(f"distance must be positive, got {distance!r}")

    steps = int(math.floor((half_extent + distance) / distance + _EDGE_EPSILON))
    magnitudes = np.arange(1, steps + 1, dtype=np.float64) * distance

    offsets = np.zeros(2 * steps + 1, dtype=np.float64)
    offsets[1::2] = magnitudes
    offsets[2::2] = -magnitudes
    return offsets


def in_margin_band(positions: np.ndarray, margin: float, extent: float) -> np.ndarray:
    """Boolean mask of positions inside ``[margin, extent - margin]``."""
    return (positions >= margin) & (positions <= extent - margin)


def axis_positions(extent: float, distance: float, margin: float) -> np.ndarray:
    """Positions along one axis that survive margin clipping, center first."""
    center = extent / 2
    positions = center + offset_sequence(center, distance)
    return positions[in_margin_band(positions, margin, extent)]


def dot_centers(request: RenderRequest) -> List[Tuple[float, float]]:
    xs = axis_positions(request.width, request.distance, request.margin)
    ys = axis_positions(request.height, request.distance, request.margin)
    return [(float(x), float(y)) for y in ys for x in xs]


def horizontal_rules(request: RenderRequest) -> List[Segment]:
    """Full-width rules between the left and right margins."""
    x0 = float(request.margin)
    x1 = float(request.width - request.margin)
    ys = axis_positions(request.height, request.distance, request.margin)
    return [Segment(x0, float(y), x1, float(y)) for y in ys]


def vertical_rules(request: RenderRequest) -> List[Segment]:
    """Full-height rules between the top and bottom margins."""
    y0 = float(request.margin)
    y1 = float(request.height - request.margin)
    xs = axis_positions(request.width, request.distance, request.margin)
    return [Segment(float(x), y0, float(x), y1) for x in xs]


def _plan_dots(request: RenderRequest) -> MarkPlan:
    return MarkPlan(dots=dot_centers(request))


def _plan_lines(request: RenderRequest) -> MarkPlan:
    # Line style only walks the vertical axis, so it yields horizontal rules.
    return MarkPlan(segments=horizontal_rules(request))


def _plan_graph(request: RenderRequest) -> MarkPlan:
    return MarkPlan(segments=horizontal_rules(request) + vertical_rules(request))


_PLANNERS: dict[GridStyle, Callable[[RenderRequest], MarkPlan]] = {
    GridStyle.DOT: _plan_dots,
    GridStyle.LINE: _plan_lines,
    GridStyle.GRAPH: _plan_graph,
}


def plan_marks(request: RenderRequest) -> MarkPlan:
    """Validate ``request`` and return the marks its style would paint."""
    style = _validate(request)
    return _PLANNERS[style](request)


# ---------------------------
# Painting
# ---------------------------


def _ink(color: Color, mode: str) -> Tuple[int, ...]:
    rgba = parse_color(color)
    return rgba if mode == "RGBA" else rgba[:3]


def new_surface(width: int, height: int, mode: str = "RGBA") -> Image.Image:
    """Create a blank surface for ``render``."""
    if mode not in SURFACE_MODES:
        raise InvalidParameter(f"Unsupported surface mode: {mode!r}")
    return Image.new(mode, (width, height))


def _paint(draw: ImageDraw.ImageDraw, plan: MarkPlan, ink: Tuple[int, ...], size: float) -> None:
    if size > 0:
        for x, y in plan.dots:
            draw.ellipse([x - size, y - size, x + size, y + size], fill=ink)

    # Pillow strokes widths below 1 as a single pixel line.
    stroke = int(round(size))
    for segment in plan.segments:
        draw.line([(segment.x0, segment.y0), (segment.x1, segment.y1)], fill=ink, width=stroke)


def render(request: RenderRequest, surface: Optional[Image.Image] = None) -> Image.Image:
    """Paint the grid described by ``request`` and return the surface.

    A fresh RGBA surface is created when ``surface`` is None. The request is
    validated before anything is painted, so a rejected request leaves a
    supplied surface untouched.
    """
    plan = plan_marks(request)

    if surface is None:
        surface = new_surface(int(request.width), int(request.height))
    elif surface.mode not in SURFACE_MODES:
        raise InvalidParameter(f"Unsupported surface mode: {surface.mode!r}")
    elif surface.size != (request.width, request.height):
        raise InvalidParameter(
            f"Surface is {surface.size[0]}x{surface.size[1]}, "
            f"request is {request.width}x{request.height}"
        )

    draw = ImageDraw.Draw(surface)
    w, h = int(request.width), int(request.height)

    draw.rectangle([0, 0, w - 1, h - 1], fill=_ink(request.background_color, surface.mode))
    _paint(draw, plan, _ink(request.color, surface.mode), request.size)

    logger.debug(
        f"Rendered {GridStyle.parse(request.style).value} grid {w}x{h}: "
        f"{len(plan.dots)} dots, {len(plan.segments)} segments"
    )
    return surface
