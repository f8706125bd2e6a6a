"""Coordinate mapping between viewport, native frame and rendered overlay space.

Three pixel spaces are involved when scanning:

- viewport (client) space: the widget the live frame is painted into; the
  frame is "cover" fitted, so it fills the widget and the overflow is
  centre-cropped.
- native space: the camera frame's own pixels, and therefore also the
  captured still and the recognizer's bounding boxes.
- rendered space: the still as displayed on the results view, stretched to
  its slot independently on each axis.

All functions are pure; rectangles are `(x, y, width, height)` floats.
"""
from __future__ import annotations

from dataclasses import dataclass

from SnapDict.core.models import BBox


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class CoverFit:
    """Scale/offset of a cover-fitted frame inside its client area."""
    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    def display_to_native(self, r: Rect) -> Rect:
        return Rect(
            (r.x - self.offset_x) / self.scale,
            (r.y - self.offset_y) / self.scale,
            r.width / self.scale,
            r.height / self.scale,
        )

    def native_to_display(self, r: Rect) -> Rect:
        return Rect(
            r.x * self.scale + self.offset_x,
            r.y * self.scale + self.offset_y,
            r.width * self.scale,
            r.height * self.scale,
        )


IDENTITY_FIT = CoverFit()


def compute_cover_fit(native_w: float, native_h: float, client_w: float, client_h: float) -> CoverFit:
    """Compute the cover fit of a `native_w x native_h` frame in a client area.

    Returns the identity mapping while either size is unknown (frame not
    loaded yet, or the client area not laid out).
    """
    if not native_w or not native_h or not client_w or not client_h:
        return IDENTITY_FIT
    scale = max(client_w / native_w, client_h / native_h)
    offset_x = (client_w - native_w * scale) / 2
    offset_y = (client_h - native_h * scale) / 2
    return CoverFit(scale, offset_x, offset_y)


def roi_rect(client_w: float, client_h: float, width_ratio: float = 0.85,
             height: float = 160.0, center_y_ratio: float = 1 / 3) -> Rect:
    """The fixed on-screen region of interest, in viewport space."""
    w = client_w * width_ratio
    x = (client_w - w) / 2
    y = client_h * center_y_ratio - height / 2
    return Rect(x, y, w, height)


def crop_box(native: Rect) -> tuple[int, int, int, int]:
    """Integer `(left, top, right, bottom)` crop box for a native rectangle.

    The origin is truncated toward zero and the size truncated to whole
    pixels, matching how a raster canvas of that size is allocated.
    """
    left = int(native.x)
    top = int(native.y)
    return left, top, left + int(native.width), top + int(native.height)


@dataclass(frozen=True)
class RenderScale:
    """Per-axis scale from still-image pixels to its rendered slot."""
    x: float
    y: float

    def bbox_to_overlay(self, b: BBox) -> Rect:
        return Rect(b.x0 * self.x, b.y0 * self.y, b.width * self.x, b.height * self.y)

    def overlay_point_to_still(self, px: float, py: float) -> tuple[float, float] | None:
        if not self.x or not self.y:
            return None
        return px / self.x, py / self.y


def compute_render_scale(still_w: float, still_h: float, rendered_w: float, rendered_h: float) -> RenderScale:
    """Scale for drawing candidate boxes over a stretched still.

    An unloaded still (zero natural size) yields a zero scale, so overlays
    collapse to zero size instead of failing.
    """
    if not still_w or not still_h:
        return RenderScale(0.0, 0.0)
    return RenderScale(rendered_w / still_w, rendered_h / still_h)
