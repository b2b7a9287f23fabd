# Model/geometry.py
from __future__ import annotations
from dataclasses import dataclass

from .annotations import Point


@dataclass(frozen=True)
class CanvasScale:
    # image pixels per displayed pixel, per axis
    x: float = 1.0
    y: float = 1.0


@dataclass(frozen=True)
class DisplayRect:
    # Where the image is shown inside the widget, in widget coordinates
    left: float
    top: float
    width: float
    height: float

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x < self.left + self.width and self.top <= y < self.top + self.height


def compute_canvas_scale(natural_w: float, natural_h: float, displayed_w: float, displayed_h: float) -> CanvasScale:
    # Nothing displayed yet (hidden widget, zero size) -> identity
    if displayed_w <= 0 or displayed_h <= 0:
        return CanvasScale()
    return CanvasScale(natural_w / displayed_w, natural_h / displayed_h)


def fit_rect(image_w: float, image_h: float, widget_w: float, widget_h: float) -> DisplayRect:
    """
    Aspect-fit rectangle of the image inside the widget, centered.
    The image is never enlarged beyond its natural size, similar to an <img> with max-width: 100%.
    """
    if image_w <= 0 or image_h <= 0 or widget_w <= 0 or widget_h <= 0:
        return DisplayRect(0.0, 0.0, 0.0, 0.0)
    s = min(widget_w / image_w, widget_h / image_h, 1.0)
    w, h = image_w * s, image_h * s
    return DisplayRect((widget_w - w) / 2.0, (widget_h - h) / 2.0, w, h)


def pointer_to_image(client_x: float, client_y: float, rect: DisplayRect,
                     internal_w: float, internal_h: float) -> Point:
    # Backward transformation: widget position -> image pixel.
    # rect has to be taken fresh for every event, the layout can change in between.
    x = (client_x - rect.left) * (internal_w / rect.width)
    y = (client_y - rect.top) * (internal_h / rect.height)
    return x, y


def image_to_display(pt: Point, rect: DisplayRect, internal_w: float, internal_h: float) -> Point:
    # Forward transformation, used for drawing markers with a fixed on-screen radius
    x = rect.left + pt[0] * (rect.width / internal_w)
    y = rect.top + pt[1] * (rect.height / internal_h)
    return x, y
