"""Bounding boxes, detections, coordinate rescaling and non-maximum suppression."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

Size = tuple[int, int]
"""An image size as ``(width, height)``."""


def _round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(float(value)) + 0.5), value))


@dataclass(frozen=True)
class BoundingBox:
    """An axis-aligned box given by its top-left corner and its size in pixels."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    def area(self) -> float:
        """Return the area of the box."""
        return float(self.width * self.height)

    def intersect(self, other: BoundingBox) -> BoundingBox:
        """Return the overlap of two boxes; its size is zero if they do not overlap."""
        x_start = max(self.x, other.x)
        y_start = max(self.y, other.y)
        x_end = min(self.x + self.width, other.x + other.width)
        y_end = min(self.y + self.height, other.y + other.height)
        return BoundingBox(
            x_start, y_start, max(0, x_end - x_start), max(0, y_end - y_start)
        )


@dataclass(frozen=True)
class Detection:
    """A detected object: its box, confidence and class index."""

    box: BoundingBox
    conf: float = 0.0
    class_id: int = 0


def clamp(value, low, high):
    """Restrict ``value`` to ``[low, high]``; the bounds are swapped if given reversed."""
    valid_low, valid_high = (low, high) if low < high else (high, low)
    if value < valid_low:
        return valid_low
    if value > valid_high:
        return valid_high
    return value


def scale_coords(
    image_shape: Size,
    coords: BoundingBox,
    original_shape: Size,
    clip: bool = True,
) -> BoundingBox:
    """Map a box from a letterboxed image back onto the original image.

    Both shapes are ``(width, height)``. With ``clip`` the result is kept
    inside the original image.
    """
    width, height = image_shape
    orig_width, orig_height = original_shape
    if orig_width <= 0 or orig_height <= 0:
        raise ValueError(f"original shape must be positive, got {original_shape!r}")

    gain = min(
        np.float32(height) / np.float32(orig_height),
        np.float32(width) / np.float32(orig_width),
    )
    half = np.float32(2.0)
    pad_x = _round_half_away((np.float32(width) - np.float32(orig_width) * gain) / half)
    pad_y = _round_half_away((np.float32(height) - np.float32(orig_height) * gain) / half)

    x = _round_half_away(np.float32(coords.x - pad_x) / gain)
    y = _round_half_away(np.float32(coords.y - pad_y) / gain)
    w = _round_half_away(np.float32(coords.width) / gain)
    h = _round_half_away(np.float32(coords.height) / gain)

    if clip:
        x = clamp(x, 0, orig_width)
        y = clamp(y, 0, orig_height)
        w = clamp(w, 0, orig_width - x)
        h = clamp(h, 0, orig_height - y)
    return BoundingBox(x, y, w, h)


def nms_boxes(
    boxes: list[BoundingBox],
    scores: list[float],
    score_threshold: float,
    nms_threshold: float,
) -> list[int]:
    """Return the indices of boxes kept by non-maximum suppression.

    Boxes scoring below ``score_threshold`` are dropped; the rest are visited
    in order of falling score, and each kept box suppresses every later box
    whose intersection over union with it exceeds ``nms_threshold``.
    """
    if len(boxes) != len(scores):
        raise ValueError("boxes and scores must have the same length")

    order = sorted(
        (i for i, score in enumerate(scores) if score >= score_threshold),
        key=lambda i: scores[i],
        reverse=True,
    )
    areas = [box.area() for box in boxes]
    suppressed = [False] * len(boxes)
    kept: list[int] = []

    for position, current in enumerate(order):
        if suppressed[current]:
            continue
        kept.append(current)
        box = boxes[current]
        left, top = float(box.x), float(box.y)
        right, bottom = float(box.x + box.width), float(box.y + box.height)

        for other in order[position + 1:]:
            if suppressed[other]:
                continue
            cand = boxes[other]
            inter_w = min(right, cand.x + cand.width) - max(left, cand.x)
            inter_h = min(bottom, cand.y + cand.height) - max(top, cand.y)
            if inter_w <= 0 or inter_h <= 0:
                continue
            intersection = inter_w * inter_h
            union = areas[current] + areas[other] - intersection
            iou = intersection / union if union > 0.0 else 0.0
            if iou > nms_threshold:
                suppressed[other] = True
    return kept