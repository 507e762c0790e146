"""Drawing of detections, labels and translucent masks onto BGR images."""

from __future__ import annotations

from functools import lru_cache
from typing import Sequence

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from roifusion.geometry import Detection
from roifusion.yolo10 import CONFIDENCE_THRESHOLD as CORNER_CONFIDENCE_THRESHOLD
from roifusion.yolo10 import CornerDetection

CONFIDENCE_THRESHOLD = 0.4
"""Detections at or below this confidence are not drawn."""

MASK_ALPHA = 0.4
"""Default weight of the translucent mask blended over the image."""

BOX_THICKNESS = 2
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)

Color = tuple[int, int, int]


@lru_cache(maxsize=1)
def _font():
    return ImageFont.load_default()


def _canvas(image) -> np.ndarray:
    canvas = np.array(image, dtype=np.uint8, copy=True)
    if canvas.ndim != 3 or canvas.shape[2] != 3:
        raise ValueError(f"expected an H x W x 3 image, got shape {canvas.shape}")
    if canvas.shape[0] == 0 or canvas.shape[1] == 0:
        raise ValueError("cannot draw on an empty image")
    return canvas


def _as_color(color) -> Color:
    values = tuple(int(c) for c in tuple(color)[:3])
    if len(values) != 3:
        raise ValueError(f"a colour needs three components, got {color!r}")
    return values


def _color_for(colors: Sequence, class_id: int, wrap: bool) -> Color:
    if not colors:
        raise ValueError("no colours given")
    if wrap:
        return _as_color(colors[class_id % len(colors)])
    if class_id >= len(colors):
        raise ValueError(f"no colour for class {class_id}")
    return _as_color(colors[class_id])


def _valid_class(class_id: int, class_names: Sequence[str]) -> bool:
    return 0 <= class_id < len(class_names)


def _text_size(draw: ImageDraw.ImageDraw, text: str) -> tuple[int, int]:
    _, _, right, bottom = draw.textbbox((0, 0), text, font=_font())
    return int(right), int(bottom)


def _rectangle(draw: ImageDraw.ImageDraw, corner1, corner2, color: Color, filled: bool) -> None:
    left, right = sorted((int(corner1[0]), int(corner2[0])))
    top, bottom = sorted((int(corner1[1]), int(corner2[1])))
    if filled:
        draw.rectangle([left, top, right, bottom], fill=color)
    else:
        draw.rectangle([left, top, right, bottom], outline=color, width=BOX_THICKNESS)


def _put_text(draw: ImageDraw.ImageDraw, text: str, origin, color: Color) -> None:
    """Draw text whose bottom-left corner lies at ``origin``."""
    _, height = _text_size(draw, text)
    draw.text((int(origin[0]), int(origin[1]) - height), text, fill=color, font=_font())


def _percent(confidence: float) -> int:
    return int(float(confidence) * 100)


def _draw_labelled_box(draw: ImageDraw.ImageDraw, detection: Detection, label: str, color: Color) -> None:
    box = detection.box
    _rectangle(draw, (box.x, box.y), (box.x + box.width, box.y + box.height), color, False)
    text_w, text_h = _text_size(draw, label)
    label_y = max(box.y, text_h + 5)
    _rectangle(
        draw,
        (box.x, label_y - text_h - 5),
        (box.x + text_w + 5, label_y - 5),
        color,
        True,
    )
    _put_text(draw, label, (box.x + 2, label_y - 2), WHITE)


def _label(detection: Detection, class_names: Sequence[str]) -> str:
    return f"{class_names[detection.class_id]}: {_percent(detection.conf)}%"


def draw_bounding_boxes(
    image,
    detections: Sequence[Detection],
    class_names: Sequence[str],
    colors: Sequence,
    confidence_threshold: float = CONFIDENCE_THRESHOLD,
) -> np.ndarray:
    """Return a copy of ``image`` with each detection's box and label drawn.

    Detections at or below ``confidence_threshold`` or with an unknown class
    are skipped. Colours are picked by class index, wrapping around.
    """
    canvas = _canvas(image)
    picture = Image.fromarray(canvas)
    draw = ImageDraw.Draw(picture)
    for detection in detections:
        if detection.conf <= confidence_threshold:
            continue
        if not _valid_class(detection.class_id, class_names):
            continue
        color = _color_for(colors, detection.class_id, wrap=True)
        _draw_labelled_box(draw, detection, _label(detection, class_names), color)
    return np.array(picture, dtype=np.uint8)


def draw_bounding_box_masks(
    image,
    detections: Sequence[Detection],
    class_names: Sequence[str],
    colors: Sequence,
    mask_alpha: float = MASK_ALPHA,
    confidence_threshold: float | None = CONFIDENCE_THRESHOLD,
) -> np.ndarray:
    """Return a copy of ``image`` with translucent boxes, outlines and labels.

    Each kept detection's box is filled with its class colour on a mask that is
    added to the image with weight ``mask_alpha``. With ``confidence_threshold``
    set to ``None`` every detection with a known class is drawn.
    """
    canvas = _canvas(image)
    kept = [
        d
        for d in detections
        if (confidence_threshold is None or d.conf > confidence_threshold)
        and _valid_class(d.class_id, class_names)
    ]

    mask = Image.fromarray(np.zeros_like(canvas))
    mask_draw = ImageDraw.Draw(mask)
    for detection in kept:
        box = detection.box
        if box.width <= 0 or box.height <= 0:
            continue
        color = _color_for(colors, detection.class_id, wrap=False)
        mask_draw.rectangle(
            [box.x, box.y, box.x + box.width - 1, box.y + box.height - 1], fill=color
        )

    blended = np.asarray(mask, dtype=np.float64) * float(mask_alpha) + canvas.astype(np.float64)
    canvas = np.clip(np.rint(blended), 0, 255).astype(np.uint8)

    picture = Image.fromarray(canvas)
    draw = ImageDraw.Draw(picture)
    for detection in kept:
        color = _color_for(colors, detection.class_id, wrap=False)
        _draw_labelled_box(draw, detection, _label(detection, class_names), color)
    return np.array(picture, dtype=np.uint8)


def draw_corner_boxes(
    image,
    detections: Sequence[CornerDetection],
    class_names: Sequence[str],
    colors: Sequence,
    confidence_threshold: float = CORNER_CONFIDENCE_THRESHOLD,
) -> np.ndarray:
    """Return a copy of ``image`` with corner-style detections drawn.

    The class name is written above the box and the confidence percentage
    below it, both in black on the class colour.
    """
    canvas = _canvas(image)
    rows = canvas.shape[0]
    picture = Image.fromarray(canvas)
    draw = ImageDraw.Draw(picture)
    for detection in detections:
        if detection.confidence <= confidence_threshold:
            continue
        if not _valid_class(detection.class_id, class_names):
            continue
        color = _color_for(colors, detection.class_id, wrap=True)
        _rectangle(draw, (detection.x1, detection.y1), (detection.x2, detection.y2), color, False)

        label = class_names[detection.class_id]
        confidence_text = f"{_percent(detection.confidence)}%"
        label_w, label_h = _text_size(draw, label)
        conf_w, conf_h = _text_size(draw, confidence_text)

        label_origin = (detection.x1, max(detection.y1 - 10, label_h))
        conf_origin = (detection.x1, min(detection.y2 + conf_h + 10, rows - 1))

        _rectangle(
            draw,
            label_origin,
            (label_origin[0] + label_w, label_origin[1] - label_h),
            color,
            True,
        )
        _rectangle(
            draw,
            conf_origin,
            (conf_origin[0] + conf_w, conf_origin[1] - conf_h),
            color,
            True,
        )
        _put_text(draw, label, label_origin, BLACK)
        _put_text(draw, confidence_text, conf_origin, BLACK)
    return np.array(picture, dtype=np.uint8)