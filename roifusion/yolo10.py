"""Decoding of end-to-end detector output given as corner boxes."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass

import numpy as np

CONFIDENCE_THRESHOLD = 0.3
"""Detections below this confidence are dropped."""

Size = tuple[int, int]


@dataclass(frozen=True)
class CornerDetection:
    """A detection as two corners, a class index and a confidence."""

    x1: int
    y1: int
    x2: int
    y2: int
    class_id: int
    confidence: float


def scale_corners_to_original(
    image_shape: Size, detection: CornerDetection, original_shape: Size
) -> CornerDetection:
    """Map corner coordinates from the network input back to the original image.

    Shapes are ``(width, height)``; coordinates are truncated toward zero.
    """
    width, height = image_shape
    orig_width, orig_height = original_shape
    if orig_width <= 0 or orig_height <= 0:
        raise ValueError(f"original shape must be positive, got {original_shape!r}")

    gain = min(
        np.float32(width) / np.float32(orig_width),
        np.float32(height) / np.float32(orig_height),
    )
    half = np.float32(2.0)
    pad_x = int((np.float32(width) - np.float32(orig_width) * gain) / half)
    pad_y = int((np.float32(height) - np.float32(orig_height) * gain) / half)

    def unscale(value: int, pad: int) -> int:
        return int(np.float32(value - pad) / gain)

    return dataclasses.replace(
        detection,
        x1=unscale(detection.x1, pad_x),
        y1=unscale(detection.y1, pad_y),
        x2=unscale(detection.x2, pad_x),
        y2=unscale(detection.y2, pad_y),
    )


def decode(
    output,
    resized_shape: Size,
    original_shape: Size,
    conf_threshold: float = CONFIDENCE_THRESHOLD,
) -> list[CornerDetection]:
    """Turn rows of ``x1, y1, x2, y2, confidence, class`` into detections.

    ``output`` is the raw tensor, for example of shape ``(1, N, 6)``.
    """
    values = np.asarray(output, dtype=np.float32)
    if values.size % 6 != 0:
        raise ValueError(f"output size {values.size} is not a multiple of 6")
    threshold = np.float32(conf_threshold)

    detections = []
    for x1, y1, x2, y2, confidence, class_value in values.reshape(-1, 6):
        if confidence < threshold:
            continue
        raw = CornerDetection(
            x1=int(x1),
            y1=int(y1),
            x2=int(x2),
            y2=int(y2),
            class_id=int(class_value),
            confidence=float(confidence),
        )
        detections.append(scale_corners_to_original(resized_shape, raw, original_shape))
    return detections