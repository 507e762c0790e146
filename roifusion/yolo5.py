"""Decoding of anchor-based detector output with objectness and per-class scores."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from roifusion.geometry import BoundingBox, Detection, scale_coords

CONFIDENCE_THRESHOLD = 0.4
"""Default minimum score for a detection to be kept."""

IOU_THRESHOLD = 0.45
"""Default intersection over union above which overlapping boxes are suppressed."""

Size = tuple[int, int]


def _trunc_div(a: int, b: int) -> int:
    """Integer division that truncates toward zero."""
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b > 0) else -quotient


def _iou(first: BoundingBox, second: BoundingBox) -> float:
    overlap = first.intersect(second).area()
    union = first.area() + second.area() - overlap
    return 0.0 if union <= 0.0 else overlap / union


def nms_boxes(
    boxes: Sequence[BoundingBox],
    scores: Sequence[float],
    score_threshold: float,
    nms_threshold: float,
) -> list[int]:
    """Return the indices of boxes kept by greedy non-maximum suppression.

    Boxes are visited in order of falling score. A box scoring below
    ``score_threshold`` is skipped; every other box is kept and removes all
    remaining boxes whose intersection over union with it exceeds
    ``nms_threshold``.
    """
    if len(boxes) != len(scores):
        raise ValueError("boxes and scores must have the same length")

    order = sorted(range(len(boxes)), key=lambda i: scores[i], reverse=True)
    kept: list[int] = []
    while order:
        best = order.pop(0)
        if scores[best] < score_threshold:
            continue
        kept.append(best)
        box = boxes[best]
        order = [i for i in order if not _iou(box, boxes[i]) > nms_threshold]
    return kept


def best_class_info(row: Sequence[float], num_classes: int) -> tuple[float, int]:
    """Return ``(score, class_id)`` of the best class score in a detection row.

    Class scores start at index 5 of the row. Only scores above zero count;
    if none is, the score is 0.0 and the class id is 5.
    """
    best_conf = 0.0
    best_class = 5
    for class_id, score in enumerate(row[5:5 + num_classes]):
        if score > best_conf:
            best_conf = float(score)
            best_class = class_id
    return best_conf, best_class


def decode(
    output,
    resized_shape: Size,
    original_shape: Size,
    conf_threshold: float = CONFIDENCE_THRESHOLD,
    iou_threshold: float = IOU_THRESHOLD,
) -> list[Detection]:
    """Turn a raw ``(1, N, 5 + classes)`` tensor into detections on the original image.

    Each row holds ``cx, cy, w, h, objectness`` and one score per class. Rows
    whose objectness exceeds ``conf_threshold`` are scored as objectness times
    the best class score, mapped from ``resized_shape`` back to
    ``original_shape`` (both ``(width, height)``) and thinned by suppression.
    """
    values = np.asarray(output, dtype=np.float32)
    if values.ndim == 2:
        values = values[np.newaxis]
    if values.ndim != 3:
        raise ValueError(f"expected a 3-D output tensor, got shape {values.shape}")
    if values.shape[0] == 0:
        return []

    rows = values[0]
    num_classes = rows.shape[1] - 5
    if num_classes < 0:
        raise ValueError(f"rows need at least 5 values, got {rows.shape[1]}")

    threshold = np.float32(conf_threshold)
    candidates: list[Detection] = []
    for row in rows:
        cls_conf = row[4]
        if not cls_conf > threshold:
            continue
        center_x, center_y = int(row[0]), int(row[1])
        width, height = int(row[2]), int(row[3])
        left = center_x - _trunc_div(width, 2)
        top = center_y - _trunc_div(height, 2)

        obj_conf, class_id = best_class_info(row, num_classes)
        confidence = float(cls_conf * np.float32(obj_conf))
        box = scale_coords(
            resized_shape, BoundingBox(left, top, width, height), original_shape, True
        )
        candidates.append(Detection(box, confidence, class_id))

    kept = nms_boxes(
        [d.box for d in candidates],
        [d.conf for d in candidates],
        float(threshold),
        iou_threshold,
    )
    return [candidates[i] for i in kept]