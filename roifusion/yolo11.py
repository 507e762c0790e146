"""Decoding of anchor-free detector output with per-class scores and NMS."""

from __future__ import annotations

import numpy as np

from roifusion.geometry import BoundingBox, Detection, nms_boxes, scale_coords

CONFIDENCE_THRESHOLD = 0.4
"""Default minimum class score for a detection to be kept."""

IOU_THRESHOLD = 0.45
"""Default intersection over union above which overlapping boxes are suppressed."""

CLASS_OFFSET = 7680
"""Shift applied per class to boxes before suppression so classes never overlap."""

Size = tuple[int, int]


def decode(
    output,
    resized_shape: Size,
    original_shape: Size,
    conf_threshold: float = CONFIDENCE_THRESHOLD,
    iou_threshold: float = IOU_THRESHOLD,
) -> list[Detection]:
    """Turn a raw ``(1, 4 + classes, N)`` tensor into detections on the original image.

    Each column holds ``cx, cy, w, h`` followed by one score per class. The best
    class of a column is kept if its score exceeds ``conf_threshold``; boxes are
    then mapped back from ``resized_shape`` to ``original_shape`` (both
    ``(width, height)``) and thinned by class-aware non-maximum suppression.
    """
    values = np.asarray(output, dtype=np.float32)
    if values.ndim == 2:
        values = values[np.newaxis]
    if values.ndim != 3:
        raise ValueError(f"expected a 3-D output tensor, got shape {values.shape}")
    if values.shape[0] == 0:
        return []

    table = values[0]
    num_features, num_detections = table.shape
    if num_detections == 0:
        return []
    num_classes = num_features - 4
    if num_classes <= 0:
        return []

    threshold = np.float32(conf_threshold)
    half = np.float32(2.0)
    boxes: list[BoundingBox] = []
    nms_candidates: list[BoundingBox] = []
    confs: list[float] = []
    class_ids: list[int] = []

    for column in table.T:
        center_x, center_y, width, height = column[:4]
        scores = column[4:]
        class_id = int(np.argmax(scores))
        max_score = scores[class_id]
        if not max_score > threshold:
            continue

        left = center_x - width / half
        top = center_y - height / half
        raw = BoundingBox(int(left), int(top), int(width), int(height))
        scaled = scale_coords(resized_shape, raw, original_shape, True)

        shift = class_id * CLASS_OFFSET
        nms_candidates.append(
            BoundingBox(scaled.x + shift, scaled.y + shift, scaled.width, scaled.height)
        )
        boxes.append(scaled)
        confs.append(float(max_score))
        class_ids.append(class_id)

    kept = nms_boxes(nms_candidates, confs, float(threshold), iou_threshold)
    return [Detection(boxes[i], confs[i], class_ids[i]) for i in kept]