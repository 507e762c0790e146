"""Rendering of regions of interest and their fused lidar points onto camera images."""

from __future__ import annotations

import io
import random
from typing import Any, Iterable

import numpy as np
from PIL import Image, UnidentifiedImageError

from roifusion.projection import CameraCalibration

BOX_THICKNESS = 2
POINT_RADIUS = 1


def _roi_and_cluster(item: Any):
    """Accept a feature object, a feature, or an ``(roi, cluster)`` pair."""
    feature = getattr(item, "feature", item)
    if hasattr(feature, "roi") and hasattr(feature, "cluster"):
        return feature.roi, feature.cluster
    roi, cluster = item
    return roi, cluster


def _fill(image: np.ndarray, top: int, bottom: int, left: int, right: int, color) -> None:
    rows, cols = image.shape[:2]
    top, left = max(top, 0), max(left, 0)
    bottom, right = min(bottom, rows - 1), min(right, cols - 1)
    if top <= bottom and left <= right:
        image[top:bottom + 1, left:right + 1] = color


def _draw_rectangle(image, corner1, corner2, color, thickness: int) -> None:
    left, right = sorted((corner1[0], corner2[0]))
    top, bottom = sorted((corner1[1], corner2[1]))
    half = thickness // 2
    _fill(image, top - half, top + half, left - half, right + half, color)
    _fill(image, bottom - half, bottom + half, left - half, right + half, color)
    _fill(image, top - half, bottom + half, left - half, left + half, color)
    _fill(image, top - half, bottom + half, right - half, right + half, color)


def _draw_disc(image, center, radius: int, color) -> None:
    cx, cy = center
    for dy in range(-radius, radius + 1):
        reach = int(np.floor(np.sqrt(radius * radius - dy * dy)))
        _fill(image, cy + dy, cy + dy, cx - reach, cx + reach, color)


def render_fusion(
    image,
    rois: Iterable[Any],
    calibration: CameraCalibration,
    rng: random.Random | None = None,
) -> np.ndarray:
    """Draw each region and its projected cluster points on a copy of ``image``.

    ``image`` is an ``H x W x 3`` uint8 array. Every item of ``rois`` gives a
    region (with ``x_offset``, ``y_offset``, ``width`` and ``height``) and a
    point cloud of its points; both are drawn in a random colour taken from
    ``rng``. Points that fall outside the image are skipped.
    """
    canvas = np.array(image, dtype=np.uint8, copy=True)
    if canvas.ndim != 3 or canvas.shape[2] != 3:
        raise ValueError(f"expected an H x W x 3 image, got shape {canvas.shape}")
    rng = rng if rng is not None else random.Random()
    rows, cols = canvas.shape[:2]

    for item in rois:
        roi, cluster = _roi_and_cluster(item)
        color = tuple(rng.randrange(256) for _ in range(3))

        x, y = int(roi.x_offset), int(roi.y_offset)
        _draw_rectangle(
            canvas, (x, y), (x + int(roi.width), y + int(roi.height)), color, BOX_THICKNESS
        )

        points = list(cluster.iter_points("x", "y", "z"))
        if not points:
            continue
        for u, v in calibration.project(np.asarray(points, dtype=np.float32)):
            if u >= 0 and v >= 0 and u < cols and v < rows:
                center = (int(np.floor(u + 0.5)), int(np.floor(v + 0.5)))
                _draw_disc(canvas, center, POINT_RADIUS, color)
    return canvas


def render_compressed(
    data: bytes,
    rois: Iterable[Any],
    calibration: CameraCalibration,
    rng: random.Random | None = None,
) -> np.ndarray:
    """Decode a compressed image to BGR and render the regions on it."""
    try:
        with Image.open(io.BytesIO(data)) as decoded:
            rgb = np.asarray(decoded.convert("RGB"), dtype=np.uint8)
    except (UnidentifiedImageError, OSError) as exc:
        raise ValueError("cannot decode image data") from exc
    bgr = np.ascontiguousarray(rgb[:, :, ::-1])
    return render_fusion(bgr, rois, calibration, rng)