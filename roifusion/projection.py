"""Projection of 3-D points into a camera image with lens distortion."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np


def _as_matrix(values, shape, name) -> np.ndarray:
    array = np.asarray(values, dtype=np.float64)
    if array.size != int(np.prod(shape)):
        raise ValueError(f"{name} needs {int(np.prod(shape))} values, got {array.size}")
    return array.reshape(shape)


def _distortion(dist_coeffs) -> np.ndarray:
    coeffs = np.asarray(dist_coeffs, dtype=np.float64).ravel()
    if coeffs.size not in (0, 4, 5):
        raise ValueError(f"distortion takes 0, 4 or 5 coefficients, got {coeffs.size}")
    return np.concatenate([coeffs, np.zeros(5 - coeffs.size)])


def project_points(points, rotation, tvec, camera_matrix, dist_coeffs) -> np.ndarray:
    """Project ``N x 3`` points to ``N x 2`` float32 pixel coordinates.

    ``rotation`` is a 3x3 rotation matrix and ``tvec`` a translation, both
    taking points into the camera frame. ``dist_coeffs`` are
    ``k1, k2, p1, p2[, k3]``. A point at zero depth is treated as at depth one.
    """
    pts = np.asarray(points, dtype=np.float64)
    if pts.size == 0:
        return np.zeros((0, 2), dtype=np.float32)
    pts = pts.reshape(-1, 3)
    rot = _as_matrix(rotation, (3, 3), "rotation")
    trans = _as_matrix(tvec, (3,), "tvec")
    k_matrix = _as_matrix(camera_matrix, (3, 3), "camera matrix")
    k1, k2, p1, p2, k3 = _distortion(dist_coeffs)

    cam = pts @ rot.T + trans
    depth = cam[:, 2]
    inv_z = np.ones_like(depth)
    nonzero = depth != 0
    inv_z[nonzero] = 1.0 / depth[nonzero]
    x = cam[:, 0] * inv_z
    y = cam[:, 1] * inv_z

    r2 = x * x + y * y
    radial = 1.0 + k1 * r2 + k2 * r2 * r2 + k3 * r2 * r2 * r2
    xy = x * y
    xd = x * radial + 2.0 * p1 * xy + p2 * (r2 + 2.0 * x * x)
    yd = y * radial + p1 * (r2 + 2.0 * y * y) + 2.0 * p2 * xy

    fx, fy = k_matrix[0, 0], k_matrix[1, 1]
    cx, cy = k_matrix[0, 2], k_matrix[1, 2]
    return np.stack([xd * fx + cx, yd * fy + cy], axis=1).astype(np.float32)


@dataclass(frozen=True, eq=False)
class CameraCalibration:
    """Extrinsic and intrinsic parameters that map lidar points into an image."""

    rotation: np.ndarray
    tvec: np.ndarray
    camera_matrix: np.ndarray
    dist_coeffs: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "rotation", _as_matrix(self.rotation, (3, 3), "rotation"))
        object.__setattr__(self, "tvec", _as_matrix(self.tvec, (3,), "tvec"))
        object.__setattr__(
            self, "camera_matrix", _as_matrix(self.camera_matrix, (3, 3), "camera matrix")
        )
        object.__setattr__(self, "dist_coeffs", _distortion(self.dist_coeffs))

    @classmethod
    def from_flat(
        cls,
        rotation: Sequence[float],
        tvec: Sequence[float],
        camera_matrix: Sequence[float],
        dist_coeffs: Sequence[float],
    ) -> CameraCalibration:
        """Build a calibration from row-major lists of 9, 3, 9 and 5 numbers.

        Values beyond those counts are ignored; fewer raise ``ValueError``.
        """
        parts = []
        for values, count, name in (
            (rotation, 9, "rotation"),
            (tvec, 3, "tvec"),
            (camera_matrix, 9, "camera matrix"),
            (dist_coeffs, 5, "distortion"),
        ):
            flat = list(values)
            if len(flat) < count:
                raise ValueError(f"{name} needs {count} values, got {len(flat)}")
            parts.append(flat[:count])
        return cls(*parts)

    def project(self, points) -> np.ndarray:
        """Project ``N x 3`` points to ``N x 2`` pixel coordinates."""
        return project_points(
            points, self.rotation, self.tvec, self.camera_matrix, self.dist_coeffs
        )