"""Fusion of lidar points with camera regions of interest."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Mapping

import numpy as np

from roifusion.pointcloud import PointCloud
from roifusion.projection import CameraCalibration

IMAGE_WIDTH = 1440.0
"""Default camera image width in pixels."""

IMAGE_HEIGHT = 1080.0
"""Default camera image height in pixels."""


def _f32(value) -> float:
    return float(np.float32(value))


@dataclass(frozen=True)
class RegionOfInterest:
    """A rectangular image region in pixels."""

    x_offset: int = 0
    y_offset: int = 0
    width: int = 0
    height: int = 0

    def contains(self, x: float, y: float) -> bool:
        """Tell whether a pixel position lies in the region, right and bottom edges excluded."""
        return (
            self.x_offset <= x < self.x_offset + self.width
            and self.y_offset <= y < self.y_offset + self.height
        )


@dataclass
class FeatureObject:
    """A detected object with its image region and the lidar points inside it."""

    roi: RegionOfInterest
    cluster: PointCloud = field(default_factory=PointCloud.xyz)
    detected_object: Any = None


@dataclass
class DetectedObjectsWithFeature:
    """A set of detected objects sharing one header."""

    header: Any = None
    feature_objects: list[FeatureObject] = field(default_factory=list)


@dataclass(frozen=True)
class LidarBounds:
    """Limits on lidar points taken into the fusion; ``x`` must also be non-negative."""

    min_y: float = -200.0
    max_y: float = 200.0
    min_z: float = -10.0
    max_z: float = 10.0

    def contains(self, x: float, y: float, z: float) -> bool:
        """Tell whether a point lies ahead of the sensor and within the limits."""
        return (
            x >= 0
            and self.min_y <= y <= self.max_y
            and self.min_z <= z <= self.max_z
        )


def select_points(
    cloud: PointCloud, bounds: LidarBounds | None = None
) -> tuple[np.ndarray, np.ndarray]:
    """Return the ``N x 3`` points of ``cloud`` within ``bounds`` and their intensities.

    The cloud must have ``x``, ``y``, ``z`` and ``intensity`` fields.
    """
    bounds = bounds if bounds is not None else LidarBounds()
    points = []
    intensities = []
    for x, y, z, intensity in cloud.iter_points("x", "y", "z", "intensity"):
        if bounds.contains(x, y, z):
            points.append((x, y, z))
            intensities.append(intensity)
    return (
        np.asarray(points, dtype=np.float32).reshape(-1, 3),
        np.asarray(intensities, dtype=np.float32),
    )


class RoiPointsFusion:
    """Assigns lidar points to the image regions they project into."""

    def __init__(
        self,
        calibration: CameraCalibration,
        image_width: float = IMAGE_WIDTH,
        image_height: float = IMAGE_HEIGHT,
        bounds: LidarBounds | None = None,
    ) -> None:
        self.calibration = calibration
        self.image_width = _f32(image_width)
        self.image_height = _f32(image_height)
        self.bounds = bounds if bounds is not None else LidarBounds()

    @classmethod
    def from_parameters(cls, params: Mapping[str, Any]) -> RoiPointsFusion:
        """Build from a flat parameter mapping.

        ``lidar.min_y``, ``lidar.max_y``, ``lidar.min_z``, ``lidar.max_z`` and
        ``calibration.R``, ``calibration.tvec``, ``calibration.camera_matrix``,
        ``calibration.dist_coeffs`` are required; ``camera.width`` and
        ``camera.height`` are optional.
        """

        def required(name: str):
            try:
                return params[name]
            except KeyError:
                raise KeyError(f"parameter {name!r} is required") from None

        bounds = LidarBounds(
            min_y=_f32(required("lidar.min_y")),
            max_y=_f32(required("lidar.max_y")),
            min_z=_f32(required("lidar.min_z")),
            max_z=_f32(required("lidar.max_z")),
        )
        calibration = CameraCalibration.from_flat(
            required("calibration.R"),
            required("calibration.tvec"),
            required("calibration.camera_matrix"),
            required("calibration.dist_coeffs"),
        )
        return cls(
            calibration,
            params.get("camera.width", IMAGE_WIDTH),
            params.get("camera.height", IMAGE_HEIGHT),
            bounds,
        )

    def fuse(self, rois: DetectedObjectsWithFeature, points) -> DetectedObjectsWithFeature:
        """Return a copy of ``rois`` whose clusters hold the points inside each region.

        Points projecting outside the image are ignored; a point inside several
        regions is added to each of them.
        """
        pts = np.asarray(points, dtype=np.float32).reshape(-1, 3)
        clouds = [PointCloud.xyz(rois.header) for _ in rois.feature_objects]
        regions = [obj.roi for obj in rois.feature_objects]

        for point, (u, v) in zip(pts, self.calibration.project(pts)):
            if u < 0 or v < 0 or u > self.image_width or v > self.image_height:
                continue
            for roi, cloud in zip(regions, clouds):
                if roi.contains(float(u), float(v)):
                    cloud.append_xyz(point)

        return DetectedObjectsWithFeature(
            header=rois.header,
            feature_objects=[
                dataclasses.replace(obj, cluster=cloud)
                for obj, cloud in zip(rois.feature_objects, clouds)
            ],
        )

    def process(self, cloud: PointCloud, rois: DetectedObjectsWithFeature) -> DetectedObjectsWithFeature:
        """Select the points of ``cloud`` within bounds and fuse them with ``rois``."""
        points, _ = select_points(cloud, self.bounds)
        return self.fuse(rois, points)