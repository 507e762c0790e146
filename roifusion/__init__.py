"""Lidar-to-camera region-of-interest fusion, YOLO output decoding and drawing."""

__version__ = "0.1.0"

__all__ = [
    "drawing",
    "fusion",
    "geometry",
    "imaging",
    "labels",
    "pointcloud",
    "projection",
    "visualizer",
    "yolo10",
    "yolo11",
    "yolo5",
]