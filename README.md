# roifusion

Camera and lidar perception helpers in plain Python, built on NumPy and
Pillow.

The package does two jobs.

**Region-of-interest point fusion.** Given a lidar point cloud, a set of
2D regions of interest found in a camera image, and the camera's
calibration, it works out which lidar points fall inside each region and
attaches them to that region as its own point cloud.

**YOLO output decoding.** Given the raw output tensor of a YOLOv5, YOLOv10
or YOLOv11 style model, it turns it into scaled, filtered and, where the
layout needs it, non-maximum-suppressed detections, and it can draw them.

## Modules

| Module | What it holds |
| --- | --- |
| `roifusion.geometry` | `BoundingBox`, `Detection`, `clamp`, `scale_coords`, `nms_boxes` |
| `roifusion.labels` | `load_class_names`, `generate_colors`, and the `MersenneTwister` that makes the colours reproducible |
| `roifusion.imaging` | `resize_bilinear`, `letterbox`, `to_chw_blob` |
| `roifusion.pointcloud` | `DataType`, `PointField`, `PointCloud`: a packed, field-described point buffer |
| `roifusion.projection` | `CameraCalibration`, `project_points`: pinhole projection with lens distortion |
| `roifusion.fusion` | `RegionOfInterest`, `FeatureObject`, `DetectedObjectsWithFeature`, `LidarBounds`, `select_points`, `RoiPointsFusion` |
| `roifusion.visualizer` | `render_fusion`, `render_compressed`: draw regions and their projected points on an image |
| `roifusion.yolo5`, `roifusion.yolo10`, `roifusion.yolo11` | `decode` for each model family's output layout |
| `roifusion.drawing` | `draw_bounding_boxes`, `draw_bounding_box_masks`, `draw_corner_boxes` |

## Fusing lidar points with regions of interest

```python
from roifusion.fusion import LidarBounds, RoiPointsFusion
from roifusion.projection import CameraCalibration

calibration = CameraCalibration.from_flat(
    rotation,        # 9 values, row-major 3x3 rotation
    tvec,            # 3 values
    camera_matrix,   # 9 values, row-major intrinsic matrix
    dist_coeffs,     # 5 values: k1, k2, p1, p2, k3
)

fusion = RoiPointsFusion(calibration, 1440, 1080, LidarBounds(-20, 20, -2, 5))
fused = fusion.process(cloud, rois)
```

`cloud` is a `PointCloud` with `x`, `y`, `z` and `intensity` fields;
`rois` is a `DetectedObjectsWithFeature` whose `feature_objects` each carry
a `RegionOfInterest`.

`process` first calls `select_points`, which keeps the points with
`x >= 0` whose `y` and `z` lie within the `LidarBounds` (by default
`-200..200` and `-10..10`). The kept points are projected into the image;
those landing left of or above the image, or beyond its width or height,
are dropped. Every region then gets a fresh float32 `x, y, z` `PointCloud`
of the points whose projection falls inside it, the right and bottom edges
excluded. A point inside several regions is added to each. The result is a
new `DetectedObjectsWithFeature`; the input is not changed. If you already
have an `N x 3` array of points, call `fuse(rois, points)` directly.

`RoiPointsFusion.from_parameters` builds the same object from a flat
mapping. The keys `lidar.min_y`, `lidar.max_y`, `lidar.min_z`,
`lidar.max_z`, `calibration.R`, `calibration.tvec`,
`calibration.camera_matrix` and `calibration.dist_coeffs` are required and
a missing one raises `KeyError`; `camera.width` and `camera.height` default
to 1440 and 1080.

### Point clouds

`PointCloud.from_points(points, fields, header)` packs a sequence of
points, one value per field, into a little-endian buffer (float32 `x, y, z`
when `fields` is omitted). `PointCloud.xyz(header)` makes an empty
`x, y, z` cloud that `append_xyz` grows one point at a time, and
`iter_points("x", "y")` yields tuples of the named fields (all fields when
no names are given).

## Visualising the fusion

`render_fusion(image, rois, calibration, rng)` returns a copy of an
`H x W x 3` uint8 BGR image with each region's rectangle and its cluster's
projected points drawn in one random colour per region; points outside the
image are skipped. `rois` may hold feature objects, features, or
`(roi, cluster)` pairs. `render_compressed(data, ...)` does the same after
decoding encoded image bytes (any format Pillow reads) to BGR; undecodable
data raises `ValueError`. Pass a `random.Random` as `rng` to get the same
colours every time.

## Decoding detector output

All shapes are `(width, height)`. Prepare the network input with the
imaging helpers:

```python
from roifusion.imaging import letterbox, to_chw_blob

padded = letterbox(image, (640, 640), auto=False)
blob = to_chw_blob(padded)[None]      # 1 x C x H x W float32 in [0, 1]
```

`letterbox` resizes keeping the aspect ratio and pads with grey
`(114, 114, 114)`; with `auto=True` (the default) the padding shrinks to
the remainder modulo `stride`, and with `scale_fill=True` the image is
stretched instead. Run the blob through your model, then decode its first
output:

```python
from roifusion import yolo11

detections = yolo11.decode(output, (padded.shape[1], padded.shape[0]),
                           (image.shape[1], image.shape[0]))
```

- `roifusion.yolo5.decode(output, resized_shape, original_shape, conf_threshold=0.4, iou_threshold=0.45)`
  reads `(1, N, 5 + classes)` rows of `cx, cy, w, h, objectness, class scores...`.
  Rows whose objectness exceeds the threshold are scored as objectness
  times the best class score and thinned with greedy suppression.
- `roifusion.yolo10.decode(output, resized_shape, original_shape, conf_threshold=0.3)`
  reads end-to-end `x1, y1, x2, y2, score, class` rows into `CornerDetection`s,
  dropping scores below the threshold; no suppression is applied.
- `roifusion.yolo11.decode(output, resized_shape, original_shape, conf_threshold=0.4, iou_threshold=0.45)`
  reads the `(1, 4 + classes, N)` layout, keeps each column's best class when
  it exceeds the threshold, and suppresses overlaps within each class.

YOLOv5 and YOLOv11 results are `Detection`s whose `BoundingBox` has been
mapped back to the original image with `scale_coords` and clipped to it.

## Drawing detections

`roifusion.drawing` returns copies of a BGR image with detections drawn:

- `draw_bounding_boxes` draws each box and a white `name: NN%` label on the
  class colour, skipping detections at or below the threshold (0.4) or with
  an unknown class; colours wrap around by class index.
- `draw_bounding_box_masks` also adds a filled box of the class colour,
  weighted by `mask_alpha` (0.4), under each outline. Passing
  `confidence_threshold=None` draws every detection with a known class.
- `draw_corner_boxes` draws `CornerDetection`s with the class name above the
  box and the percentage below it, in black on the class colour.

Labels use Pillow's default font. Colours come from
`generate_colors(class_names, seed=42)`, which gives the same BGR colour
list for the same class names and seed on every run. `load_class_names`
reads one name per line from a text file.

## What this package does not do

It does not load or run models: there is no inference runtime and no
wrapper that ties preprocessing, inference and decoding together, so you
supply the output tensor yourself. It does not subscribe to or publish
sensor messages either; the fusion and rendering functions work on the
data you pass in. There are no command-line programs.