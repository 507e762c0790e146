import pytest

from roifusion.geometry import (
    BoundingBox,
    Detection,
    clamp,
    nms_boxes,
    scale_coords,
)


def test_area_is_width_times_height():
    box = BoundingBox(3, 4, 10, 20)
    assert box.area() == 10.0 * 20.0


def test_intersect_of_overlapping_boxes():
    a = BoundingBox(0, 0, 10, 10)
    b = BoundingBox(5, 5, 10, 10)
    assert a.intersect(b) == BoundingBox(5, 5, 5, 5)
    assert a.intersect(b) == b.intersect(a)


def test_intersect_of_disjoint_boxes_is_empty():
    a = BoundingBox(0, 0, 4, 4)
    b = BoundingBox(10, 10, 4, 4)
    assert a.intersect(b).area() == 0.0


def test_intersect_with_itself_is_identity():
    box = BoundingBox(7, 2, 9, 13)
    assert box.intersect(box) == box


def test_detection_holds_values():
    det = Detection(BoundingBox(1, 2, 3, 4), 0.5, 2)
    assert det.box.width == 3
    assert det.class_id == 2
    assert det.conf == 0.5


@pytest.mark.parametrize(
    "value, low, high, expected",
    [(5, 0, 10, 5), (-3, 0, 10, 0), (15, 0, 10, 10), (15, 10, 0, 10), (-1, 10, 0, 0)],
)
def test_clamp(value, low, high, expected):
    assert clamp(value, low, high) == expected


def test_clamp_floats():
    assert clamp(0.75, 0.0, 0.5) == 0.5


def test_scale_coords_identity_when_shapes_match():
    box = BoundingBox(10, 20, 30, 40)
    assert scale_coords((640, 640), box, (640, 640), True) == box


def test_scale_coords_removes_letterbox_padding():
    # 1280x720 letterboxed into 640x640: gain 0.5, vertical padding 140.
    box = BoundingBox(100, 240, 50, 50)
    result = scale_coords((640, 640), box, (1280, 720), True)
    assert result == BoundingBox(200, 200, 100, 100)


def test_scale_coords_clip_keeps_box_inside_image():
    box = BoundingBox(-50, -50, 2000, 2000)
    result = scale_coords((640, 640), box, (640, 640), True)
    assert result.x >= 0 and result.y >= 0
    assert result.x + result.width <= 640
    assert result.y + result.height <= 640


def test_scale_coords_without_clip_keeps_negative_offsets():
    box = BoundingBox(-50, -40, 10, 10)
    result = scale_coords((640, 640), box, (640, 640), False)
    assert (result.x, result.y) == (-50, -40)


def test_scale_coords_rejects_empty_original():
    with pytest.raises(ValueError):
        scale_coords((640, 640), BoundingBox(), (0, 480), True)


def test_nms_empty():
    assert nms_boxes([], [], 0.4, 0.45) == []


def test_nms_suppresses_overlapping_lower_score():
    boxes = [BoundingBox(0, 0, 100, 100), BoundingBox(5, 5, 100, 100)]
    assert nms_boxes(boxes, [0.6, 0.9], 0.4, 0.45) == [1]


def test_nms_keeps_disjoint_boxes_in_score_order():
    boxes = [
        BoundingBox(0, 0, 10, 10),
        BoundingBox(100, 100, 10, 10),
        BoundingBox(200, 200, 10, 10),
    ]
    assert nms_boxes(boxes, [0.5, 0.9, 0.7], 0.4, 0.45) == [1, 2, 0]


def test_nms_drops_boxes_below_score_threshold():
    boxes = [BoundingBox(0, 0, 10, 10), BoundingBox(50, 50, 10, 10)]
    assert nms_boxes(boxes, [0.3, 0.8], 0.4, 0.45) == [1]


def test_nms_touching_boxes_are_not_suppressed():
    boxes = [BoundingBox(0, 0, 10, 10), BoundingBox(10, 0, 10, 10)]
    assert sorted(nms_boxes(boxes, [0.9, 0.8], 0.4, 0.0)) == [0, 1]


def test_nms_low_overlap_survives():
    boxes = [BoundingBox(0, 0, 100, 100), BoundingBox(90, 0, 100, 100)]
    kept = nms_boxes(boxes, [0.9, 0.8], 0.4, 0.45)
    assert kept == [0, 1]


def test_nms_length_mismatch_raises():
    with pytest.raises(ValueError):
        nms_boxes([BoundingBox()], [0.5, 0.6], 0.4, 0.45)