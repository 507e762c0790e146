import numpy as np
import pytest

from roifusion.yolo10 import CornerDetection, decode, scale_corners_to_original


def test_scaling_with_equal_shapes_is_identity():
    det = CornerDetection(3, 4, 50, 60, class_id=2, confidence=0.9)
    out = scale_corners_to_original((640, 480), det, (640, 480))
    assert out == det


def test_scaling_doubles_when_input_is_half_size():
    det = CornerDetection(10, 20, 30, 40, class_id=1, confidence=0.5)
    out = scale_corners_to_original((320, 160), det, (640, 320))
    assert (out.x1, out.y1, out.x2, out.y2) == (2 * det.x1, 2 * det.y1, 2 * det.x2, 2 * det.y2)
    assert out.class_id == det.class_id
    assert out.confidence == det.confidence


def test_scaling_removes_padding():
    det = CornerDetection(10, 170, 110, 270, class_id=0, confidence=0.8)
    out = scale_corners_to_original((640, 640), det, (1280, 640))
    assert (out.x1, out.y1, out.x2, out.y2) == (20, 20, 220, 220)


def test_scaling_rejects_empty_original():
    det = CornerDetection(0, 0, 1, 1, class_id=0, confidence=1.0)
    with pytest.raises(ValueError):
        scale_corners_to_original((640, 640), det, (0, 640))


def test_decode_filters_by_confidence():
    output = np.array(
        [[[1, 2, 3, 4, 0.9, 5], [1, 2, 3, 4, 0.1, 6], [7, 8, 9, 10, 0.3, 1]]],
        dtype=np.float32,
    )
    dets = decode(output, (100, 100), (100, 100))
    assert [d.class_id for d in dets] == [5, 1]
    assert dets[0].confidence == pytest.approx(0.9)
    assert (dets[1].x1, dets[1].y1, dets[1].x2, dets[1].y2) == (7, 8, 9, 10)


def test_decode_truncates_coordinates():
    output = np.array([[10.9, 20.2, 30.7, 40.5, 0.95, 3.0]], dtype=np.float32)
    (det,) = decode(output, (64, 64), (64, 64))
    assert (det.x1, det.y1, det.x2, det.y2) == (10, 20, 30, 40)
    assert det.class_id == 3


def test_decode_custom_threshold():
    output = np.array([[0, 0, 5, 5, 0.5, 0]], dtype=np.float32)
    assert decode(output, (64, 64), (64, 64), conf_threshold=0.6) == []
    assert len(decode(output, (64, 64), (64, 64), conf_threshold=0.5)) == 1


def test_decode_rejects_malformed_output():
    with pytest.raises(ValueError):
        decode(np.zeros((1, 7), dtype=np.float32), (64, 64), (64, 64))