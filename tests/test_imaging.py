import numpy as np
import pytest

from roifusion.imaging import letterbox, resize_bilinear, to_chw_blob


def _gradient(height, width):
    ys, xs = np.mgrid[0:height, 0:width]
    return np.stack([xs * 3, ys * 5, xs + ys], axis=-1).astype(np.uint8)


def test_resize_same_size_is_identity():
    image = _gradient(7, 9)
    out = resize_bilinear(image, 9, 7)
    assert np.array_equal(out, image)


def test_resize_constant_image_stays_constant():
    image = np.full((10, 20, 3), 77, dtype=np.uint8)
    out = resize_bilinear(image, 7, 13)
    assert out.shape == (13, 7, 3)
    assert np.all(out == 77)


def test_resize_keeps_dtype_and_range():
    image = _gradient(8, 8)
    out = resize_bilinear(image, 16, 4)
    assert out.dtype == np.uint8
    assert out.min() >= image.min()
    assert out.max() <= image.max()


def test_resize_grayscale_float():
    image = np.arange(16, dtype=np.float32).reshape(4, 4)
    out = resize_bilinear(image, 2, 2)
    assert out.shape == (2, 2)
    assert out.dtype == np.float32
    assert out[0, 0] < out[1, 1]


def test_resize_rejects_bad_size():
    with pytest.raises(ValueError):
        resize_bilinear(np.zeros((4, 4), dtype=np.uint8), 0, 4)
    with pytest.raises(ValueError):
        resize_bilinear(np.zeros((0, 4), dtype=np.uint8), 2, 2)


def test_letterbox_full_padding_reaches_shape():
    image = np.full((32, 64, 3), 10, dtype=np.uint8)
    out = letterbox(image, (32, 32), auto=False)
    assert out.shape == (32, 32, 3)
    assert np.all(out[0] == 114)
    assert np.all(out[-1] == 114)
    assert np.all(out[16] == 10)


def test_letterbox_auto_pads_stride_remainder():
    image = np.full((32, 64, 3), 10, dtype=np.uint8)
    out = letterbox(image, (32, 32), auto=True, stride=32)
    assert out.shape == (24, 32, 3)
    assert np.all(out[0] == 114)
    assert np.all(out[12] == 10)


def test_letterbox_scale_fill_stretches():
    image = np.full((32, 64, 3), 10, dtype=np.uint8)
    out = letterbox(image, (40, 30), auto=False, scale_fill=True)
    assert out.shape == (30, 40, 3)
    assert np.all(out == 10)


def test_letterbox_no_scale_up_keeps_small_image():
    image = _gradient(8, 8)
    out = letterbox(image, (16, 16), auto=False, scale_up=False)
    assert out.shape == (16, 16, 3)
    assert np.array_equal(out[4:12, 4:12], image)


def test_letterbox_custom_color():
    image = np.zeros((10, 20, 3), dtype=np.uint8)
    out = letterbox(image, (20, 20), color=(1, 2, 3), auto=False)
    assert tuple(out[0, 0]) == (1, 2, 3)


def test_letterbox_rejects_empty():
    with pytest.raises(ValueError):
        letterbox(np.zeros((0, 0, 3), dtype=np.uint8), (32, 32))


def test_chw_blob_layout_and_scale():
    image = _gradient(5, 6)
    blob = to_chw_blob(image)
    assert blob.shape == (3, 5, 6)
    assert blob.dtype == np.float32
    assert blob[1, 4, 2] == pytest.approx(image[4, 2, 1] / 255.0)
    assert blob.max() <= 1.0


def test_chw_blob_grayscale():
    image = np.full((3, 4), 255, dtype=np.uint8)
    blob = to_chw_blob(image)
    assert blob.shape == (1, 3, 4)
    assert np.allclose(blob, 1.0)