"""Image resizing, letterboxing and conversion to network input blobs."""

from __future__ import annotations

import math

import numpy as np

Size = tuple[int, int]
"""An image size as ``(width, height)``."""


def _round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(float(value)) + 0.5), value))


def _trunc_div(a: int, b: int) -> int:
    """Integer division that truncates toward zero."""
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b > 0) else -quotient


def _trunc_mod(a: int, b: int) -> int:
    """Remainder whose sign follows the dividend."""
    return a - b * _trunc_div(a, b)


def _axis_weights(in_size: int, out_size: int):
    scale = in_size / out_size
    pos = (np.arange(out_size, dtype=np.float64) + 0.5) * scale - 0.5
    pos = np.clip(pos, 0.0, in_size - 1)
    low = np.floor(pos).astype(np.intp)
    high = np.minimum(low + 1, in_size - 1)
    return low, high, pos - low


def resize_bilinear(image, width: int, height: int) -> np.ndarray:
    """Resize an ``H x W`` or ``H x W x C`` image with bilinear interpolation.

    Pixel centres are aligned as in the usual half-pixel convention; integer
    images are rounded back to their own type.
    """
    src = np.asarray(image)
    if src.ndim not in (2, 3):
        raise ValueError(f"expected a 2-D or 3-D image, got shape {src.shape}")
    if width <= 0 or height <= 0:
        raise ValueError(f"target size must be positive, got {width}x{height}")
    in_h, in_w = src.shape[:2]
    if in_h == 0 or in_w == 0:
        raise ValueError("cannot resize an empty image")

    y0, y1, fy = _axis_weights(in_h, height)
    x0, x1, fx = _axis_weights(in_w, width)
    pixels = src.astype(np.float64)
    extra = (1,) * (pixels.ndim - 1)
    fy = fy.reshape((-1,) + extra)
    rows = pixels[y0] * (1.0 - fy) + pixels[y1] * fy
    fx = fx.reshape((1, -1) + (1,) * (pixels.ndim - 2))
    out = rows[:, x0] * (1.0 - fx) + rows[:, x1] * fx

    if np.issubdtype(src.dtype, np.integer):
        info = np.iinfo(src.dtype)
        return np.clip(np.rint(out), info.min, info.max).astype(src.dtype)
    return out.astype(src.dtype)


def _pad(image: np.ndarray, dw: int, dh: int, color) -> np.ndarray:
    left = _trunc_div(dw, 2)
    right = dw - left
    top = _trunc_div(dh, 2)
    bottom = dh - top
    if min(left, right, top, bottom) < 0:
        raise ValueError("image is larger than the requested shape")
    rows, cols = image.shape[:2]
    shape = (rows + top + bottom, cols + left + right) + image.shape[2:]
    out = np.empty(shape, dtype=image.dtype)
    color = tuple(color)
    if image.ndim == 3:
        channels = image.shape[2]
        fill = (color + (0,) * channels)[:channels]
        out[...] = np.asarray(fill).astype(image.dtype)
    else:
        out[...] = color[0] if color else 0
    out[top:top + rows, left:left + cols] = image
    return out


def letterbox(
    image,
    new_shape: Size,
    color=(114, 114, 114),
    auto: bool = True,
    scale_fill: bool = False,
    scale_up: bool = True,
    stride: int = 32,
) -> np.ndarray:
    """Resize keeping the aspect ratio and pad with ``color`` towards ``new_shape``.

    ``new_shape`` is ``(width, height)``. With ``auto`` the padding is reduced
    to the remainder modulo ``stride``; with ``scale_fill`` the image is
    stretched to the full shape without padding.
    """
    src = np.asarray(image)
    if src.ndim not in (2, 3):
        raise ValueError(f"expected a 2-D or 3-D image, got shape {src.shape}")
    rows, cols = src.shape[:2]
    if rows == 0 or cols == 0:
        raise ValueError("cannot letterbox an empty image")
    new_w, new_h = new_shape

    ratio = min(
        np.float32(new_h) / np.float32(rows),
        np.float32(new_w) / np.float32(cols),
    )
    if not scale_up:
        ratio = min(ratio, np.float32(1.0))

    unpad_w = _round_half_away(np.float32(cols) * ratio)
    unpad_h = _round_half_away(np.float32(rows) * ratio)
    dw = new_w - unpad_w
    dh = new_h - unpad_h

    if auto:
        if stride <= 0:
            raise ValueError(f"stride must be positive, got {stride}")
        dw = _trunc_div(_trunc_mod(dw, stride), 2)
        dh = _trunc_div(_trunc_mod(dh, stride), 2)
    elif scale_fill:
        unpad_w, unpad_h = new_w, new_h
        dw = dh = 0

    if cols != unpad_w or rows != unpad_h:
        resized = resize_bilinear(src, unpad_w, unpad_h)
    else:
        resized = src
    return _pad(resized, dw, dh, color)


def to_chw_blob(image) -> np.ndarray:
    """Scale an image to ``[0, 1]`` as float32 and reorder it channel first."""
    src = np.asarray(image)
    if src.ndim == 2:
        src = src[:, :, np.newaxis]
    if src.ndim != 3:
        raise ValueError(f"expected a 2-D or 3-D image, got shape {src.shape}")
    scaled = src.astype(np.float32) * np.float32(1.0 / 255.0)
    return np.ascontiguousarray(scaled.transpose(2, 0, 1))