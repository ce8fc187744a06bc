"""
Alpha-border dilation for textures.

Color from opaque pixels is pushed outwards into transparent pixels so that
mip-mapping, bilinear filtering or lossy recompression does not pull black
fringes into visible edges. The alpha channel is never modified.

With bpp=3 there is no real alpha channel: the last color channel is read as
pseudo-alpha and handled exactly like alpha.
"""

from __future__ import annotations

import numpy as np

from .buffer import BufferLike, InvalidBufferShape, RectangleOutOfBounds, as_flat, check_shape, pixel_view
from .config import ALPHA_THRESHOLD, DILATE_ROUNDS
from .kernel import dilate_pass


def converge(
    w: int,
    h: int,
    bpp: int,
    original: BufferLike,
    threshold: int = ALPHA_THRESHOLD,
    rounds: int = DILATE_ROUNDS,
) -> np.ndarray:
    """
    Run 1 + 2 * rounds dilation passes, ping-ponging between two scratch buffers.

    Each pass moves the color front one pixel along each axis; diagonal
    neighbors are reached after two passes. Returns the last-written buffer (flat uint8).
    """
    if rounds < 0:
        raise ValueError(f"rounds must be >= 0, got {rounds}")
    check_shape(w, h, bpp)
    buf_a = np.zeros(w * h * bpp, dtype=np.uint8)
    buf_b = np.zeros_like(buf_a)

    dilate_pass(w, h, bpp, original, buf_a, threshold)
    for _ in range(rounds):
        dilate_pass(w, h, bpp, buf_a, buf_b, threshold)
        dilate_pass(w, h, bpp, buf_b, buf_a, threshold)
    return buf_a


def merge_color(w: int, h: int, bpp: int, dilated: BufferLike, original_mut: BufferLike) -> None:
    """
    Copy color from dilated into every pixel of original_mut whose alpha is exactly 0.

    Alpha bytes are left alone, and pixels with any nonzero alpha are left alone entirely.
    """
    d = pixel_view(dilated, w, h, bpp)
    o = pixel_view(original_mut, w, h, bpp, writable=True)
    a = bpp - 1
    clear = o[..., a] == 0
    o[clear, :a] = d[clear, :a]


def dilate_region(
    buffer: BufferLike,
    w: int,
    x: int,
    y: int,
    sw: int,
    sh: int,
    bpp: int,
    threshold: int = ALPHA_THRESHOLD,
    rounds: int = DILATE_ROUNDS,
) -> None:
    """
    Dilate only the sw x sh rectangle at (x, y) of a buffer with row width w, in place.

    The rectangle is treated as a standalone image: pixels outside it are
    neither read nor written, and neighbor lookups clamp to the rectangle's edges.
    """
    check_shape(w, 1, bpp)
    flat = as_flat(buffer)
    row = w * bpp
    if flat.size == 0 or flat.size % row:
        raise InvalidBufferShape(f"Buffer of {flat.size} bytes is not a whole number of {w}x{bpp} rows")
    h = flat.size // row

    if x < 0 or y < 0 or sw < 0 or sh < 0 or x + sw > w or y + sh > h:
        raise RectangleOutOfBounds(f"Rectangle {(x, y, sw, sh)} does not fit in {w}x{h} buffer")
    if sw == 0 or sh == 0:
        return

    image = pixel_view(flat, w, h, bpp, writable=True)
    # .copy() gives a contiguous scratch buffer with row stride sw * bpp
    original = image[y : y + sh, x : x + sw].copy()

    dilated = converge(sw, sh, bpp, original, threshold, rounds)
    merge_color(sw, sh, bpp, dilated, original)

    image[y : y + sh, x : x + sw] = original


def dilate_full(
    buffer: BufferLike,
    w: int,
    h: int,
    bpp: int,
    threshold: int = ALPHA_THRESHOLD,
    rounds: int = DILATE_ROUNDS,
) -> None:
    """Dilate a whole w x h image in place."""
    pixel_view(buffer, w, h, bpp, writable=True)
    dilate_region(buffer, w, 0, 0, w, h, bpp, threshold, rounds)
