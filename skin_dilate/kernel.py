from __future__ import annotations

from typing import Iterator

import numpy as np

from .buffer import BufferAliasError, BufferLike, pixel_view
from .config import ALPHA_THRESHOLD

# (dx, dy) in scan priority order: north, west, east, south
NEIGHBOR_OFFSETS = ((0, -1), (-1, 0), (1, 0), (0, 1))


def _clamped_neighbors(px: np.ndarray) -> Iterator[np.ndarray]:
    """
    Yield, per direction, an (h, w, bpp) array holding each pixel's neighbor.

    Edge padding makes an out-of-range neighbor resolve to the nearest edge pixel.
    """
    h, w = px.shape[:2]
    padded = np.pad(px, ((1, 1), (1, 1), (0, 0)), mode="edge")
    for dx, dy in NEIGHBOR_OFFSETS:
        yield padded[1 + dy : 1 + dy + h, 1 + dx : 1 + dx + w]


def dilate_pass(
    w: int,
    h: int,
    bpp: int,
    src: BufferLike,
    dest: BufferLike,
    threshold: int = ALPHA_THRESHOLD,
) -> None:
    """
    One dilation pass from src into dest.

    Opaque pixels (alpha > threshold) are copied as-is. Every other pixel has its
    color cleared and then takes the color of the first opaque neighbor in
    north, west, east, south order, with alpha raised to 255. A pixel without an
    opaque neighbor keeps black color and its original low alpha.

    dest is fully overwritten; src is never written.
    """
    if not 0 <= int(threshold) <= 255:
        raise ValueError(f"threshold must be a byte value, got {threshold}")
    s = pixel_view(src, w, h, bpp)
    d = pixel_view(dest, w, h, bpp, writable=True)
    if np.shares_memory(s, d):
        raise BufferAliasError("Pass destination must not overlap its source")

    a = bpp - 1
    d[...] = s

    pending = s[..., a] <= threshold
    d[pending, :a] = 0

    for nb in _clamped_neighbors(s):
        hit = pending & (nb[..., a] > threshold)
        d[hit, :a] = nb[hit, :a]
        d[hit, a] = 255
        pending &= ~hit
