from __future__ import annotations

from typing import Union

import numpy as np

BufferLike = Union[bytes, bytearray, memoryview, np.ndarray]


class DilateError(ValueError):
    """Base class for caller-contract violations in the dilation engine."""


class InvalidBufferShape(DilateError):
    pass


class RectangleOutOfBounds(DilateError):
    pass


class BufferAliasError(DilateError):
    pass


class ReadOnlyBufferError(DilateError):
    pass


def check_shape(w: int, h: int, bpp: int) -> None:
    if bpp not in (3, 4):
        raise InvalidBufferShape(f"bpp must be 3 or 4, got {bpp}")
    if w <= 0 or h <= 0:
        raise InvalidBufferShape(f"Invalid image size: {(w, h)}")


def as_flat(buf: BufferLike) -> np.ndarray:
    """
    View any supported buffer as a flat uint8 ndarray without copying.

    bytes give a read-only view; bytearray, writable memoryviews and uint8
    ndarrays give writable views that alias the caller's memory.
    """
    if isinstance(buf, np.ndarray):
        if buf.dtype != np.uint8:
            raise InvalidBufferShape(f"Expected uint8 buffer, got dtype={buf.dtype}")
        if not buf.flags.c_contiguous:
            # reshape(-1) would silently copy and in-place writes would be lost
            raise InvalidBufferShape("Buffer must be C-contiguous")
        return buf.reshape(-1)
    return np.frombuffer(buf, dtype=np.uint8)


def pixel_view(buf: BufferLike, w: int, h: int, bpp: int, *, writable: bool = False) -> np.ndarray:
    """
    Row-major (h, w, bpp) view over a flat pixel buffer; the alpha-like byte is [..., bpp - 1].
    """
    check_shape(w, h, bpp)
    flat = as_flat(buf)
    if flat.size != w * h * bpp:
        raise InvalidBufferShape(f"Expected {w}x{h}x{bpp}={w * h * bpp} bytes, got {flat.size}")
    if writable and not flat.flags.writeable:
        raise ReadOnlyBufferError("Destination buffer is read-only")
    return flat.reshape(h, w, bpp)
