from __future__ import annotations

import io
import json
import re
from pathlib import Path
from typing import Any, Dict, Union

import numpy as np
from PIL import Image

from .config import BPP, SKIN_SIZE, SKIN_SIZE_HD

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")


class SkinFormatError(ValueError):
    pass


def load_skin(source: Union[str, Path, bytes]) -> np.ndarray:
    """
    Decode a skin image into an RGBA uint8 ndarray of shape (H, W, 4).

    RGBA images and palette images carrying a transparency chunk are accepted.
    RGB, L and LA images are rejected rather than converted, since an RGBA
    alpha channel cannot be made up for them.
    """
    fp = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else source
    try:
        img = Image.open(fp)
    except Image.UnidentifiedImageError as e:
        raise SkinFormatError("Image file is not a valid image") from e
    try:
        img.load()
    except OSError as e:
        raise SkinFormatError(f"Image file is truncated or corrupt: {e}") from e

    if img.mode == "P" and "transparency" in img.info:
        img = img.convert("RGBA")
    if img.mode != "RGBA":
        raise SkinFormatError(f"Image could not be converted to RGBA (mode={img.mode})")
    return np.array(img, dtype=np.uint8)


def validate_skin_size(rgba: np.ndarray) -> bool:
    """
    Check that rgba is a 256x128 or 512x256 skin. Returns True for the HD size.
    """
    if rgba.ndim != 3 or rgba.shape[2] != BPP:
        raise SkinFormatError(f"Expected RGBA image (H,W,4), got shape={rgba.shape}")
    h, w = rgba.shape[:2]
    if (w, h) == SKIN_SIZE:
        return False
    if (w, h) == SKIN_SIZE_HD:
        return True
    raise SkinFormatError(f"Not a valid 256x128 or 512x256 skin: {w}x{h}")


def _to_image(rgba: np.ndarray) -> Image.Image:
    if rgba.ndim != 3 or rgba.shape[2] != BPP:
        raise ValueError(f"Expected RGBA image (H,W,4), got shape={rgba.shape}")
    return Image.fromarray(np.ascontiguousarray(rgba, dtype=np.uint8))


def save_png(rgba: np.ndarray, path: str) -> None:
    """
    Save as lossless RGBA PNG.
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    _to_image(rgba).save(str(p), format="PNG")


def png_bytes(rgba: np.ndarray) -> bytes:
    buf = io.BytesIO()
    _to_image(rgba).save(buf, format="PNG")
    return buf.getvalue()


def write_json(path: str, data: Dict[str, Any]) -> None:
    # skin names and error messages are kept readable, not \u-escaped
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False), encoding="utf-8")


def safe_skin_name_from_relpath(relpath: str) -> str:
    """
    Skin name for a PNG path: directories joined with "__", anything outside
    [A-Za-z0-9_-] replaced by "_" so the name also works as an upload filename.
    Example: "pack/red fox (v2).png" -> "pack__red_fox__v2_"
    """
    parts = Path(relpath).with_suffix("").parts
    return "__".join(_UNSAFE_NAME_CHARS.sub("_", part) for part in parts)
