from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Dict, List

import numpy as np

from .config import ALPHA_THRESHOLD, DILATE_ROUNDS
from .contracts import SkinDatabase, SkinInfo, UploadTarget
from .dilate import dilate_full
from .io import SkinFormatError, load_skin, png_bytes, save_png, validate_skin_size
from .upload import build_form, upload_skin


@dataclass(frozen=True)
class StageTimings:
    load_s: float
    dilate_s: float
    save_s: float
    total_s: float


@dataclass(frozen=True)
class ProcessedSkin:
    output_path: str
    width: int
    height: int
    hd: bool
    timings: StageTimings


def dilate_skin(
    rgba: np.ndarray,
    threshold: int = ALPHA_THRESHOLD,
    rounds: int = DILATE_ROUNDS,
) -> np.ndarray:
    """
    Return a dilated copy of an (H, W, 3|4) uint8 image; the input is left untouched.
    """
    if rgba.ndim != 3 or rgba.shape[2] not in (3, 4):
        raise ValueError(f"Expected (H,W,3) or (H,W,4) image, got shape={rgba.shape}")
    out = np.array(rgba, dtype=np.uint8, order="C", copy=True)
    h, w, bpp = out.shape
    dilate_full(out, w, h, bpp, threshold, rounds)
    return out


def process_skin(
    image_path: str,
    out_path: str,
    *,
    threshold: int = ALPHA_THRESHOLD,
    rounds: int = DILATE_ROUNDS,
) -> ProcessedSkin:
    """
    Linear pipeline:
      1) Load + validate skin size
      2) Dilate
      3) Save PNG
    """
    t0 = time.perf_counter()

    rgba = load_skin(image_path)
    hd = validate_skin_size(rgba)
    t1 = time.perf_counter()

    dilated = dilate_skin(rgba, threshold=threshold, rounds=rounds)
    t2 = time.perf_counter()

    save_png(dilated, out_path)
    t3 = time.perf_counter()

    h, w = dilated.shape[:2]
    return ProcessedSkin(
        output_path=out_path,
        width=w,
        height=h,
        hd=hd,
        timings=StageTimings(load_s=t1 - t0, dilate_s=t2 - t1, save_s=t3 - t2, total_s=t3 - t0),
    )


def upload_skin_variants(
    info: SkinInfo,
    variants: Dict[bool, np.ndarray],
    target: UploadTarget,
    *,
    database: SkinDatabase = "normal",
    threshold: int = ALPHA_THRESHOLD,
    rounds: int = DILATE_ROUNDS,
) -> List[str]:
    """
    Dilate and upload the 256x128 (key False) and optional 512x256 (key True) variants of one skin.

    Every skin must have a 256x128 variant. Upload failures do not stop the
    remaining variant; they are collected and returned as messages.
    """
    if variants.get(False) is None:
        raise SkinFormatError(f"The skin {info.name} had no 256x128 skin. This is not allowed")

    errors: List[str] = []
    for hd in sorted(variants):
        rgba = variants[hd]
        if validate_skin_size(rgba) != hd:
            raise SkinFormatError(f"The {'512x256' if hd else '256x128'} variant of {info.name} has the wrong size")
        png = png_bytes(dilate_skin(rgba, threshold=threshold, rounds=rounds))
        try:
            upload_skin(png, info.name, build_form(info, database, hd), target)
        except RuntimeError as e:
            errors.append(f"There was an error while uploading {e}.\nPlease manually check if this broke the database")
    return errors
