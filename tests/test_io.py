from __future__ import annotations

import io
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from skin_dilate.io import SkinFormatError, load_skin, png_bytes, safe_skin_name_from_relpath, save_png, validate_skin_size
from skin_dilate.skin_info import SkinInfoError, parse_skin_info


def _rgba(w: int, h: int) -> np.ndarray:
    px = np.zeros((h, w, 4), dtype=np.uint8)
    px[: h // 2, : w // 2] = (10, 20, 30, 255)
    return px


def test_save_and_load_roundtrip_keeps_bytes(tmp_path: Path):
    px = _rgba(256, 128)
    out = tmp_path / "nested" / "skin.png"
    save_png(px, str(out))
    loaded = load_skin(str(out))
    assert loaded.shape == (128, 256, 4)
    np.testing.assert_array_equal(loaded, px)


def test_load_from_bytes():
    loaded = load_skin(png_bytes(_rgba(512, 256)))
    assert validate_skin_size(loaded) is True


@pytest.mark.parametrize(
    "img",
    [
        Image.new("RGB", (256, 128), (1, 2, 3)),
        Image.new("L", (256, 128), 9),
        Image.new("LA", (256, 128), (9, 0)),
        Image.new("P", (256, 128), 0),  # palette without a transparency chunk
    ],
)
def test_load_rejects_images_without_rgba_alpha(img):
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    with pytest.raises(SkinFormatError):
        load_skin(buf.getvalue())


def test_load_accepts_palette_png_with_transparency():
    # quantized skins: index 0 fully transparent, index 1 opaque red
    img = Image.new("P", (256, 128), 0)
    img.putpalette([0, 0, 0, 255, 0, 0] + [0, 0, 0] * 254)
    img.paste(1, (0, 0, 64, 32))
    buf = io.BytesIO()
    img.save(buf, format="PNG", transparency=0)

    rgba = load_skin(buf.getvalue())

    assert rgba.shape == (128, 256, 4)
    assert validate_skin_size(rgba) is False
    assert rgba[0, 0].tolist() == [255, 0, 0, 255]
    assert rgba[100, 200, 3] == 0


def test_load_rejects_garbage():
    with pytest.raises(SkinFormatError):
        load_skin(b"definitely not a png")


def test_validate_skin_size():
    assert validate_skin_size(_rgba(256, 128)) is False
    assert validate_skin_size(_rgba(512, 256)) is True
    with pytest.raises(SkinFormatError):
        validate_skin_size(_rgba(128, 256))
    with pytest.raises(SkinFormatError):
        validate_skin_size(np.zeros((128, 256, 3), dtype=np.uint8))


def test_safe_skin_name_from_relpath():
    assert safe_skin_name_from_relpath("pack/red fox.png") == "pack__red_fox"
    assert safe_skin_name_from_relpath("pack/red fox (v2).png") == "pack__red_fox__v2_"
    # dots would otherwise leak into the uploaded "<name>.png" filename
    assert safe_skin_name_from_relpath("a.b/c.d.png") == "a_b__c_d"


def test_parse_skin_info():
    info = parse_skin_info('Here you go:\n"greensward" by Lappi (CC BY-SA 3.0)\nthanks')
    assert info.name == "greensward"
    assert info.author == "Lappi"
    assert info.license == "CC BY-SA 3.0"


def test_parse_skin_info_is_case_insensitive():
    info = parse_skin_info('"coala" BY someone (CC0)')
    assert (info.name, info.author, info.license) == ("coala", "someone", "CC0")


def test_parse_skin_info_missing_parts():
    with pytest.raises(SkinInfoError) as exc:
        parse_skin_info('"coala"\nby someone')
    assert "\n" not in str(exc.value)
