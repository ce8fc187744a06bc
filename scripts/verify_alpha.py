from __future__ import annotations

import argparse
import json
from pathlib import Path

import numpy as np
from PIL import Image


def _iter_jsonl(path: Path):
    with open(path, "r", encoding="utf-8") as fp:
        for line_no, line in enumerate(fp, start=1):
            s = line.strip()
            if not s:
                continue
            try:
                yield json.loads(s)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON on line {line_no}: {path}") from e


def _alpha(path: str) -> np.ndarray:
    with Image.open(path) as img:
        return np.array(img.getchannel("A"), dtype=np.uint8)


def main() -> int:
    parser = argparse.ArgumentParser(description="Check that dilated skins kept their source alpha channel bit-for-bit.")
    parser.add_argument("--manifest", required=True, type=str, help="Path to <output>/manifest.jsonl")
    args = parser.parse_args()

    manifest_path = Path(args.manifest)
    if not manifest_path.exists():
        raise FileNotFoundError(f"manifest not found: {manifest_path}")

    mismatches = 0
    for rec in _iter_jsonl(manifest_path):
        if rec.get("status") != "dilated":
            continue
        out_path = rec.get("output_path", "")
        exists = bool(out_path) and Path(out_path).exists()
        preserved = exists and np.array_equal(_alpha(rec["source_path"]), _alpha(out_path))
        if not preserved:
            mismatches += 1

        print(
            json.dumps(
                {
                    "skin_name": rec.get("skin_name"),
                    "output_path": out_path,
                    "output_exists": exists,
                    "alpha_preserved": preserved,
                },
                ensure_ascii=False,
            )
        )

    return 1 if mismatches else 0


if __name__ == "__main__":
    raise SystemExit(main())
