from __future__ import annotations

import argparse
import json
import os
import time
from pathlib import Path
from typing import Dict, List

import numpy as np
from dotenv import load_dotenv
from tqdm import tqdm

from skin_dilate.config import ALPHA_THRESHOLD, DEFAULT_DATABASE_URL, DILATE_ROUNDS, UPLOAD_TIMEOUT_S
from skin_dilate.contracts import DilateRecord, UploadTarget
from skin_dilate.io import SkinFormatError, load_skin, safe_skin_name_from_relpath, validate_skin_size, write_json
from skin_dilate.pipeline import process_skin, upload_skin_variants
from skin_dilate.skin_info import SkinInfoError, parse_skin_info

INFO_FILE = "info.txt"


def _iter_images(input_dir: Path):
    for p in sorted(input_dir.rglob("*")):
        if p.is_file() and p.suffix.lower() == ".png":
            yield p


def _iter_skin_dirs(input_dir: Path):
    for info in sorted(input_dir.rglob(INFO_FILE)):
        yield info.parent


def _load_variants(skin_dir: Path) -> Dict[bool, np.ndarray]:
    # only the skin's own directory; nested skin directories are separate skins
    variants: Dict[bool, np.ndarray] = {}
    for img_path in sorted(p for p in skin_dir.iterdir() if p.is_file() and p.suffix.lower() == ".png"):
        rgba = load_skin(str(img_path))
        hd = validate_skin_size(rgba)
        if hd in variants:
            size = "512x256" if hd else "256x128"
            raise SkinFormatError(f"More than one {size} image in {skin_dir}")
        variants[hd] = rgba
    return variants


def _upload_target_from_env() -> UploadTarget:
    username = os.getenv("SKINS_USERNAME")
    password = os.getenv("SKINS_PASSWORD")
    if not username or not password:
        raise RuntimeError("Expected SKINS_USERNAME and SKINS_PASSWORD for http auth in environment")
    raw_timeout = os.getenv("UPLOAD_TIMEOUT_S", str(UPLOAD_TIMEOUT_S))
    try:
        timeout_s = float(raw_timeout)
    except ValueError as e:
        raise ValueError(f"UPLOAD_TIMEOUT_S must be a number of seconds, got {raw_timeout!r}") from e
    return UploadTarget(
        database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
        username=username,
        password=password,
        timeout_s=timeout_s,
    )


def _dilate_dir(args, input_dir: Path, output_dir: Path, manifest_fp, stats: Dict[str, int]) -> None:
    images = list(_iter_images(input_dir))
    if not images:
        print(f"No images found under {input_dir}")
        return

    for img_path in tqdm(images, desc="Dilating", unit="img"):
        rel = img_path.relative_to(input_dir)
        out_path = output_dir / rel
        record = DilateRecord(
            skin_name=safe_skin_name_from_relpath(rel.as_posix()),
            source_path=str(img_path),
            status="rejected",
        )
        try:
            result = process_skin(str(img_path), str(out_path), threshold=args.threshold, rounds=args.rounds)
        except SkinFormatError as e:
            record.error = str(e)
            stats["rejected"] += 1
            print(f"{img_path.name}: rejected ({e})")
        else:
            record.output_path = result.output_path
            record.width, record.height, record.hd = result.width, result.height, result.hd
            record.status = "dilated"
            stats["dilated"] += 1
            t = result.timings
            print(
                f"{img_path.name}: total={t.total_s:.3f}s "
                f"(load={t.load_s:.3f}s dilate={t.dilate_s:.3f}s save={t.save_s:.3f}s)"
            )
        stats["total"] += 1
        manifest_fp.write(json.dumps(record.model_dump(), ensure_ascii=False) + "\n")
        manifest_fp.flush()


def _upload_dir(args, input_dir: Path, manifest_fp, stats: Dict[str, int]) -> List[str]:
    target = _upload_target_from_env()
    errors: List[str] = []

    skin_dirs = list(_iter_skin_dirs(input_dir))
    if not skin_dirs:
        print(f"No skin directories ({INFO_FILE}) found under {input_dir}")
        return errors

    for skin_dir in tqdm(skin_dirs, desc="Uploading", unit="skin"):
        stats["total"] += 1
        try:
            info = parse_skin_info((skin_dir / INFO_FILE).read_text(encoding="utf-8"))
            variants = _load_variants(skin_dir)
            upload_errors = upload_skin_variants(
                info,
                variants,
                target,
                database=args.database,
                threshold=args.threshold,
                rounds=args.rounds,
            )
        except (SkinInfoError, SkinFormatError) as e:
            errors.append(f"{skin_dir}: {e}")
            stats["rejected"] += 1
            record = DilateRecord(skin_name=skin_dir.name, source_path=str(skin_dir), status="rejected", error=str(e))
        else:
            errors.extend(upload_errors)
            status = "upload_failed" if upload_errors else "uploaded"
            stats[status] += 1
            record = DilateRecord(
                skin_name=info.name,
                source_path=str(skin_dir),
                hd=True in variants,
                status=status,
                error="\n".join(upload_errors),
            )
        manifest_fp.write(json.dumps(record.model_dump(), ensure_ascii=False) + "\n")
        manifest_fp.flush()
    return errors


def main() -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Alpha-border dilation for skin textures (+ optional database upload).")
    parser.add_argument("--input", required=True, type=str, help="Input directory containing PNG skins.")
    parser.add_argument("--output", required=True, type=str, help="Output directory (dilated PNGs + manifest.jsonl).")
    parser.add_argument("--threshold", default=ALPHA_THRESHOLD, type=int, help="Alpha values above this count as opaque.")
    parser.add_argument("--rounds", default=DILATE_ROUNDS, type=int, help="Ping-pong round-trips after the first pass.")
    parser.add_argument(
        "--upload",
        action="store_true",
        help=f"Upload mode: every directory holding an {INFO_FILE} is one skin, uploaded to the skin database.",
    )
    parser.add_argument("--database", default="normal", choices=("normal", "community"), help="Target skin database.")
    args = parser.parse_args()

    input_dir = Path(args.input)
    output_dir = Path(args.output)
    if not input_dir.exists():
        raise FileNotFoundError(f"Input dir not found: {input_dir}")
    output_dir.mkdir(parents=True, exist_ok=True)
    manifest_path = output_dir / "manifest.jsonl"

    stats = {"total": 0, "dilated": 0, "rejected": 0, "uploaded": 0, "upload_failed": 0}
    errors: List[str] = []

    t0 = time.perf_counter()
    with open(manifest_path, "a", encoding="utf-8") as manifest_fp:
        if args.upload:
            errors = _upload_dir(args, input_dir, manifest_fp, stats)
        else:
            _dilate_dir(args, input_dir, output_dir, manifest_fp, stats)
    t1 = time.perf_counter()

    write_json(str(output_dir / "summary.json"), {**stats, "elapsed_s": round(t1 - t0, 3), "errors": errors})

    for err in errors:
        print(err)
    print(
        "Done.\n"
        f"- total:    {stats['total']}\n"
        f"- dilated:  {stats['dilated']}\n"
        f"- uploaded: {stats['uploaded']} (failed: {stats['upload_failed']})\n"
        f"- rejected: {stats['rejected']}\n"
        f"- elapsed_s: {t1 - t0:.2f}\n"
        f"- manifest: {manifest_path.resolve()}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
