#!/usr/bin/env python3
"""
Color Script Builder
====================

Standalone script that runs the local pipeline on a video file.

This script:
    1. Samples the video (same policy as the service)
    2. Prints the dominant colour palette
    3. Writes the color script composite as JPEG

Shots come from a JSON file holding the analysis model's shot list
(either a list or {"shots": [...]}). Without one, every k-th sampled
frame becomes a tile.

Prerequisites:
    - Install the package: pip install -e .

Usage:
    python scripts/build_color_script.py clip.mp4 --output color_script.jpg
    python scripts/build_color_script.py clip.mp4 --shots shots.json --columns 6 --labels
    python scripts/build_color_script.py clip.mp4 --shots shots.json --payload-indices
"""

import argparse
import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import List

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from framescript.analysis import build_payload, summarize_shots
from framescript.config import settings
from framescript.errors import FramescriptError
from framescript.models import ShotData, ShotReference
from framescript.pipeline import Pipeline
from framescript.video import sample_video


logger = logging.getLogger(__name__)


def load_shots(path: Path) -> List[ShotData]:
    """Read a shot list JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if isinstance(raw, dict):
        raw = raw.get("shots", [])
    return [ShotData.model_validate(item) for item in raw]


def frame_step_shots(frame_count: int, tiles: int) -> List[ShotReference]:
    """One pseudo-shot per evenly spaced frame."""
    step = max(1, -(-frame_count // tiles))
    return [
        ShotReference(shot_number=number, thumbnail_index=index)
        for number, index in enumerate(range(0, frame_count, step), start=1)
    ]


def run(args: argparse.Namespace) -> int:
    pipeline = Pipeline.from_settings(settings)

    def on_progress(done: int, total: int) -> None:
        if done % 50 == 0 or done >= total:
            logger.info(f"Sampling: {done}/{total}")

    start = time.time()
    frames, metadata = sample_video(args.video, sampler=pipeline.sampler, on_progress=on_progress)
    logger.info(
        f"Sampled {len(frames)} frames from {metadata.duration_seconds:.1f}s video "
        f"in {time.time() - start:.1f}s"
    )

    colors = pipeline.summarizer.summarize(frames, max_colors=args.max_colors)
    print("Palette: " + " ".join(colors))

    if args.shots:
        shots = load_shots(args.shots)
        summary = summarize_shots(shots).to_dict()
        print(
            f"Shots: {summary['shot_count']}, ASL {summary['average_shot_length']}s, "
            f"sizes {summary['size_distribution']}"
        )
        if args.payload_indices:
            payload = build_payload(frames, args.video.name, settings.payload.max_frames)
            shots = payload.resolve_shots(shots)
    else:
        shots = frame_step_shots(len(frames), args.tiles)

    result = pipeline.compositor.composite(
        shots,
        frames,
        metadata,
        columns=args.columns,
        show_labels=args.labels,
    )
    args.output.write_bytes(result.to_jpeg(settings.composite.jpeg_quality))
    print(
        f"Wrote {args.output} ({result.width}x{result.height}, {len(shots)} tiles, "
        f"{len(result.fallback_cells)} fallbacks)"
    )
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Build a color script from a video file")
    parser.add_argument("video", type=Path, help="Video file (max 120s by default)")
    parser.add_argument("--shots", type=Path, default=None, help="Shot list JSON")
    parser.add_argument(
        "--payload-indices",
        action="store_true",
        help="Shot thumbnail indices refer to the decimated analysis payload",
    )
    parser.add_argument("--output", type=Path, default=Path("color_script.jpg"))
    parser.add_argument("--columns", type=int, default=settings.composite.default_columns)
    parser.add_argument("--tiles", type=int, default=24, help="Tiles without a shot list")
    parser.add_argument("--labels", action="store_true", help="Stamp shot numbers")
    parser.add_argument("--max-colors", type=int, default=settings.palette.max_colors)
    args = parser.parse_args()

    try:
        return run(args)
    except FramescriptError as e:
        logger.error(f"{e.error_code}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
