"""
Command line interface.

Usage:
    stickerstag cutout photo.png photo.cutout.webp --tolerance 230
    stickerstag sticker fox.cutout.webp fox.sticker.webp --stroke-px 24
    stickerstag edge fox.sticker.webp fox.edge.webp --edge-px 40 --offset-px 6
    stickerstag bevel fox.sticker.webp fox.bevel.webp --light-angle 225 --debug
    stickerstag outline map.png map.outline.webp
    stickerstag batch public/characters sticker --workers 4

Numeric options are handed to the effects as given; the effects parse and
clamp them.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from .batch import discover_sources, run_batch
from .errors import StickerStagError
from .io import load_image, save_image
from .layer_effects import AssetEffect, Bevel, Cutout, Outline, Pipeline, SecondEdge, StickerBorder
from .pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stage:
    """How the batch command finds inputs and names outputs for one stage."""
    effect: type[AssetEffect]
    require_suffix: str | None = None  # Stage suffix the inputs must carry
    extensions: tuple[str, ...] = (".png", ".jpg", ".jpeg", ".webp")


STAGES = {
    "cutout": Stage(Cutout),
    "sticker": Stage(StickerBorder, require_suffix="cutout"),
    "edge": Stage(SecondEdge, require_suffix="sticker"),
    "bevel": Stage(Bevel, require_suffix="sticker"),
    "outline": Stage(Outline, extensions=(".png", ".jpg", ".jpeg")),
}

DEBUG_SUFFIXES = ("rim", "height")  # Written by bevel --debug

STAGE_SUFFIXES = tuple(stage.effect.output_suffix for stage in STAGES.values())

# command -> (effect class, [(flag, field alias, help)])
EFFECT_OPTIONS = {
    "cutout": (Cutout, [
        ("--tolerance", "tolerance", "Luminance treated as near-white, 0..255"),
        ("--feather", "feather", "Background erosion radius, 0..5"),
        ("--preblur", "preblur", "Blur sigma before the luminance test, 0..2"),
        ("--edge-smoothing", "edgeSmoothing", "Alpha edge blur sigma, 0 disables"),
        ("--min-component-size", "minComponentSize", "Smallest kept silhouette in px"),
    ]),
    "sticker": (StickerBorder, [
        ("--stroke-px", "strokePx", "Border thickness, 1..500"),
        ("--softness", "softness", "Falloff exponent control, 0.1..5"),
        ("--strategy", "strategy", "hard, falloff or dilation"),
        ("--simplify-px", "simplifyPx", "Close concavities narrower than this, 0..50"),
        ("--color", "color", "Border color as #RRGGBB"),
    ]),
    "edge": (SecondEdge, [
        ("--edge-px", "edgePx", "Ring thickness"),
        ("--offset-px", "offsetPx", "Gap between sticker and ring"),
        ("--color", "color", "Ring color as #RRGGBB"),
    ]),
    "bevel": (Bevel, [
        ("--bevel-px", "bevelPx", "Rim thickness, 1..50"),
        ("--light-angle", "lightAngle", "Light direction in degrees, 0 = right, 90 = down"),
        ("--intensity", "intensity", "Shading strength, 0..1"),
    ]),
    "outline": (Outline, [
        ("--luminance-low", "luminanceLow", "Luminance where fading starts"),
        ("--luminance-high", "luminanceHigh", "Luminance that is fully transparent"),
    ]),
}


def _effect_from_args(command: str, args: argparse.Namespace) -> AssetEffect:
    effect_class, options = EFFECT_OPTIONS[command]
    data = {}
    for flag, alias, _ in options:
        value = getattr(args, flag.lstrip("-").replace("-", "_"), None)
        if value is not None:
            data[alias] = value
    return effect_class.model_validate(data)


def _save_debug_maps(effect: Bevel, buffer: PixelBuffer, output: Path) -> None:
    """Store the rim and height maps next to the output as grayscale PNGs."""
    relief = effect.layers(buffer)
    for name, plane in zip(DEBUG_SUFFIXES, (relief.rim * 255, np.rint(relief.height * 255))):
        gray = plane.astype(np.uint8)
        debug = PixelBuffer(np.dstack([gray, gray, gray]), copy=False)
        path = output.with_name(f"{output.stem}.{name}.png")
        save_image(debug, path)
        logger.info(f"Debug map: {path}")


def _run_single(command: str, args: argparse.Namespace) -> int:
    effect = _effect_from_args(command, args)
    buffer = load_image(args.input)
    result = effect.apply(buffer)
    save_image(result.image, args.output)
    if command == "bevel" and args.debug:
        _save_debug_maps(effect, buffer, Path(args.output))
    logger.info(f"{effect!r}: {args.input} -> {args.output}")
    return 0


def _run_batch(args: argparse.Namespace) -> int:
    stage = STAGES[args.stage]
    if args.pipeline:
        pipeline = Pipeline.parse(args.pipeline)
    else:
        pipeline = Pipeline([stage.effect()])
    suffix = stage.effect.output_suffix
    strip = (stage.require_suffix,) if stage.require_suffix else ()
    sources = discover_sources(
        args.root,
        extensions=stage.extensions,
        exclude_suffixes=() if stage.require_suffix else STAGE_SUFFIXES + DEBUG_SUFFIXES,
        require_suffix=stage.require_suffix,
    )
    if not sources:
        logger.warning(f"No {args.stage} inputs found below {args.root}")
        return 0
    report = run_batch(
        sources, pipeline, suffix=suffix, strip_suffixes=strip,
        workers=args.workers, overwrite=args.overwrite,
    )
    print(f"{args.stage}: {report}")
    for source, error in report.failed:
        print(f"  failed: {source}: {error}", file=sys.stderr)
    return 0 if report.ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stickerstag",
        description="Prepare character and map art: cutouts, sticker borders, rings, bevels and outlines.",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log debug details")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    commands = parser.add_subparsers(dest="command", required=True)

    for command, (effect_class, options) in EFFECT_OPTIONS.items():
        sub = commands.add_parser(command, help=f"Apply {effect_class.display_name} to one image")
        sub.add_argument("input", help="Source image")
        sub.add_argument("output", help="Output image, .webp or .png")
        for flag, _, help_text in options:
            sub.add_argument(flag, help=help_text)
        if command == "bevel":
            sub.add_argument("--debug", action="store_true", help="Also write rim and height maps")

    batch = commands.add_parser("batch", help="Process every eligible image below a folder")
    batch.add_argument("root", help="Folder to walk recursively")
    batch.add_argument("stage", choices=sorted(STAGES), help="Stage to produce")
    batch.add_argument("--pipeline", help="Custom effect chain, e.g. 'cutout|stickerBorder(strokePx=24)'")
    batch.add_argument("--workers", type=int, default=None, help="Worker processes, 1 runs inline")
    batch.add_argument("--overwrite", action="store_true", help="Regenerate existing outputs")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        if args.command == "batch":
            return _run_batch(args)
        return _run_single(args.command, args)
    except (StickerStagError, ValueError, OSError) as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
