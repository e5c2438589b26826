#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import argparse
import logging
import sys

import numpy as np
from PIL import Image

from .codec import (
    DecodeMode,
    average_block_image,
    decode_from_ascii,
    delta_image,
    encode_to_ascii,
    glyph_preview_image,
)
from .errors import AsciiGlyphError
from .glyphs import FONT_SIZE_PT, GlyphLibraryCache, load_glyph_font
from .legacy import DEFAULT_THRESHOLD, LEGACY_FONT_SIZE_PT, build_legacy_library, encode_legacy
from .matcher import Strategy
from .preprocess import prepare_image

logger = logging.getLogger(__name__)


def add_glyph_args(p):
    p.add_argument("--extended", action="store_true", help="use 8-bit (Latin-1) glyphs instead of 7-bit ASCII")
    p.add_argument("--font", type=str, default=None, help="TrueType monospace font used to measure glyphs")
    p.add_argument("--font-size", type=int, default=FONT_SIZE_PT, help="font size in pt (default=8)")


def add_image_args(p):
    p.add_argument("--width", type=int, default=None,
                   help="resize to this width in pixels (rounded down to a multiple of 9)")
    p.add_argument("--invert", action="store_true", help="invert brightness before converting")
    p.add_argument("--brightness", type=float, default=1.0, help="brightness multiplier (default=1.0)")
    p.add_argument("--contrast", type=float, default=1.0, help="contrast multiplier (default=1.0)")
    p.add_argument("--auto", action="store_true", help="auto adjust shadows/highlights (avoid white clipping)")
    p.add_argument("--gamma", type=float, default=0.7, help="gamma used by --auto (default 0.7, <1 lifts shadows)")
    p.add_argument("--exposure", type=float, default=0.5, help="exposure-like parameter for --auto (default 0.5)")


def add_match_args(p):
    p.add_argument("--black", type=int, default=0, help="pixels at or below this become black (default=0)")
    p.add_argument("--white", type=int, default=255, help="pixels at or above this become white (default=255)")
    p.add_argument("--strategy", type=Strategy, choices=list(Strategy), default=Strategy.BAND_SEARCH,
                   help="glyph search strategy (default=band)")


def build_parser():
    p = argparse.ArgumentParser(prog="ascii-glyph",
                                description="Grayscale image <-> ASCII art using glyph brightness signatures")
    p.add_argument("--log-level", default="WARNING", help="logging level (default=WARNING)")
    sub = p.add_subparsers(dest="command", required=True)

    enc = sub.add_parser("encode", help="image -> text")
    enc.add_argument("input", help="input image")
    enc.add_argument("output", help="output text file")
    enc.add_argument("--no-crop", action="store_true",
                     help="keep leading blank lines and trailing spaces")
    add_image_args(enc)
    add_match_args(enc)
    add_glyph_args(enc)

    dec = sub.add_parser("decode", help="text -> image")
    dec.add_argument("input", help="input text file")
    dec.add_argument("output", help="output image")
    dec.add_argument("--mode", type=DecodeMode, choices=list(DecodeMode), default=DecodeMode.QUADRANT,
                     help="flat: one grey per character, quadrant: 3x3 greys per character")
    add_glyph_args(dec)

    avg = sub.add_parser("average", help="image -> per-block average image")
    avg.add_argument("input", help="input image")
    avg.add_argument("output", help="output image")
    add_image_args(avg)

    pre = sub.add_parser("preview", help="image -> per-block brightness of the matched glyphs")
    pre.add_argument("input", help="input image")
    pre.add_argument("output", help="output image")
    add_image_args(pre)
    add_match_args(pre)
    add_glyph_args(pre)

    dlt = sub.add_parser("delta", help="absolute difference of two grayscale images")
    dlt.add_argument("first", help="first image")
    dlt.add_argument("second", help="second image")
    dlt.add_argument("output", help="output image")
    dlt.add_argument("--no-label", action="store_true", help="do not draw the average delta onto the image")

    leg = sub.add_parser("legacy", help="image -> text using the 8x8 / 4-quadrant converter")
    leg.add_argument("input", help="input image")
    leg.add_argument("output", help="output text file")
    leg.add_argument("--threshold", type=int, default=DEFAULT_THRESHOLD, help="ink threshold (default=112)")
    leg.add_argument("--no-invert", action="store_true", help="count bright pixels as ink")
    leg.add_argument("--font", type=str, default=None, help="TrueType monospace font used to measure glyphs")
    return p


def open_image(path):
    try:
        return Image.open(path)
    except OSError as e:
        raise AsciiGlyphError("cannot open %s: %s" % (path, e)) from e


def load_prepared(args):
    return prepare_image(open_image(args.input), width=args.width, invert=args.invert,
                         brightness=args.brightness, contrast=args.contrast,
                         auto=args.auto, gamma=args.gamma, exposure=args.exposure)


def glyph_library(args):
    font = load_glyph_font(args.font, args.font_size) if args.font or args.font_size != FONT_SIZE_PT else None
    return GlyphLibraryCache(use_extended_ascii=args.extended, font=font).get()


def save_raster(raster, path):
    Image.fromarray(raster).save(path)


def write_text(text, path):
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)


def run(args):
    if args.command == "encode":
        art = encode_to_ascii(load_prepared(args), glyph_library(args),
                              black_threshold=args.black, white_threshold=args.white,
                              strategy=args.strategy, crop=not args.no_crop)
        write_text(art, args.output)
    elif args.command == "decode":
        with open(args.input, "r", encoding="utf-8") as f:
            text = f.read()
        save_raster(decode_from_ascii(text, glyph_library(args), mode=args.mode), args.output)
    elif args.command == "average":
        save_raster(average_block_image(load_prepared(args)), args.output)
    elif args.command == "preview":
        save_raster(glyph_preview_image(load_prepared(args), glyph_library(args),
                                        black_threshold=args.black, white_threshold=args.white,
                                        strategy=args.strategy), args.output)
    elif args.command == "delta":
        first = np.asarray(open_image(args.first).convert("L"))
        second = np.asarray(open_image(args.second).convert("L"))
        diff, average = delta_image(first, second, annotate=not args.no_label)
        save_raster(diff, args.output)
        print("Avg. delta: %s" % average)
    elif args.command == "legacy":
        font = load_glyph_font(args.font, LEGACY_FONT_SIZE_PT) if args.font else None
        image = np.asarray(open_image(args.input).convert("L"))
        write_text(encode_legacy(image, build_legacy_library(font), threshold=args.threshold,
                                 invert=not args.no_invert), args.output)


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        run(args)
    except (AsciiGlyphError, OSError, ValueError) as e:
        print("Error:", e, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
