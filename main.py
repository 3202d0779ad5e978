#!/usr/bin/env python3
"""
PHOTO ALIGN - Command Line

Straighten, crop and color-correct a photo from the command line. Applies the
same edit state a GUI session would hold, then writes the full-resolution
export as PNG (and optionally the preview composite).
"""

import argparse
import sys
from pathlib import Path

import cv2
from loguru import logger

from config import Preview
from logger import setup_logging
from pixel_buffer import PixelBuffer, from_cv2, to_cv2
from presets import PRESET_ORDER
from session import EditorSession
from state import CropRect, Transform


def load_image(path: str) -> PixelBuffer:
    """Decode any format OpenCV reads into an RGBA PixelBuffer."""
    img = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise FileNotFoundError(f"Could not load image: {path}")
    return from_cv2(img)


def save_image(path: str, buffer: PixelBuffer):
    """Encode a PixelBuffer; the format follows the file extension."""
    if not cv2.imwrite(path, to_cv2(buffer)):
        raise IOError(f"Could not write image: {path}")


def default_output_path(input_path: str) -> str:
    p = Path(input_path)
    return str(p.with_name(f"{p.stem}_edited.png"))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='photo-align',
        description='Straighten, crop and color-correct a photo',
    )
    parser.add_argument('input', help='Image file to edit')
    parser.add_argument('-o', '--output', help='Output path (default: <name>_edited.png)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    geo = parser.add_argument_group('geometry')
    geo.add_argument('--rotate', type=float, default=0.0, help='Rotation in degrees (clockwise)')
    geo.add_argument('--scale', type=float, default=1.0, help='Zoom factor (0.1-5)')
    geo.add_argument('--translate', type=float, nargs=2, metavar=('DX', 'DY'), default=(0.0, 0.0),
                     help='Pan in preview pixels')
    geo.add_argument('--flip-h', action='store_true', help='Mirror horizontally')
    geo.add_argument('--flip-v', action='store_true', help='Mirror vertically')
    geo.add_argument('--auto-align', action='store_true', help='Detect and correct skew')
    geo.add_argument('--detect-only', action='store_true',
                     help='Print the detected skew angle and exit')

    crop = geo.add_mutually_exclusive_group()
    crop.add_argument('--crop', type=float, nargs=4, metavar=('X', 'Y', 'W', 'H'),
                      help='Crop rect in preview canvas pixels')
    crop.add_argument('--auto-crop', action='store_true',
                      help='Crop to the largest clean rect for the rotation')
    geo.add_argument('--canvas-width', type=int, default=Preview.CANVAS_DEFAULT_WIDTH,
                     help='Preview canvas width the crop/pan values refer to')

    color = parser.add_argument_group('color')
    color.add_argument('--preset', choices=PRESET_ORDER, help='Start from a color preset')
    color.add_argument('--brightness', type=float, help='-100 to 100')
    color.add_argument('--contrast', type=float, help='-100 to 100')
    color.add_argument('--saturation', type=float, help='0 to 200 (100 = unchanged)')
    color.add_argument('--temperature', type=float, help='-100 (cool) to 100 (warm)')
    color.add_argument('--auto-levels', action='store_true', help='Stretch 1st-99th percentile')
    color.add_argument('--auto-wb', action='store_true', help='Gray-world white balance')

    parser.add_argument('--preview', metavar='PATH', help='Also write the preview composite')
    return parser


def apply_arguments(session: EditorSession, args: argparse.Namespace):
    """Push command-line edit options into the session, in GUI order."""
    session.transform = Transform(
        translate_x=args.translate[0],
        translate_y=args.translate[1],
        flip_h=args.flip_h,
        flip_v=args.flip_v,
    ).with_rotation(args.rotate).with_scale(args.scale)

    if args.preset:
        session.apply_preset(args.preset)
    for name in ('brightness', 'contrast', 'saturation', 'temperature'):
        value = getattr(args, name)
        if value is not None:
            session.set_adjustment(name, value)
    if args.auto_levels:
        session.set_adjustment('auto_levels', True)
    if args.auto_wb:
        session.set_adjustment('auto_white_balance', True)

    if args.auto_align:
        session.auto_align()
        print(session.auto_align_result)

    if args.auto_crop:
        session.auto_fit_crop()
    elif args.crop:
        session.crop_mode = True
        session.set_crop(CropRect(*args.crop))


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging('DEBUG' if args.verbose else None)

    try:
        image = load_image(args.input)
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1

    session = EditorSession()
    session.load_image(image, args.canvas_width)

    if args.detect_only:
        session.auto_align()
        print(session.auto_align_result)
        return 0

    try:
        apply_arguments(session, args)

        if args.preview:
            save_image(args.preview, session.render_preview())
            logger.info(f"[CLI] Wrote preview {args.preview}")

        output = args.output or default_output_path(args.input)
        result = session.export()
        save_image(output, result)
    except (ValueError, IOError) as e:
        logger.error(str(e))
        return 1

    logger.info(f"[CLI] Wrote {output} ({result.width}x{result.height})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
