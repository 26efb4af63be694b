"""Convert a JPEG photo to a black-and-white PNG.

This script loads a ``.jpg``/``.jpeg`` image, converts it to grayscale,
binarizes it with Otsu's method (or a fixed threshold), and saves the result
as ``binary_<name>.png`` next to the input. With ``--show`` the original and
the result are displayed until a key is pressed.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import cv2
from PIL import Image

import binarize_toolkit as bt
import binarize_viewer

logger = logging.getLogger(__name__)

DEFAULT_INPUT = Path("../pics/WechatIMG25.jpg")
DEFAULT_THRESHOLD = 127


@dataclass
class BinarizeResult:
    """Outcome of one conversion; ``output_path`` and ``threshold`` are unset on failure."""

    input_path: Path
    output_path: Optional[Path] = None
    threshold: Optional[int] = None
    method: Optional[bt.ThresholdMethod] = None
    size: Optional[Tuple[int, int]] = None
    elapsed_ms: float = 0.0
    error_kind: Optional[bt.ErrorKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error_kind is None


def _failure(input_path: Path, kind: bt.ErrorKind, message: str, started: float) -> BinarizeResult:
    return BinarizeResult(
        input_path=input_path,
        elapsed_ms=(time.perf_counter() - started) * 1000.0,
        error_kind=kind,
        message=message,
    )


def process_image(
    input_path: os.PathLike[str] | str,
    *,
    use_otsu: bool = True,
    threshold: int = DEFAULT_THRESHOLD,
    show_result: bool = False,
) -> BinarizeResult:
    """Binarize ``input_path`` and write ``binary_<stem>.png`` beside it.

    Never raises: every failure, including a preview that cannot be
    displayed, is logged and reported through the returned result's
    ``error_kind``. A failed preview leaves the written PNG in place.
    """
    started = time.perf_counter()
    path = Path(input_path)
    try:
        path = bt.validate_input_path(path)
        color = bt.load_color_image(path)
        gray = bt.to_grayscale(color)
        binary = bt.binarize(gray, use_otsu=use_otsu, threshold=threshold)

        output_path = bt.derive_output_path(path)
        bt.save_png(binary.image, output_path)
        written = bt.verify_output(output_path)
        elapsed_ms = (time.perf_counter() - started) * 1000.0

        logger.debug("Wrote %d bytes to %s", written, output_path)
        print(f"Input image:  {path.resolve()}")
        print(f"Image size:   {color.width}x{color.height}")
        print(f"Threshold:    {binary.threshold} ({binary.method.value})")
        print(f"Output image: {output_path.resolve()}")
        print(f"Processing time: {elapsed_ms:.2f} ms")

        if show_result:
            binarize_viewer.show_results(color, binary.image, binary.threshold, binary.method, title=path.name)
    except bt.BinarizeError as exc:
        if isinstance(exc, bt.UnsupportedFormatError):
            logger.error("Unsupported file extension: '%s'", path.suffix)
        logger.error("%s", exc)
        return _failure(path, exc.kind, str(exc), started)
    except (cv2.error, OSError, Image.DecompressionBombError) as exc:
        logger.error("Image library error while processing %s: %s", path, exc)
        return _failure(path, bt.ErrorKind.LIBRARY_ERROR, str(exc), started)
    except Exception as exc:  # noqa: BLE001 - report every failure through the result
        logger.error("Unknown error while processing %s: %s", path, exc, exc_info=True)
        return _failure(path, bt.ErrorKind.UNKNOWN, str(exc), started)

    return BinarizeResult(
        input_path=path,
        output_path=output_path.resolve(),
        threshold=binary.threshold,
        method=binary.method,
        size=binary.image.size,
        elapsed_ms=elapsed_ms,
    )


def binarize_jpeg(
    input_path: os.PathLike[str] | str,
    *,
    use_otsu: bool = True,
    threshold: int = DEFAULT_THRESHOLD,
    show_result: bool = False,
) -> str:
    """Return the absolute output path, or an empty string if the conversion failed."""
    result = process_image(input_path, use_otsu=use_otsu, threshold=threshold, show_result=show_result)
    return str(result.output_path) if result.ok else ""


def _threshold_arg(value: str) -> int:
    try:
        threshold = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError("threshold must be an integer between 0 and 255") from None
    if not 0 <= threshold <= 255:
        raise argparse.ArgumentTypeError("threshold must be between 0 and 255")
    return threshold


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Convert a JPEG image to a black-and-white PNG (binary_<name>.png)",
    )
    parser.add_argument(
        "input",
        type=Path,
        nargs="?",
        default=DEFAULT_INPUT,
        help=f"Path to the input .jpg/.jpeg image (default: {DEFAULT_INPUT})",
    )
    parser.add_argument(
        "--threshold",
        type=_threshold_arg,
        default=None,
        help="Fixed 0-255 threshold. If omitted, Otsu's method picks one.",
    )
    parser.add_argument("--show", action="store_true", help="Display the original and the result")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    result = process_image(
        args.input,
        use_otsu=args.threshold is None,
        threshold=DEFAULT_THRESHOLD if args.threshold is None else args.threshold,
        show_result=args.show,
    )
    if not result.ok:
        print("Image processing failed.", file=sys.stderr)
        return 1
    print("Image processing finished.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
