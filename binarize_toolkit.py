"""Helpers that turn a JPEG photo into a black-and-white PNG.

The module exposes one small function per step of the conversion:
* Input path validation and output path derivation
* Decoding and grayscale conversion
* Otsu or fixed-value binarization
* PNG encoding with a post-write check

Decoding, colour conversion and encoding are done by Pillow; the Otsu
threshold is computed by OpenCV. The functions raise ``BinarizeError``
subclasses so a CLI or another project can decide how to report them.
"""
from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from pathlib import Path

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

SUPPORTED_EXTENSIONS = (".jpg", ".jpeg")
OUTPUT_PREFIX = "binary_"
OUTPUT_SUFFIX = ".png"
PNG_COMPRESS_LEVEL = 5
WHITE = 255
BLACK = 0


class ThresholdMethod(str, enum.Enum):
    OTSU = "Otsu"
    FIXED = "fixed"


class ErrorKind(str, enum.Enum):
    UNSUPPORTED_FORMAT = "unsupported-format"
    FILE_NOT_FOUND = "file-not-found"
    DECODE_FAILURE = "decode-failure"
    INVALID_THRESHOLD = "invalid-threshold"
    ENCODE_FAILURE = "encode-failure"
    OUTPUT_NOT_CREATED = "output-not-created"
    LIBRARY_ERROR = "library-error"
    UNKNOWN = "unknown"


class BinarizeError(Exception):
    """Base class for failures of a single conversion."""

    kind = ErrorKind.UNKNOWN


class UnsupportedFormatError(BinarizeError):
    kind = ErrorKind.UNSUPPORTED_FORMAT


class InputNotFoundError(BinarizeError):
    kind = ErrorKind.FILE_NOT_FOUND


class ImageDecodeError(BinarizeError):
    kind = ErrorKind.DECODE_FAILURE


class InvalidThresholdError(BinarizeError, ValueError):
    kind = ErrorKind.INVALID_THRESHOLD


class ImageEncodeError(BinarizeError):
    kind = ErrorKind.ENCODE_FAILURE


class OutputNotCreatedError(BinarizeError):
    kind = ErrorKind.OUTPUT_NOT_CREATED


class DisplayError(BinarizeError):
    kind = ErrorKind.LIBRARY_ERROR


@dataclass
class ThresholdResult:
    """A binarized image together with the threshold that produced it."""

    image: Image.Image
    threshold: int
    method: ThresholdMethod


def derive_output_path(input_path: os.PathLike[str] | str) -> Path:
    """Return ``<input_dir>/binary_<stem>.png`` for ``input_path``."""
    path = Path(input_path)
    return path.with_name(f"{OUTPUT_PREFIX}{path.stem}{OUTPUT_SUFFIX}")


def validate_input_path(input_path: os.PathLike[str] | str) -> Path:
    """Check the extension first, then that the file exists."""
    path = Path(input_path)
    # Case-sensitive: ".JPG" is rejected.
    if path.suffix not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFormatError(
            f"Unsupported format '{path.suffix or '<none>'}'; expected one of {', '.join(SUPPORTED_EXTENSIONS)}"
        )
    if not path.is_file():
        raise InputNotFoundError(f"File not found: {path}")
    return path


def load_color_image(path: os.PathLike[str] | str) -> Image.Image:
    """Decode ``path`` as an RGB image and release the file handle."""
    try:
        with Image.open(path) as img:
            img.load()
            color = img.convert("RGB")
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise ImageDecodeError(f"Cannot read image {path}: {exc}") from exc

    width, height = color.size
    if width == 0 or height == 0:
        raise ImageDecodeError(f"Cannot read image {path}: empty image")
    return color


def to_grayscale(img: Image.Image) -> Image.Image:
    # ITU-R 601-2 luma, the same weights as OpenCV's BGR2GRAY.
    return img.convert("L")


def compute_otsu_threshold(gray: Image.Image) -> int:
    """Return the Otsu threshold of an ``L`` mode image."""
    if gray.mode != "L":
        raise ValueError(f"Otsu threshold needs an 'L' image; got mode {gray.mode}")
    pixels = np.asarray(gray, dtype=np.uint8)
    threshold, _ = cv2.threshold(pixels, 0, WHITE, cv2.THRESH_BINARY | cv2.THRESH_OTSU)
    return int(threshold)


def apply_threshold(gray: Image.Image, threshold: int) -> Image.Image:
    """Map pixels strictly above ``threshold`` to white and the rest to black."""
    if isinstance(threshold, bool) or not isinstance(threshold, int):
        raise InvalidThresholdError(f"threshold must be an integer; got {threshold!r}")
    if not 0 <= threshold <= 255:
        raise InvalidThresholdError(f"threshold must be between 0 and 255; got {threshold}")
    return gray.point(lambda p: WHITE if p > threshold else BLACK)


def binarize(gray: Image.Image, *, use_otsu: bool = True, threshold: int = 127) -> ThresholdResult:
    if use_otsu:
        threshold = compute_otsu_threshold(gray)
        method = ThresholdMethod.OTSU
    else:
        method = ThresholdMethod.FIXED
    return ThresholdResult(image=apply_threshold(gray, threshold), threshold=threshold, method=method)


def save_png(
    img: Image.Image,
    output_path: os.PathLike[str] | str,
    compress_level: int = PNG_COMPRESS_LEVEL,
):
    """Encode ``img`` as PNG; a failed write leaves no file behind."""
    path = Path(output_path)
    try:
        img.save(path, format="PNG", compress_level=compress_level)
    except (OSError, ValueError) as exc:
        path.unlink(missing_ok=True)
        raise ImageEncodeError(f"Cannot save image {path}: {exc}") from exc


def verify_output(output_path: os.PathLike[str] | str) -> int:
    """Return the size in bytes of the written file; an empty file is removed."""
    path = Path(output_path)
    size = path.stat().st_size if path.is_file() else 0
    if size == 0:
        path.unlink(missing_ok=True)
        raise OutputNotCreatedError(f"Critical: output not created: {path}")
    return size
