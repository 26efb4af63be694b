"""Tkinter windows for comparing the original photo with its binarized version."""
from __future__ import annotations

from typing import Tuple

from PIL import Image, ImageDraw

from binarize_toolkit import DisplayError, ThresholdMethod

MAX_DISPLAY_HEIGHT = 800
TEXT_ORIGIN = (10, 10)
TEXT_LINE_SPACING = 20
THRESHOLD_TEXT_COLOR = (255, 0, 0)
SIZE_TEXT_COLOR = (0, 200, 0)


def compute_display_scale(height: int, max_height: int = MAX_DISPLAY_HEIGHT) -> float:
    """Return the factor that brings ``height`` down to ``max_height``; never above 1.0."""
    if height <= 0 or max_height <= 0:
        raise ValueError(f"height and max_height must be positive; got {height}, {max_height}")
    return min(1.0, max_height / height)


def display_size(size: Tuple[int, int], max_height: int = MAX_DISPLAY_HEIGHT) -> Tuple[int, int]:
    width, height = size
    if compute_display_scale(height, max_height) == 1.0:
        return width, height
    # Integer arithmetic so the height lands exactly on max_height.
    return max(1, width * max_height // height), max_height


def fit_for_display(img: Image.Image, max_height: int = MAX_DISPLAY_HEIGHT) -> Image.Image:
    target = display_size(img.size, max_height)
    if target == img.size:
        return img
    return img.resize(target, resample=Image.LANCZOS)


def annotate_result(
    binary: Image.Image,
    threshold: int,
    method: ThresholdMethod,
    size: Tuple[int, int] | None = None,
) -> Image.Image:
    """Return an RGB copy of ``binary`` with the threshold and output size drawn on it.

    ``size`` is the size reported in the caption; it defaults to the size of
    ``binary`` and lets a downscaled preview still show the real output size.
    """
    width, height = size or binary.size
    annotated = binary.convert("RGB")
    draw = ImageDraw.Draw(annotated)
    x, y = TEXT_ORIGIN
    draw.text((x, y), f"Threshold: {threshold} ({method.value})", fill=THRESHOLD_TEXT_COLOR)
    draw.text((x, y + TEXT_LINE_SPACING), f"Size: {width}x{height}", fill=SIZE_TEXT_COLOR)
    return annotated


def show_results(
    original: Image.Image,
    binary: Image.Image,
    threshold: int,
    method: ThresholdMethod,
    title: str,
    max_height: int = MAX_DISPLAY_HEIGHT,
):
    """Open the original and the annotated result side by side and wait for a key press.

    Raises ``DisplayError`` when Tk is unavailable or no display can be opened.
    """
    try:
        import tkinter as tk

        from PIL import ImageTk
    except ImportError as exc:
        raise DisplayError(f"Cannot open display windows: {exc}") from exc

    preview = annotate_result(fit_for_display(binary, max_height), threshold, method, size=binary.size)

    try:
        root = tk.Tk()
    except tk.TclError as exc:
        raise DisplayError(f"Cannot open display windows: {exc}") from exc

    try:
        root.withdraw()
        photos = []
        for caption, img in (
            (f"Original - {title}", fit_for_display(original, max_height)),
            (f"Binary - {title}", preview),
        ):
            window = tk.Toplevel(root)
            window.title(caption)
            window.resizable(True, True)
            photo = ImageTk.PhotoImage(img, master=window)
            photos.append(photo)  # Tk only holds a weak reference
            tk.Label(window, image=photo).pack(fill="both", expand=True)
            window.bind("<Key>", lambda _event: root.quit())
            window.protocol("WM_DELETE_WINDOW", root.quit)
            window.focus_force()
        root.mainloop()
    except tk.TclError as exc:
        raise DisplayError(f"Display window failed: {exc}") from exc
    finally:
        root.destroy()
