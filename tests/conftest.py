"""Shared fixtures: small synthetic JPEGs written to a temporary directory."""

from pathlib import Path

import pytest
from PIL import Image, ImageDraw

DARK = (30, 30, 30)
BRIGHT = (220, 220, 220)


def write_two_tone_jpeg(path: Path, size=(64, 48)) -> Path:
    """Left half dark, right half bright."""
    img = Image.new("RGB", size, DARK)
    ImageDraw.Draw(img).rectangle((size[0] // 2, 0, size[0], size[1]), fill=BRIGHT)
    img.save(path, format="JPEG", quality=95)
    return path


@pytest.fixture
def sample_jpeg(tmp_path: Path) -> Path:
    return write_two_tone_jpeg(tmp_path / "sample.jpg")


@pytest.fixture
def gradient_jpeg(tmp_path: Path) -> Path:
    img = Image.linear_gradient("L").resize((96, 64)).convert("RGB")
    path = tmp_path / "gradient.jpeg"
    img.save(path, format="JPEG", quality=90)
    return path
