from __future__ import annotations

import sys
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from newsroom_stylizer_backend.render.source_image import SourceImage  # noqa: E402


def _encode(image: Image.Image, fmt: str = "PNG", **params) -> bytes:
    buf = BytesIO()
    image.save(buf, fmt, **params)
    return buf.getvalue()


@pytest.fixture
def image_bytes():
    def _make(width=80, height=60, color=(200, 30, 30), mode="RGB", fmt="PNG", **params):
        return _encode(Image.new(mode, (width, height), color), fmt, **params)

    return _make


@pytest.fixture
def split_source():
    """100x50 source: left half red, right half blue."""
    img = Image.new("RGB", (100, 50), (0, 0, 255))
    img.paste((255, 0, 0), (0, 0, 50, 50))
    return SourceImage(img)


@pytest.fixture
def solid_source():
    def _make(width=800, height=600, color=(10, 20, 30)):
        return SourceImage(Image.new("RGB", (width, height), color))

    return _make


@pytest.fixture
def truncated_ihdr_png(image_bytes):
    """Valid PNG whose IHDR chunk length is shortened to 5 bytes."""
    data = bytearray(image_bytes(20, 10))
    data[8:12] = (5).to_bytes(4, "big")
    return bytes(data)
