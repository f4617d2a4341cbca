"""Shared fixtures."""

from __future__ import annotations

import io
import zipfile
import xml.etree.ElementTree as ET

import pytest
from PIL import Image

W = "{http://schemas.openxmlformats.org/wordprocessingml/2006/main}"


def make_png(width: int = 40, height: int = 20, color: str = "red") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


def read_part(data: bytes, name: str) -> str:
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return zf.read(name).decode("utf-8")


def parse_part(data: bytes, name: str) -> ET.Element:
    return ET.fromstring(read_part(data, name))


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()
