"""Image loading for the converter.

Images reach the document as finished bytes plus a content type and pixel
dimensions (:class:`LoadedImage`).  :class:`ImageLoader` produces them from
local files and ``data:`` URIs; remote URLs are not fetched.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError

from md2docx.exceptions import ImageLoadError

logger = logging.getLogger(__name__)

# Used when the bytes cannot be decoded (e.g. SVG)
FALLBACK_SIZE = (300, 200)


@dataclass
class LoadedImage:
    data: bytes
    content_type: str
    width: int   # pixels
    height: int  # pixels


def inspect_image(data: bytes, content_type: str = "") -> LoadedImage:
    """Detect content type and pixel size of *data* with Pillow.

    Undecodable data keeps *content_type* (or ``application/octet-stream``)
    and gets :data:`FALLBACK_SIZE`.
    """
    try:
        with Image.open(io.BytesIO(data)) as im:
            width, height = im.size
            detected = Image.MIME.get(im.format or "", "")
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        logger.debug("Could not decode image data: %s", exc)
        if not content_type and data.lstrip()[:5] in (b"<svg ", b"<?xml"):
            content_type = "image/svg+xml"
        width, height = FALLBACK_SIZE
        return LoadedImage(data, content_type or "application/octet-stream", width, height)
    return LoadedImage(data, detected or content_type or "image/png", width, height)


class ImageLoader:
    """Load image sources referenced from Markdown.

    Parameters
    ----------
    base_path : str or Path, optional
        Directory that relative file paths are resolved against

    """

    def __init__(self, base_path: Optional[Union[str, Path]] = None) -> None:
        self.base_path = Path(base_path) if base_path else Path.cwd()

    def __call__(self, src: str) -> LoadedImage:
        return self.load(src)

    def load(self, src: str) -> LoadedImage:
        if src.startswith(("http://", "https://")):
            raise ImageLoadError("Remote images are not fetched", src)
        if src.startswith("data:"):
            return self._load_data_uri(src)
        return self._load_file(src)

    def _load_data_uri(self, src: str) -> LoadedImage:
        header, sep, payload = src.partition(",")
        if not sep:
            raise ImageLoadError("Invalid data URI", src[:40])
        declared = header[len("data:"):].split(";")[0]
        try:
            if ";base64" in header:
                data = base64.b64decode(payload, validate=True)
            else:
                data = payload.encode("utf-8")
        except (binascii.Error, ValueError) as exc:
            raise ImageLoadError("Invalid base64 image data", src[:40], exc) from exc
        return inspect_image(data, declared)

    def _load_file(self, src: str) -> LoadedImage:
        path = Path(src)
        if not path.is_absolute():
            path = self.base_path / path
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise ImageLoadError(f"Cannot read image {path}", src, exc) from exc
        guessed, _ = mimetypes.guess_type(path.name)
        return inspect_image(data, guessed or "")
