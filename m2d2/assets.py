"""Asset loading for theme images and markdown pictures.

An asset that cannot be read is "absent": callers get ``None`` and lay the
document out without it.
"""

from __future__ import annotations

import sys
from io import BytesIO
from pathlib import Path

import requests
from PIL import Image

PACKAGE_DIR = Path(__file__).resolve().parent

# A4 with 1" margins: 6.27" x 9.69"; height at 85% for header/footer room
MAX_WIDTH_IN = 6.27
MAX_HEIGHT_IN = 9.69 * 0.85
PIXELS_PER_INCH = 96

# formats python-docx can embed
PICTURE_FORMATS = ("PNG", "JPEG", "GIF", "BMP", "TIFF")


class AssetLoader:
    """Reads asset bytes from local paths or URLs.

    Relative paths are looked up in *base_dir* (the document's folder), then
    in the package directory where theme assets live.
    """

    def __init__(self, base_dir: str | Path | None = None, timeout: int = 15):
        self.base_dir = Path(base_dir) if base_dir else PACKAGE_DIR
        self.timeout = timeout

    def load(self, path: str | None) -> bytes | None:
        if not path:
            return None
        if path.startswith(("http://", "https://")):
            try:
                resp = requests.get(path, timeout=self.timeout)
                resp.raise_for_status()
                return resp.content
            except requests.RequestException as e:
                print(f"  Asset unavailable: {path} ({e})", file=sys.stderr)
                return None
        try:
            p = self._locate(Path(path))
            if p is None:
                return None
            return p.read_bytes()
        except OSError as e:
            print(f"  Asset unavailable: {path} ({e})", file=sys.stderr)
            return None

    def _locate(self, p: Path) -> Path | None:
        if p.is_absolute():
            return p if p.is_file() else None
        for root in (self.base_dir, PACKAGE_DIR):
            if (root / p).is_file():
                return root / p
        return None


def is_picture(data: bytes | None) -> bool:
    """True when *data* is an image in a format Word documents can embed."""
    if not data:
        return False
    try:
        with Image.open(BytesIO(data)) as img:
            return img.format in PICTURE_FORMATS
    except (OSError, ValueError):
        return False


def fit_size(data: bytes) -> tuple[int, int] | None:
    """Return (width, height) in pixels constrained to the A4 content area.

    ``None`` when Pillow cannot identify the image or it cannot be embedded.
    """
    try:
        with Image.open(BytesIO(data)) as img:
            if img.format not in PICTURE_FORMATS:
                return None
            w_px, h_px = img.size
            dpi = img.info.get("dpi", (PIXELS_PER_INCH, PIXELS_PER_INCH))[0] or PIXELS_PER_INCH
    except (OSError, ValueError):
        return None
    w_in = w_px / dpi
    h_in = h_px / dpi
    scale = min(1.0, MAX_WIDTH_IN / w_in, MAX_HEIGHT_IN / h_in)
    return (
        max(1, round(w_in * scale * PIXELS_PER_INCH)),
        max(1, round(h_in * scale * PIXELS_PER_INCH)),
    )
