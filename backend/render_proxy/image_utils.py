"""Screenshot encoding for render responses."""
import base64
import io
from typing import Optional

from PIL import Image

JPEG_QUALITY = 75


def to_jpeg(png: bytes, width: int) -> bytes:
    """
    Re-encode a full-page PNG capture as JPEG no wider than ``width``.

    The capture is taken at device scale 1, so ``width`` is normally the
    render viewport width and only oversized pages get scaled down.
    """
    img = Image.open(io.BytesIO(png))

    w, h = img.size
    if w > width:
        img = img.resize((width, round(h * width / w)), Image.LANCZOS)

    # Transparent regions come out white, as they look on the page
    rgba = img.convert("RGBA")
    flat = Image.new("RGB", rgba.size, "white")
    flat.paste(rgba, mask=rgba)

    buf = io.BytesIO()
    flat.save(buf, format="JPEG", quality=JPEG_QUALITY, optimize=True)
    return buf.getvalue()


def encode_screenshot(png: bytes, jpeg_width: Optional[int] = None) -> tuple[str, str]:
    """Return (base64, media_type); JPEG when ``jpeg_width`` is given."""
    if jpeg_width:
        return base64.b64encode(to_jpeg(png, jpeg_width)).decode(), "image/jpeg"
    return base64.b64encode(png).decode(), "image/png"
