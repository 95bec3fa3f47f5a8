"""Render the scannable artifact (QR image) for a short code."""

import base64
import logging
from io import BytesIO
from typing import Literal
from urllib.parse import urlparse

import qrcode
import qrcode.constants
import qrcode.image.svg

from scanreview.core.config import settings

logger = logging.getLogger(__name__)

ArtifactFormat = Literal["png", "svg"]

_ERROR_CORRECTION = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}

MEDIA_TYPES: dict[str, str] = {
    "png": "image/png",
    "svg": "image/svg+xml",
}


def build_code_url(short_code: str) -> str:
    """Public review page URL encoded into the printed code."""
    return f"{settings.public_base_url.rstrip('/')}/r/{short_code}"


def is_resolvable_url(url: str, short_code: str) -> bool:
    """Check that ``url`` is an absolute http(s) URL ending in ``/r/<short_code>``."""
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return False
    return parsed.path.endswith(f"/r/{short_code}")


def _make_qr(data: str) -> qrcode.QRCode:  # type: ignore[type-arg]
    qr = qrcode.QRCode(
        version=None,
        error_correction=_ERROR_CORRECTION[settings.qr_error_correction],
        box_size=settings.qr_box_size,
        border=settings.qr_border,
    )
    qr.add_data(data)
    qr.make(fit=True)
    return qr


def render_png(url: str) -> bytes:
    """Render ``url`` as a PNG QR code."""
    img = _make_qr(url).make_image(fill_color="black", back_color="white")
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def render_png_data_url(url: str) -> str:
    """Render ``url`` as a base64 PNG data URL, ready for an <img> tag."""
    img_str = base64.b64encode(render_png(url)).decode()
    return f"data:image/png;base64,{img_str}"


def render_svg(url: str) -> str:
    """Render ``url`` as a standalone SVG document."""
    img = _make_qr(url).make_image(image_factory=qrcode.image.svg.SvgPathImage)
    return img.to_string(encoding="unicode")


def render_artifact(short_code: str, fmt: ArtifactFormat) -> tuple[bytes, str]:
    """Render the artifact for ``short_code`` in ``fmt``.

    Returns:
        Tuple of (content, media_type).
    """
    url = build_code_url(short_code)
    if fmt == "svg":
        content = render_svg(url).encode()
    else:
        content = render_png(url)
    logger.debug("Rendered %s artifact for %s (%d bytes)", fmt, short_code, len(content))
    return content, MEDIA_TYPES[fmt]
