"""Image utilities: QR rendering and upload sniffing."""

import base64
import io

import qrcode
from qrcode.constants import ERROR_CORRECT_M

PNG_DATA_URL_PREFIX = "data:image/png;base64,"


def render_qr_data_url(
    data: str,
    fill_color: str = "#000000",
    back_color: str = "#ffffff",
    box_size: int = 10,
) -> str:
    """Render ``data`` as a PNG QR code and return it as a data URL."""
    qr = qrcode.QRCode(version=None, error_correction=ERROR_CORRECT_M, box_size=box_size, border=2)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color=fill_color, back_color=back_color)

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return PNG_DATA_URL_PREFIX + base64.b64encode(buf.getvalue()).decode("ascii")


def detect_mime_type(image_bytes: bytes) -> str:
    """Detect image MIME type from magic bytes.

    Args:
        image_bytes: Raw image bytes

    Returns:
        MIME type string (e.g., "image/png"), or application/octet-stream
    """
    if len(image_bytes) < 12:
        return "application/octet-stream"

    signatures = [
        (b"\x89PNG\r\n\x1a\n", "image/png"),
        (b"\xff\xd8\xff", "image/jpeg"),
        (b"GIF87a", "image/gif"),
        (b"GIF89a", "image/gif"),
        (b"BM", "image/bmp"),
    ]
    for prefix, mime in signatures:
        if image_bytes.startswith(prefix):
            return mime

    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"

    return "application/octet-stream"
