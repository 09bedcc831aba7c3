import base64
import binascii
import io

from PIL import Image, UnidentifiedImageError


def guess_mime_type(data: bytes, default: str = "image/jpeg") -> str:
    """MIME type of encoded image bytes, sniffed from the header only."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format
    except (UnidentifiedImageError, OSError, ValueError):
        return default
    if fmt == "MPO":
        # multi-picture JPEGs from phone cameras
        return "image/jpeg"
    return Image.MIME.get(fmt, default) if fmt else default


def b64encode_image(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def b64decode_image(text: str) -> bytes:
    """Decode base64 image data, with or without a ``data:<mime>;base64,`` prefix."""
    if text.startswith("data:") and "," in text:
        text = text.split(",", 1)[1]
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError("Invalid base64 image data") from e
