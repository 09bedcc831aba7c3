"""Face redaction: black boxes over detected faces before an image leaves the server.

Both call sites (the analysis response and generative request preprocessing)
go through ``redact_faces``. Redaction is fail-open: if the image cannot be
decoded or re-encoded the original bytes come back and the failure is logged
and counted so it can be alerted on.
"""
import io
import logging
import math
import threading
from typing import Optional, Sequence

from PIL import Image, ImageDraw, JpegImagePlugin
from pydantic import BaseModel, field_validator

logger = logging.getLogger(__name__)

FILL = "black"
MIN_VERTICES = 4
ORIENTATION_TAG = 0x0112


class Vertex(BaseModel):
    x: int = 0
    y: int = 0

    @field_validator("x", "y", mode="before")
    @classmethod
    def _missing_as_zero(cls, v):
        # Vision omits zero-valued coordinates
        if v is None or isinstance(v, bool):
            return 0
        try:
            return int(v)
        except (TypeError, ValueError):
            return 0


class FaceRegion(BaseModel):
    vertices: Optional[list[Vertex]] = None


Box = tuple[int, int, int, int]

_failures = 0
_failures_lock = threading.Lock()


def redaction_failures() -> int:
    """Number of fail-open passthroughs since process start."""
    return _failures


def _record_failure() -> None:
    global _failures
    with _failures_lock:
        _failures += 1


def region_bounds(region: FaceRegion, scale: tuple[float, float] = (1.0, 1.0)) -> Optional[Box]:
    """Axis-aligned bounding box of a face polygon, or None if it is malformed.

    Min and max are taken per axis over every vertex; vertex order is not
    assumed. Scaled boxes are rounded outward so they never shrink.
    """
    vertices = region.vertices
    if not vertices or len(vertices) < MIN_VERTICES:
        return None
    xs = [v.x for v in vertices]
    ys = [v.y for v in vertices]
    sx, sy = scale
    if (sx, sy) == (1.0, 1.0):
        return min(xs), min(ys), max(xs), max(ys)
    return (
        math.floor(min(xs) * sx),
        math.floor(min(ys) * sy),
        math.ceil(max(xs) * sx),
        math.ceil(max(ys) * sy),
    )


def _drawable_copy(img: Image.Image) -> tuple[Image.Image, object]:
    """Copy of ``img`` that can take an opaque black fill, and the fill to use."""
    out = img.copy()
    if out.mode != "P":
        return out, FILL
    try:
        return out, out.palette.getcolor((0, 0, 0), out)
    except ValueError:
        # palette is full and has no black
        return out.convert("RGBA" if "transparency" in out.info else "RGB"), FILL


def redact_with_boxes(img: Image.Image, boxes: Sequence[Box]) -> Image.Image:
    out, fill = _drawable_copy(img)
    draw = ImageDraw.Draw(out)
    for box in boxes:
        # inclusive of both corners
        draw.rectangle(box, fill=fill)
    return out


def _orientation_exif(original: Image.Image) -> Optional[Image.Exif]:
    """EXIF holding only the source orientation; thumbnails, GPS and the rest are dropped."""
    try:
        orientation = original.getexif().get(ORIENTATION_TAG)
    except (ValueError, SyntaxError, OSError):
        return None
    if orientation is None:
        return None
    exif = Image.Exif()
    exif[ORIENTATION_TAG] = orientation
    return exif


def _encode_like(original: Image.Image, img: Image.Image) -> bytes:
    """Encode ``img`` in the format ``original`` was decoded from."""
    fmt = original.format or "PNG"
    params = {}
    if fmt in ("JPEG", "MPO"):
        # reuse the source quantization so untouched areas stay close to the input
        params["qtables"] = getattr(original, "quantization", None)
        params["subsampling"] = JpegImagePlugin.get_sampling(original)
    if "icc_profile" in original.info:
        params["icc_profile"] = original.info["icc_profile"]
    exif = _orientation_exif(original)
    if exif is not None:
        params["exif"] = exif
    buf = io.BytesIO()
    img.save(buf, format=fmt, **params)
    return buf.getvalue()


def redact_faces(
    image: bytes,
    faces: Optional[Sequence[FaceRegion]],
    source_size: Optional[tuple[int, int]] = None,
) -> bytes:
    """Return ``image`` with an opaque black box over every face region.

    ``source_size`` is the (width, height) of the image the faces were
    detected on, when it differs from ``image``. Without faces the input is
    returned untouched. Never raises; on any codec or drawing error the
    input is returned unredacted.
    """
    if not faces:
        return image
    try:
        with Image.open(io.BytesIO(image)) as src:
            src.load()
            width, height = src.size
            scale = (1.0, 1.0)
            if source_size and tuple(source_size) != (width, height):
                scale = (width / source_size[0], height / source_size[1])
            boxes = [b for b in (region_bounds(f, scale) for f in faces) if b is not None]
            if not boxes:
                return image
            red = redact_with_boxes(src, boxes)
            out = _encode_like(src, red)
        logger.debug("redacted %d face(s) on %dx%d image", len(boxes), width, height)
        return out
    except Exception:
        _record_failure()
        logger.error("Face redaction failed, returning unredacted image", exc_info=True)
        return image
