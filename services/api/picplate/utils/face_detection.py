import logging
from collections.abc import Mapping
from typing import Any, Iterable, List

from google.cloud import vision
import numpy as np

from ..settings import settings
from .redact import FaceRegion, Vertex, redact_faces

logger = logging.getLogger(__name__)


class FaceDetectionError(RuntimeError):
    pass


def _get(obj: Any, *names: str) -> Any:
    # JSON dicts use camelCase or snake_case, protobuf messages use attributes
    for name in names:
        if isinstance(obj, Mapping):
            if name in obj:
                return obj[name]
        elif hasattr(obj, name):
            return getattr(obj, name)
    return None


def face_regions_from_annotations(annotations: Iterable[Any] | None) -> List[FaceRegion]:
    """Turn Vision face annotations (protobuf or JSON) into FaceRegions.

    A face without a usable polygon becomes a region with no vertices, which
    the redactor skips.
    """
    regions = []
    for face in annotations or []:
        poly = _get(face, "boundingPoly", "bounding_poly")
        raw = _get(poly, "vertices") if poly is not None else None
        if raw is None:
            regions.append(FaceRegion())
            continue
        vertices = [Vertex(x=_get(v, "x"), y=_get(v, "y")) for v in raw]
        regions.append(FaceRegion(vertices=vertices))
    return regions


def detect_faces_vision(client, image: bytes) -> List[FaceRegion]:
    """Detect faces with Google Vision."""
    response = client.face_detection(image=vision.Image(content=image))
    if response.error.message:
        raise FaceDetectionError(response.error.message)
    return face_regions_from_annotations(response.face_annotations)


def relative_box_to_region(bbox, iw: int, ih: int) -> FaceRegion:
    """4-vertex pixel polygon for a Mediapipe relative bounding box."""
    x, y, w, h = int(bbox.xmin * iw), int(bbox.ymin * ih), int(bbox.width * iw), int(bbox.height * ih)
    return FaceRegion(vertices=[
        Vertex(x=x, y=y), Vertex(x=x + w, y=y), Vertex(x=x + w, y=y + h), Vertex(x=x, y=y + h),
    ])


def detect_faces_local(image: bytes) -> List[FaceRegion]:
    """Detect faces using Mediapipe, in the pixel space of the undecoded-orientation image."""
    import cv2
    import mediapipe as mp

    # Pillow does not apply EXIF rotation, so neither may the detector
    arr = cv2.imdecode(np.frombuffer(image, dtype=np.uint8), cv2.IMREAD_COLOR | cv2.IMREAD_IGNORE_ORIENTATION)
    if arr is None:
        raise FaceDetectionError("Could not decode image")
    image_rgb = cv2.cvtColor(arr, cv2.COLOR_BGR2RGB)
    ih, iw, _ = arr.shape

    with mp.solutions.face_detection.FaceDetection(model_selection=1, min_detection_confidence=settings.FACE_MIN_CONFIDENCE) as face_detection:
        results = face_detection.process(image_rgb)
        return [
            relative_box_to_region(detection.location_data.relative_bounding_box, iw, ih)
            for detection in results.detections or []
        ]


def detection_available(vision_client=None) -> bool:
    return settings.FACE_DETECTOR == "mediapipe" or vision_client is not None


def detect_faces(image: bytes, vision_client=None) -> List[FaceRegion]:
    """Run the configured detector. Any detector failure counts as zero faces."""
    try:
        if settings.FACE_DETECTOR == "mediapipe":
            return detect_faces_local(image)
        if vision_client is None:
            logger.warning("No Vision client configured, face detection skipped")
            return []
        return detect_faces_vision(vision_client, image)
    except Exception:
        logger.error("Face detection failed, continuing as if no faces were found", exc_info=True)
        return []


def detect_and_redact(image: bytes, vision_client=None) -> bytes:
    faces = detect_faces(image, vision_client)
    logger.info("Detected %d face(s) for redaction", len(faces))
    return redact_faces(image, faces)
