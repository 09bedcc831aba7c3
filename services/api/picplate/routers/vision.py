import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from google.cloud import vision
from starlette.concurrency import run_in_threadpool

from ..clients import fetch_image_bytes, get_vision_client
from ..logging_config import log_event
from ..schemas import VisionRequest
from ..utils.face_detection import face_regions_from_annotations
from ..utils.images import b64encode_image
from ..utils.redact import redact_faces

router = APIRouter(prefix="/api/vision", tags=["vision"])
logger = logging.getLogger(__name__)

FEATURES = [
    {"type_": vision.Feature.Type.LABEL_DETECTION, "max_results": 10},
    {"type_": vision.Feature.Type.FACE_DETECTION, "max_results": 5},
    {"type_": vision.Feature.Type.IMAGE_PROPERTIES, "max_results": 5},
]
EMOTIONS = ("joy", "sorrow", "anger", "surprise")
REPORTED_LIKELIHOODS = {"VERY_LIKELY", "LIKELY", "POSSIBLE"}


def poly_to_json(poly) -> Optional[Dict[str, Any]]:
    if poly is None or not poly.vertices:
        return None
    return {"vertices": [{"x": v.x, "y": v.y} for v in poly.vertices]}


def face_emotions(face) -> List[str]:
    found = []
    for emotion in EMOTIONS:
        likelihood = getattr(face, f"{emotion}_likelihood")
        if getattr(likelihood, "name", str(likelihood)) in REPORTED_LIKELIHOODS:
            found.append(emotion)
    return found


def summarize_annotations(response) -> Dict[str, Any]:
    """Shape a Vision AnnotateImageResponse into the analysis payload."""
    labels = [
        {"description": label.description, "boundingPoly": poly_to_json(label.bounding_poly)}
        for label in response.label_annotations
    ]
    colors = [
        {"red": c.color.red, "green": c.color.green, "blue": c.color.blue}
        for c in response.image_properties_annotation.dominant_colors.colors
    ]
    emotions: List[str] = []
    face_polys = []
    for face in response.face_annotations:
        emotions.extend(face_emotions(face))
        poly = poly_to_json(face.bounding_poly)
        if poly:
            face_polys.append(poly)
    text = [
        {"description": t.description, "boundingPoly": poly_to_json(t.bounding_poly)}
        for t in response.text_annotations
    ]
    return {
        "labels": labels,
        "colors": colors,
        "emotions": emotions,
        "boundingPolys": {
            "faces": face_polys,
            "labels": [l for l in labels if l["boundingPoly"]],
            "text": text,
        },
        "labelDescriptions": [l["description"] for l in labels],
    }


@router.post("")
async def analyze_image(req: VisionRequest, client=Depends(get_vision_client)):
    if not req.image_url or not req.access_token:
        raise HTTPException(status_code=400, detail="Image URL and access token are required")
    if client is None:
        raise HTTPException(status_code=500, detail="Vision API not available. Please check server logs for details.")

    log_event("Vision API request received", imageUrl=req.image_url)
    try:
        image = await fetch_image_bytes(req.image_url, req.access_token)
        response = await run_in_threadpool(
            client.annotate_image, {"image": {"content": image}, "features": FEATURES}
        )
        if response.error.message:
            raise RuntimeError(response.error.message)

        result = summarize_annotations(response)
        # same faces the analysis found, no second detection pass
        faces = face_regions_from_annotations(response.face_annotations)
        processed = await run_in_threadpool(redact_faces, image, faces)
        result["processedImage"] = b64encode_image(processed)
    except Exception as e:
        logger.error("Vision API error for %s", req.image_url, exc_info=True)
        log_event("Vision API error", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to analyze image")

    log_event(
        "Vision API analysis completed",
        labelsDetected=result["labelDescriptions"],
        emotionsDetected=result["emotions"],
        colorsDetected=len(result["colors"]),
    )
    return result
