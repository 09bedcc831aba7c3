import logging

import httpx
from fastapi import APIRouter, HTTPException

from ..clients import fetch_image_bytes
from ..schemas import ImageProxyRequest
from ..utils.images import b64encode_image

router = APIRouter(prefix="/api/imageProxy", tags=["imageProxy"])
logger = logging.getLogger(__name__)


@router.post("/fetch")
async def fetch_image(req: ImageProxyRequest):
    """Fetch a Google Photos image server-side and return it as base64."""
    if not req.image_url or not req.access_token:
        raise HTTPException(status_code=400, detail={"error": "Missing required parameters", "success": False})
    try:
        try:
            data = await fetch_image_bytes(req.image_url, req.access_token)
        except httpx.HTTPError:
            logger.info("First attempt failed, retrying without query parameters")
            data = await fetch_image_bytes(req.image_url.split("?")[0], req.access_token)
    except (httpx.HTTPError, ValueError) as e:
        logger.error("Error fetching image: %s", e)
        response = getattr(e, "response", None)
        raise HTTPException(status_code=500, detail={
            "error": "Failed to fetch image",
            "details": {
                "message": str(e),
                "status": response.status_code if response is not None else None,
                "statusText": response.reason_phrase if response is not None else None,
            },
            "success": False,
        })
    return {"success": True, "imageData": b64encode_image(data)}
