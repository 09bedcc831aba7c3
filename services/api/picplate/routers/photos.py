import logging

import httpx
from fastapi import APIRouter, HTTPException

from ..clients import PHOTOS_MEDIA_ITEMS_URL, google_get
from ..schemas import PhotosRequest

router = APIRouter(prefix="/api/photos", tags=["photos"])
logger = logging.getLogger(__name__)

PAGE_SIZE = 20


@router.post("")
async def list_photos(req: PhotosRequest):
    if not req.access_token or req.access_token == "dummy-token":
        logger.info("No valid Google access token, skipping Google Photos fetch")
        return {"photos": []}
    try:
        response = await google_get(PHOTOS_MEDIA_ITEMS_URL, req.access_token, params={"pageSize": PAGE_SIZE})
    except httpx.HTTPError as e:
        logger.error("Error fetching Google Photos: %s", e)
        raise HTTPException(status_code=500, detail="Failed to fetch Google Photos")
    return {"photos": response.json().get("mediaItems", [])}
