"""Google API clients, built lazily and exposed as FastAPI dependencies."""
import logging
import os
from functools import lru_cache

import httpx
from google import genai
from google.cloud import vision

from .settings import settings

logger = logging.getLogger(__name__)

PHOTOS_MEDIA_ITEMS_URL = "https://photoslibrary.googleapis.com/v1/mediaItems"
USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"


@lru_cache
def get_vision_client():
    """Vision client, or None when credentials are not available."""
    try:
        if settings.VISION_KEY_FILE and os.path.exists(settings.VISION_KEY_FILE):
            return vision.ImageAnnotatorClient.from_service_account_file(settings.VISION_KEY_FILE)
        return vision.ImageAnnotatorClient()
    except Exception:
        logger.error("Could not initialise Vision client", exc_info=True)
        return None


@lru_cache
def get_genai_client():
    """Gemini/Imagen client: API key when configured, Vertex AI otherwise."""
    try:
        if settings.GEMINI_API_KEY:
            return genai.Client(api_key=settings.GEMINI_API_KEY)
        return genai.Client(vertexai=True, project=settings.GCP_PROJECT, location=settings.GCP_LOCATION)
    except Exception:
        logger.error("Could not initialise Gemini client", exc_info=True)
        return None


async def google_get(url: str, access_token: str, params: dict | None = None) -> httpx.Response:
    """GET a Google API resource with the user's OAuth token; raises on HTTP errors."""
    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT, follow_redirects=True) as client:
        response = await client.get(url, params=params, headers={"Authorization": f"Bearer {access_token}"})
        response.raise_for_status()
        return response


async def fetch_image_bytes(url: str, access_token: str) -> bytes:
    response = await google_get(url, access_token)
    if len(response.content) > settings.MAX_IMAGE_BYTES:
        raise ValueError("Image exceeds the maximum allowed size")
    return response.content
