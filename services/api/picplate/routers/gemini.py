import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from google.genai import types
from starlette.concurrency import run_in_threadpool

from .. import prompts
from ..clients import get_genai_client, get_vision_client
from ..logging_config import log_event
from ..schemas import ImagesRequest, RecipeRequest, RestaurantRequest
from ..settings import settings
from ..utils.face_detection import detect_and_redact, detection_available
from ..utils.images import b64decode_image, b64encode_image, guess_mime_type

router = APIRouter(prefix="/api/gemini", tags=["gemini"])
logger = logging.getLogger(__name__)

MODEL_UNAVAILABLE = {
    "error": "Gemini model not available. Please check server logs for details.",
    "details": "Model initialization failed.",
}


async def build_image_part(processed_image: Optional[str], image_base64: Optional[str], vision_client) -> Optional[types.Part]:
    """Inline image part for a generative request, faces redacted.

    ``processed_image`` comes back from /api/vision already redacted and is
    attached as-is. A raw ``image_base64`` is redacted here first and is not
    attached at all when no face detector is available.
    """
    if processed_image:
        data = b64decode_image(processed_image)
    elif image_base64:
        if not detection_available(vision_client):
            logger.warning("Face detection unavailable, not attaching raw image")
            return None
        raw = b64decode_image(image_base64)
        data = await run_in_threadpool(detect_and_redact, raw, vision_client)
    else:
        return None
    return types.Part.from_bytes(data=data, mime_type=guess_mime_type(data))


async def _parts_with_image(prompt: str, req, vision_client, purpose: str) -> list:
    parts = [types.Part.from_text(text=prompt)]
    try:
        image_part = await build_image_part(req.processed_image, req.image_base64, vision_client)
    except ValueError:
        # continue without the image
        logger.error("Error processing image for %s", purpose, exc_info=True)
        image_part = None
    if image_part is not None:
        parts.append(image_part)
        logger.info("Added image to %s prompt", purpose)
    return parts


def _error_detail(prefix: str, e: Exception) -> dict:
    return {"error": f"{prefix}: {e}", "details": type(e).__name__}


@router.post("/generate-recipe")
async def generate_recipe(req: RecipeRequest, client=Depends(get_genai_client), vision_client=Depends(get_vision_client)):
    log_event(
        "Incoming Gemini request - generate-recipe",
        route="/api/gemini/generate-recipe",
        requestBody={"labels": req.labels, "emotions": req.emotions, "temperature": req.temperature},
    )
    if not req.labels or not isinstance(req.labels, list):
        raise HTTPException(status_code=400, detail="Labels are required for generation.")
    if client is None:
        raise HTTPException(status_code=500, detail=MODEL_UNAVAILABLE)

    try:
        prompt = prompts.recipe_prompt(
            prompts.label_texts(req.labels),
            emotions=req.emotions if req.use_emotions else None,
            colors=req.colors if req.use_colors else None,
        )
        logger.debug("Sending recipe prompt to Gemini: %s", prompt)
        parts = await _parts_with_image(prompt, req, vision_client, "recipe")
        response = await client.aio.models.generate_content(
            model=settings.GEMINI_TEXT_MODEL,
            contents=[types.Content(role="user", parts=parts)],
            config=types.GenerateContentConfig(
                temperature=req.temperature if req.temperature is not None else 1.0,
                max_output_tokens=2048,
            ),
        )
        text = response.text or "No recipe generated."
    except Exception as e:
        logger.error("Gemini API error (recipe generation)", exc_info=True)
        log_event("Gemini generate-recipe failed", error=str(e))
        raise HTTPException(status_code=500, detail=_error_detail("Failed to generate suggestion", e))

    log_event("Gemini recipe generated successfully", responsePreview=text[:100])
    return {"recipe": text}


@router.post("/generate-restaurants")
async def generate_restaurants(req: RestaurantRequest, client=Depends(get_genai_client), vision_client=Depends(get_vision_client)):
    log_event(
        "Incoming Gemini request - generate-restaurants",
        route="/api/gemini/generate-restaurants",
        requestBody={"dishName": req.dish_name, "userLocation": req.user_location},
    )
    if not req.dish_name or not req.user_location:
        raise HTTPException(status_code=400, detail="Dish name and user location are required.")
    if client is None:
        raise HTTPException(status_code=500, detail=MODEL_UNAVAILABLE)

    try:
        prompt = prompts.restaurant_prompt(req.dish_name, req.user_location)
        parts = await _parts_with_image(prompt, req, vision_client, "restaurant")
        response = await client.aio.models.generate_content(
            model=settings.GEMINI_TEXT_MODEL,
            contents=[types.Content(role="user", parts=parts)],
            config=types.GenerateContentConfig(temperature=0.2, max_output_tokens=512),
        )
        text = response.text or "No restaurant suggestions generated."
    except Exception as e:
        logger.error("Gemini API error (restaurant generation)", exc_info=True)
        log_event("Gemini generate-restaurants failed", error=str(e))
        raise HTTPException(status_code=500, detail=_error_detail("Failed to generate restaurant suggestions", e))

    log_event("Gemini restaurant suggestions generated successfully", responsePreview=text[:100])
    return {"restaurants": text}


@router.post("/generate-images")
async def generate_images(req: ImagesRequest, client=Depends(get_genai_client)):
    log_event("Incoming Gemini request - generate-images", route="/api/gemini/generate-images")
    if not req.recipe_text:
        raise HTTPException(status_code=400, detail="Recipe text is required for image generation.")
    if client is None:
        raise HTTPException(status_code=500, detail={
            "error": "Image generation model not available. Please check server logs for details.",
            "details": "Model initialization failed.",
        })

    try:
        response = await client.aio.models.generate_images(
            model=settings.IMAGEN_MODEL,
            prompt=prompts.dish_image_prompt(req.recipe_text),
            config=types.GenerateImagesConfig(number_of_images=4),
        )
        images = [
            {"mimeType": g.image.mime_type or "image/png", "data": b64encode_image(g.image.image_bytes)}
            for g in response.generated_images or []
            if g.image is not None and g.image.image_bytes
        ]
    except Exception as e:
        logger.error("Image generation API error", exc_info=True)
        log_event("Gemini generate-images failed", error=str(e))
        raise HTTPException(status_code=500, detail=_error_detail("Failed to generate images", e))

    log_event("Gemini images generated successfully", imageCount=len(images))
    return {"images": images}
