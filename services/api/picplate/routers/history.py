import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import HistoryEntry, User
from ..schemas import HistoryGetRequest, HistoryOut, HistorySaveRequest
from ..utils.images import b64decode_image, guess_mime_type
from ..utils.storage import history_image_path, save_history_image

router = APIRouter(prefix="/api/history", tags=["history"])
logger = logging.getLogger(__name__)


def to_out(entry: HistoryEntry) -> dict:
    return HistoryOut(
        id=entry.id,
        photo_url=entry.photo_url,
        photo_id=entry.photo_id,
        recipe_prompt=entry.recipe_prompt,
        restaurant_prompt=entry.restaurant_prompt,
        timestamp=entry.timestamp.isoformat(),
    ).model_dump(by_alias=True)


@router.post("/save")
def save_history(req: HistorySaveRequest, db: Session = Depends(get_db)):
    if not req.email or not req.recipe_prompt or not req.restaurant_prompt:
        raise HTTPException(status_code=400, detail="Missing required fields.")

    image_url = req.photo_url or ""
    if req.image_data:
        try:
            name = save_history_image(req.email, b64decode_image(req.image_data))
            image_url = f"/api/history/images/{name}"
            logger.info("Stored history image %s", name)
        except (ValueError, OSError):
            # keep the original photo URL
            logger.error("Error storing history image", exc_info=True)

    try:
        if db.get(User, req.email) is None:
            db.add(User(email=req.email, profile={}))
        entry = HistoryEntry(
            id=str(uuid.uuid4()),
            email=req.email,
            photo_url=image_url,
            photo_id=req.photo_id,
            recipe_prompt=req.recipe_prompt,
            restaurant_prompt=req.restaurant_prompt,
        )
        db.add(entry)
        db.commit()
    except Exception:
        db.rollback()
        logger.error("Error saving history", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to save history.")
    return {"message": "History saved successfully.", "id": entry.id}


@router.post("/get")
def get_history(req: HistoryGetRequest, db: Session = Depends(get_db)):
    if not req.email:
        raise HTTPException(status_code=400, detail="Missing email.")
    rows = db.execute(
        select(HistoryEntry)
        .where(HistoryEntry.email == req.email)
        .order_by(HistoryEntry.timestamp.desc())
    ).scalars().all()
    return {"history": [to_out(r) for r in rows]}


@router.delete("/delete/{email}/{history_id}")
def delete_history(email: str, history_id: str, db: Session = Depends(get_db)):
    entry = db.get(HistoryEntry, history_id)
    if entry is not None and entry.email == email:
        db.delete(entry)
        db.commit()
    return {"message": "History entry deleted successfully."}


@router.get("/images/{name}")
def get_history_image(name: str):
    path = history_image_path(name)
    if path is None:
        raise HTTPException(status_code=404, detail="Image not found")
    with open(path, "rb") as f:
        media_type = guess_mime_type(f.read(), default="application/octet-stream")
    return FileResponse(path, media_type=media_type)
