import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..clients import USERINFO_URL, google_get
from ..db import get_db
from ..models import User
from ..schemas import LoginRequest

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def upsert_user(db: Session, userinfo: dict) -> User:
    user = db.get(User, userinfo["email"])
    if user is None:
        user = User(email=userinfo["email"], profile=dict(userinfo))
        db.add(user)
    else:
        user.profile = {**(user.profile or {}), **userinfo}
    db.commit()
    return user


@router.post("/login")
async def login(req: LoginRequest, db: Session = Depends(get_db)):
    if not req.access_token:
        raise HTTPException(status_code=400, detail="Missing token")
    try:
        response = await google_get(USERINFO_URL, req.access_token)
        userinfo = response.json()
        if not userinfo.get("email"):
            raise ValueError("userinfo response has no email")
        upsert_user(db, userinfo)
    except (httpx.HTTPError, ValueError):
        logger.error("Failed to authenticate user", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to authenticate user")
    return {"user": userinfo}
