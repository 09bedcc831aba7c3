from sqlalchemy import String, ForeignKey, JSON, DateTime, Text
from sqlalchemy.orm import relationship, Mapped, mapped_column
from datetime import datetime, timezone
from .db import Base

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

class User(Base):
    __tablename__ = "users"
    email: Mapped[str] = mapped_column(String, primary_key=True)
    profile: Mapped[dict] = mapped_column(JSON, default=dict)  # Google userinfo payload
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    history: Mapped[list["HistoryEntry"]] = relationship("HistoryEntry", back_populates="user", cascade="all, delete-orphan")

class HistoryEntry(Base):
    __tablename__ = "history"
    id: Mapped[str] = mapped_column(String, primary_key=True)
    email: Mapped[str] = mapped_column(String, ForeignKey("users.email", ondelete="CASCADE"), index=True)
    photo_url: Mapped[str] = mapped_column(Text, default="")
    photo_id: Mapped[str | None] = mapped_column(String, nullable=True)
    recipe_prompt: Mapped[str] = mapped_column(Text)
    restaurant_prompt: Mapped[str] = mapped_column(Text)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, index=True)

    user: Mapped["User"] = relationship("User", back_populates="history")
