import os
import re
import time
from pathlib import Path

from ..settings import settings
from .images import guess_mime_type

_UNSAFE = re.compile(r"[^a-zA-Z0-9]")


def history_image_dir() -> Path:
    path = Path(settings.STORAGE_DIR) / "history"
    os.makedirs(path, exist_ok=True)
    return path


def history_image_name(email: str, mime_type: str = "image/png") -> str:
    ext = mime_type.split("/", 1)[1]
    return f"{_UNSAFE.sub('_', email)}_{int(time.time() * 1000)}.{ext}"


def save_history_image(email: str, data: bytes) -> str:
    """Write a history image and return its file name, with an extension matching its format."""
    name = history_image_name(email, guess_mime_type(data, default="image/png"))
    with open(history_image_dir() / name, "wb") as f:
        f.write(data)
    return name


def history_image_path(name: str) -> Path | None:
    """Path of a stored history image, or None if it does not exist or escapes the directory."""
    base = history_image_dir().resolve()
    path = (base / name).resolve()
    if path.parent != base or not path.is_file():
        return None
    return path
