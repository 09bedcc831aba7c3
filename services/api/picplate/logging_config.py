import json
import logging
from datetime import datetime, timezone

from .settings import settings

event_logger = logging.getLogger("picplate.events")


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def log_event(message: str, **fields) -> None:
    """One structured line per request milestone."""
    payload = {"message": message, **fields, "timestamp": datetime.now(timezone.utc).isoformat()}
    event_logger.info(json.dumps(payload, default=str))
