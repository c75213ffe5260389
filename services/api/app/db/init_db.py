from __future__ import annotations

import logging
import os

from services.api.app.db.database import get_engine
from services.api.app.db.models import Base

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "y"}


def auto_create_enabled() -> bool:
    return os.getenv("STOREFRONT_DB_AUTO_CREATE", "true").strip().lower() in _TRUTHY


def init_db() -> None:
    if not auto_create_enabled():
        logger.info("Skipping schema creation (STOREFRONT_DB_AUTO_CREATE is off)")
        return

    Base.metadata.create_all(bind=get_engine())
