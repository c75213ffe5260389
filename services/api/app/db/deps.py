from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, Header, HTTPException
from services.api.app.db.database import db_session
from services.api.app.db.models import User
from services.api.app.services.checkout import SystemClock
from services.api.app.services.checkout_base import CheckoutStore, Clock
from services.api.app.services.checkout_sql import SqlCheckoutStore
from sqlalchemy.orm import Session

UNAUTHORIZED_MESSAGE = "Unauthorized. Please sign in to access this resource."


def get_db() -> Generator[Session, None, None]:
    db = db_session()
    try:
        yield db
    finally:
        db.close()


def get_current_user_id(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
    db: Session = Depends(get_db),
) -> str:
    """Resolve the caller. Session/token handling lives in front of this service."""
    user_id = (x_user_id or "").strip()
    if not user_id or db.get(User, user_id) is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "UNAUTHORIZED", "message": UNAUTHORIZED_MESSAGE},
        )
    return user_id


def get_checkout_store(db: Session = Depends(get_db)) -> CheckoutStore:
    return SqlCheckoutStore(db)


def get_clock() -> Clock:
    return SystemClock()
