"""Storefront checkout API entrypoint."""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from services.api.app.db.init_db import init_db
from services.api.app.routers.checkout import router as checkout_router

logging.basicConfig(
    level=os.getenv("STOREFRONT_LOG_LEVEL", "INFO").strip().upper(),
    format="%(asctime)s - %(levelname)s - %(message)s",
)


@asynccontextmanager
async def _lifespan(_app: FastAPI):
    init_db()
    yield


app = FastAPI(title="Storefront Checkout API", lifespan=_lifespan)

app.include_router(checkout_router)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
