"""FastAPI application setup for the campus weather dashboard."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from . import api
from .api import router as api_router
from .config import settings
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="main")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Poll Open-Meteo for as long as the app is serving."""
    api.SCHEDULER.start()
    try:
        yield
    finally:
        # Give an in-flight request time to finish before the process exits.
        api.SCHEDULER.stop(timeout=settings.request_timeout_seconds + 1)


app = FastAPI(title="Campus Weather Dashboard", lifespan=lifespan)

# API routes
app.include_router(api_router, prefix="/v1")
