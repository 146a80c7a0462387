"""HTTP API exposing the latest dashboard snapshot."""

from fastapi import APIRouter
from pydantic import BaseModel

from .config import settings
from .data_sources import build_data_source
from .presentation import DashboardView, build_dashboard_view
from .refresh import RefreshScheduler
from .store import DashboardStatus, DashboardStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="weather_dashboard/api")

router = APIRouter()
STORE = DashboardStore()
SCHEDULER = RefreshScheduler(STORE, build_data_source(settings), settings)


class HealthResponse(BaseModel):
    """Liveness plus the dashboard's load status."""
    status: str
    dashboard: DashboardStatus
    refreshing: bool


@router.get("/dashboard", response_model=DashboardView)
def get_dashboard():
    """Return the latest normalized records with their display derivations."""
    state = STORE.snapshot()
    logger.debug(f"Serving dashboard snapshot: status={state.status.value}")
    return build_dashboard_view(state, location=settings.location_name, subtitle=settings.location_subtitle)


@router.get("/health", response_model=HealthResponse)
def health():
    """Report whether data has loaded and whether the scheduler is running."""
    state = STORE.snapshot()
    return HealthResponse(status="ok", dashboard=state.status, refreshing=SCHEDULER.running)
