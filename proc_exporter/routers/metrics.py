from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST
from pydantic import BaseModel

from ..dependencies import get_store
from ..metrics.store import MetricStore

router = APIRouter(tags=["metrics"])


class HealthCheck(BaseModel):
    status: str


def get_metrics(store: MetricStore = Depends(get_store)) -> Response:
    """All series of the store in the Prometheus text format, unfiltered.

    Mounted by create_app at the configured metrics path.
    """
    return Response(content=store.expose(), media_type=CONTENT_TYPE_LATEST)


@router.get("/health", response_model=HealthCheck)
async def get_health():
    """Simple healthcheck endpoint for Docker"""
    return HealthCheck(status="healthy")
