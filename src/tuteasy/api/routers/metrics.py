"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST

from tuteasy.observability.metrics import get_metrics

router = APIRouter(tags=["observability"])


@router.get(
    "/metrics",
    summary="Prometheus metrics",
    description="Metrics in the Prometheus text exposition format.",
    include_in_schema=False,
)
async def metrics() -> Response:
    """Export collected metrics."""
    return Response(content=get_metrics(), media_type=CONTENT_TYPE_LATEST)
