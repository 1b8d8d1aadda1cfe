from fastapi import Request

from .metrics.store import MetricStore


def get_store(request: Request) -> MetricStore:
    """The store owned by the running application."""
    return request.app.state.store
