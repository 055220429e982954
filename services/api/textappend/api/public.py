from __future__ import annotations

from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from starlette.concurrency import run_in_threadpool

from textappend.bootstrap import build_handler
from textappend.config import load_config
from textappend.core import AppendReadHandler, HandlerResponse
from textappend.monitoring.metrics import get_metrics


@lru_cache(maxsize=1)
def _configured_handler() -> AppendReadHandler:
    """Build the handler once from the service configuration."""
    return build_handler(load_config(), metrics=get_metrics())


def get_handler() -> AppendReadHandler:
    """Return the configured handler (overridden in tests)."""
    return _configured_handler()


def reset_handler() -> None:
    """Clear the cached handler (used in tests)."""
    _configured_handler.cache_clear()


def require_public_access(handler: AppendReadHandler = Depends(get_handler)) -> None:
    """Answer as if the routes were gone while public access is disabled."""
    routing = handler.routing
    if routing.enforced_upstream:
        return
    if not routing.is_public_access_enabled():
        raise HTTPException(status_code=404)


router = APIRouter(dependencies=[Depends(require_public_access)])


def to_response(result: HandlerResponse) -> Response:
    """Render a handler result as a plain-text HTTP response."""
    return Response(
        content=result.body,
        status_code=result.status_code,
        media_type="text/plain",
    )


@router.put("/append")
async def append(
    request: Request, handler: AppendReadHandler = Depends(get_handler)
) -> Response:
    """Append the raw request body to the shared resource."""
    payload = await request.body()
    # Blocking store calls run off the event loop; the append slot serializes them.
    result = await run_in_threadpool(handler.append, payload)
    return to_response(result)


@router.get("/read")
def read(handler: AppendReadHandler = Depends(get_handler)) -> Response:
    """Return the shared resource content verbatim."""
    return to_response(handler.read())
