import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from textappend.api.public import router as public_router

logger = logging.getLogger(__name__)

app = FastAPI(title="text-append-api", docs_url=None, redoc_url=None, openapi_url=None)

# CORS: the public surface is open to any origin unless narrowed
_origins = os.environ.get("CORS_ORIGINS", "*").split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in _origins],
    allow_methods=["GET", "PUT"],
    allow_headers=["*"],
)

app.include_router(public_router)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
    """Unknown paths and unsupported methods are both plain 'Not Found'."""
    if exc.status_code in (404, 405):
        return PlainTextResponse("Not Found", status_code=404)
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return PlainTextResponse("Error: Internal Server Error", status_code=500)
