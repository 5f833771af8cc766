"""System routes: health, version, task queue stats."""

from __future__ import annotations

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from skillhub import __version__ as VERSION
from skillhub.server.deps import get_hub


async def health(request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})


async def version(request: Request) -> JSONResponse:
    return JSONResponse({"version": VERSION})


async def tasks(request: Request) -> JSONResponse:
    return JSONResponse(get_hub(request).queue.counts())


routes = [
    Route("/health", health),
    Route("/api/version", version),
    Route("/api/tasks", tasks),
]
