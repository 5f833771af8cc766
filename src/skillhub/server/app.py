"""Starlette app factory with lifespan for hub services."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from pathlib import Path

import httpx
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse

from skillhub.config import HubConfig, load_config
from skillhub.errors import HubError, QualityRejectError
from skillhub.hub import Hub
from skillhub.server.routes_comments import routes as comment_routes
from skillhub.server.routes_skills import routes as skill_routes
from skillhub.server.routes_system import routes as system_routes
from skillhub.storage.database import now_ms


async def hub_error(request: Request, exc: HubError) -> JSONResponse:
    body: dict = {"error": exc.message}
    if isinstance(exc, QualityRejectError):
        body["quality"] = exc.assessment.model_dump(mode="json")
    return JSONResponse(body, status_code=exc.status_code)


def create_app(
    db_path: str = ":memory:",
    documents_dir: str | Path | None = None,
    config: HubConfig | None = None,
    *,
    clock: Callable[[], int] = now_ms,
    webhook_client: httpx.Client | None = None,
) -> Starlette:
    """Create a Starlette app with the given database path."""

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncGenerator[None, None]:
        hub_config = config or load_config()
        docs = Path(documents_dir) if documents_dir is not None else hub_config.documents_dir
        app.state.hub = Hub.open(
            db_path,
            docs,
            hub_config,
            clock=clock,
            webhook_client=webhook_client,
        )

        yield

        app.state.hub.close()

    return Starlette(
        routes=system_routes + skill_routes + comment_routes,
        lifespan=lifespan,
        exception_handlers={HubError: hub_error},
    )
