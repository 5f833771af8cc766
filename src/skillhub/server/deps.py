"""Request helpers shared by the route modules."""

from __future__ import annotations

import json

from starlette.background import BackgroundTask
from starlette.requests import Request

from skillhub.access import Actor
from skillhub.errors import ValidationError
from skillhub.hub import Hub

ACTOR_HEADER = "X-Actor-Id"


def get_hub(request: Request) -> Hub:
    return request.app.state.hub


def require_actor(request: Request) -> Actor:
    return get_hub(request).access.require_actor(request.headers.get(ACTOR_HEADER))


async def read_json(request: Request) -> dict:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Invalid JSON") from None
    if not isinstance(body, dict):
        raise ValidationError("Invalid JSON")
    return body


def int_param(request: Request, name: str, default: int) -> int:
    raw = request.query_params.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer") from None


def drain_after(request: Request) -> BackgroundTask:
    """Deliver outbox tasks once the response has been sent."""
    return BackgroundTask(get_hub(request).dispatcher.drain)
