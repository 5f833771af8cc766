"""Comment routes: listing, posting, reporting, and moderator transitions."""

from __future__ import annotations

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from skillhub.access import assert_moderator
from skillhub.errors import NotFoundError
from skillhub.server.deps import drain_after, get_hub, int_param, read_json, require_actor


def _skill_id(request: Request) -> str:
    skill = get_hub(request).registry.get_skill_by_slug(request.path_params["slug"])
    if skill is None:
        raise NotFoundError("Skill not found")
    return skill.id


async def list_comments(request: Request) -> JSONResponse:
    """GET /api/skills/{slug}/comments: visible comments, newest first."""
    views = get_hub(request).queries.list_for_skill(
        _skill_id(request), limit=int_param(request, "limit", 50)
    )
    return JSONResponse(
        {
            "comments": [v.model_dump(mode="json") for v in views],
            "count": len(views),
        }
    )


async def add_comment(request: Request) -> JSONResponse:
    """POST /api/skills/{slug}/comments (body: body)."""
    actor = require_actor(request)
    body = await read_json(request)
    comment = get_hub(request).state_machine.add(
        actor, _skill_id(request), str(body.get("body") or "")
    )
    return JSONResponse(
        comment.model_dump(mode="json"), status_code=201, background=drain_after(request)
    )


async def remove_comment(request: Request) -> JSONResponse:
    """DELETE /api/comments/{comment_id}: author or moderator soft delete."""
    actor = require_actor(request)
    result = get_hub(request).state_machine.remove(actor, request.path_params["comment_id"])
    return JSONResponse(result.model_dump(mode="json"), background=drain_after(request))


async def report_comment(request: Request) -> JSONResponse:
    """POST /api/comments/{comment_id}/report (body: reason)."""
    actor = require_actor(request)
    body = await read_json(request)
    result = get_hub(request).ledger.report(
        actor, request.path_params["comment_id"], str(body.get("reason") or "")
    )
    return JSONResponse(result.model_dump(mode="json"), background=drain_after(request))


async def hide_comment(request: Request) -> JSONResponse:
    """POST /api/comments/{comment_id}/hide (body: notes, optional)."""
    actor = require_actor(request)
    body = await read_json(request) if await request.body() else {}
    notes = body.get("notes")
    result = get_hub(request).state_machine.hide(
        actor, request.path_params["comment_id"], notes=str(notes) if notes else None
    )
    return JSONResponse(result.model_dump(mode="json"), background=drain_after(request))


async def restore_comment(request: Request) -> JSONResponse:
    """POST /api/comments/{comment_id}/restore."""
    actor = require_actor(request)
    result = get_hub(request).state_machine.restore(actor, request.path_params["comment_id"])
    return JSONResponse(result.model_dump(mode="json"), background=drain_after(request))


async def hard_delete_comment(request: Request) -> JSONResponse:
    """DELETE /api/admin/comments/{comment_id}: purge the comment and its reports."""
    actor = require_actor(request)
    result = get_hub(request).state_machine.hard_delete(actor, request.path_params["comment_id"])
    return JSONResponse(result.model_dump(mode="json"), background=drain_after(request))


async def list_reported(request: Request) -> JSONResponse:
    """GET /api/moderation/reported: reported comments with sample reasons."""
    actor = require_actor(request)
    items = get_hub(request).queries.list_reported(actor, limit=int_param(request, "limit", 25))
    return JSONResponse(
        {
            "items": [i.model_dump(mode="json") for i in items],
            "count": len(items),
        }
    )


async def list_audit(request: Request) -> JSONResponse:
    """GET /api/moderation/audit?target_id=&actor_id=: audit trail."""
    actor = require_actor(request)
    assert_moderator(actor)
    entries = get_hub(request).comments.list_audit(
        target_id=request.query_params.get("target_id"),
        actor_id=request.query_params.get("actor_id"),
        limit=min(max(int_param(request, "limit", 100), 1), 1000),
    )
    return JSONResponse(
        {
            "entries": [e.model_dump(mode="json") for e in entries],
            "count": len(entries),
        }
    )


routes = [
    Route("/api/skills/{slug}/comments", list_comments, methods=["GET"]),
    Route("/api/skills/{slug}/comments", add_comment, methods=["POST"]),
    Route("/api/comments/{comment_id}", remove_comment, methods=["DELETE"]),
    Route("/api/comments/{comment_id}/report", report_comment, methods=["POST"]),
    Route("/api/comments/{comment_id}/hide", hide_comment, methods=["POST"]),
    Route("/api/comments/{comment_id}/restore", restore_comment, methods=["POST"]),
    Route("/api/admin/comments/{comment_id}", hard_delete_comment, methods=["DELETE"]),
    Route("/api/moderation/reported", list_reported),
    Route("/api/moderation/audit", list_audit),
]
