"""Skill routes: publish, lookup, and the quarantine review queue."""

from __future__ import annotations

import asyncio

from pydantic import BaseModel, Field
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from skillhub.errors import NotFoundError, ValidationError
from skillhub.registry.documents import content_ref
from skillhub.registry.models import PublishRequest, SkillFile
from skillhub.server.deps import drain_after, get_hub, int_param, read_json, require_actor


class UploadFile(BaseModel):
    path: str
    content: str
    content_type: str | None = None


class PublishBody(BaseModel):
    slug: str
    display_name: str
    version: str
    changelog: str = ""
    tags: list[str] = Field(default_factory=list)
    files: list[UploadFile]


async def publish(request: Request) -> JSONResponse:
    """POST /api/skills: publish a new skill or a new version of an owned one."""
    hub = get_hub(request)
    actor = require_actor(request)
    try:
        body = PublishBody.model_validate(await read_json(request))
    except ValueError:
        raise ValidationError("Invalid publish request") from None

    contents: dict[str, str] = {}
    files: list[SkillFile] = []
    for upload in body.files:
        ref = content_ref(upload.content)
        contents[ref] = upload.content
        files.append(
            SkillFile(
                path=upload.path,
                size=len(upload.content.encode("utf-8")),
                storage_ref=ref,
                sha256=ref,
                content_type=upload.content_type,
            )
        )
    result = await asyncio.to_thread(
        hub.publisher.publish,
        actor,
        PublishRequest(
            slug=body.slug,
            display_name=body.display_name,
            version=body.version,
            changelog=body.changelog,
            tags=body.tags,
            files=files,
        ),
        contents=contents,
    )
    return JSONResponse(
        result.model_dump(mode="json"), status_code=201, background=drain_after(request)
    )


async def get_skill(request: Request) -> JSONResponse:
    """GET /api/skills/{slug}: skill listing with its latest version."""
    hub = get_hub(request)
    skill = hub.registry.get_skill_by_slug(request.path_params["slug"])
    if skill is None:
        raise NotFoundError("Skill not found")
    latest = hub.registry.get_version(skill.latest_version_id) if skill.latest_version_id else None
    return JSONResponse(
        {
            "skill": skill.model_dump(mode="json"),
            "latest_version": latest.model_dump(mode="json") if latest else None,
        }
    )


async def list_quarantined(request: Request) -> JSONResponse:
    """GET /api/moderation/quarantine: versions held for moderator review."""
    hub = get_hub(request)
    actor = require_actor(request)
    entries = hub.publisher.list_quarantined(actor, limit=int_param(request, "limit", 50))
    return JSONResponse(
        {
            "items": [e.model_dump(mode="json") for e in entries],
            "count": len(entries),
        }
    )


routes = [
    Route("/api/skills", publish, methods=["POST"]),
    Route("/api/skills/{slug}", get_skill),
    Route("/api/moderation/quarantine", list_quarantined),
]
