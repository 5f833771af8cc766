"""Pydantic models for skills, versions, and publish requests."""

from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, Field

from skillhub.quality.models import QualityAssessment


class ActivityEntry(BaseModel):
    slug: str
    created_at: int
    latest_document_ref: str | None = None


class ActivityLookup(Protocol):
    def list_recent_activity(self, owner_id: str, limit: int) -> list[ActivityEntry]: ...


class SkillFile(BaseModel):
    path: str
    size: int = Field(ge=0)
    storage_ref: str
    sha256: str
    content_type: str | None = None


class Skill(BaseModel):
    id: str
    slug: str
    display_name: str
    owner_id: str
    summary: str | None = None
    latest_version_id: str | None = None
    comment_count: int = 0
    created_at: int


class SkillVersion(BaseModel):
    id: str
    skill_id: str
    version: str
    changelog: str = ""
    files: list[SkillFile] = Field(default_factory=list)
    readme_ref: str | None = None
    quality: QualityAssessment | None = None
    created_at: int


class PublishRequest(BaseModel):
    slug: str
    display_name: str
    version: str
    changelog: str = ""
    tags: list[str] = Field(default_factory=list)
    files: list[SkillFile]


class QuarantineEntry(BaseModel):
    slug: str
    display_name: str
    owner_id: str
    version: SkillVersion


class PublishResult(BaseModel):
    skill_id: str
    version_id: str
    is_new_skill: bool
    quality: QualityAssessment | None = None
