"""Pydantic models and enums for comment moderation."""

from __future__ import annotations

import uuid
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CommentStatus(StrEnum):
    ACTIVE = "active"
    HIDDEN = "hidden"
    REMOVED = "removed"


class ModerationReason(StrEnum):
    USER_DELETE = "manual.user_delete"
    MODERATOR_DELETE = "manual.moderator_delete"
    MODERATION = "manual.moderation"
    AUTO_REPORTS = "auto.reports"


class AuditAction(StrEnum):
    ADD = "comment.add"
    DELETE = "comment.delete"
    HIDE = "comment.hide"
    RESTORE = "comment.restore"
    HARD_DELETE = "comment.hard_delete"
    AUTO_HIDE = "comment.auto_hide"
    REPORT = "comment.report"


class ModerationState(BaseModel):
    """Complete moderation record of a comment; transitions replace it whole."""

    model_config = ConfigDict(frozen=True)

    status: CommentStatus = CommentStatus.ACTIVE
    reason: str | None = None
    notes: str | None = None
    report_count: int = 0
    last_reported_at: int | None = None
    hidden_at: int | None = None
    soft_deleted_at: int | None = None
    deleted_by: str | None = None
    last_reviewed_at: int | None = None

    @property
    def visible(self) -> bool:
        return self.status == CommentStatus.ACTIVE and self.soft_deleted_at is None


class Comment(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    skill_id: str
    author_id: str
    body: str
    created_at: int
    moderation: ModerationState = Field(default_factory=ModerationState)

    @property
    def status(self) -> CommentStatus:
        return self.moderation.status

    @property
    def visible(self) -> bool:
        return self.moderation.visible


class CommentReport(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    comment_id: str
    skill_id: str
    reporter_id: str
    reason: str = Field(max_length=500)
    created_at: int


class AuditLogEntry(BaseModel):
    id: int | None = None
    actor_id: str
    action: AuditAction
    target_type: str = "comment"
    target_id: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: int


class ReportResult(BaseModel):
    ok: bool = True
    reported: bool
    already_reported: bool
    auto_hidden: bool = False


class TransitionResult(BaseModel):
    comment_id: str
    changed: bool
    status: CommentStatus | None = None


class HardDeleteResult(BaseModel):
    deleted: bool
    reports_deleted: int = 0


class CommentView(BaseModel):
    comment: Comment
    author_handle: str | None = None


class ReportSample(BaseModel):
    reason: str
    created_at: int
    reporter_id: str
    reporter_handle: str | None = None


class ReportedComment(BaseModel):
    comment: Comment
    skill_slug: str | None = None
    skill_owner_id: str | None = None
    author_handle: str | None = None
    reports: list[ReportSample] = Field(default_factory=list)
