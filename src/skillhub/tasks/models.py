"""Pydantic models for outbound tasks and stat events."""

from __future__ import annotations

import uuid
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from skillhub.storage.database import now_ms


class TaskStatus(StrEnum):
    PENDING = "pending"
    DELIVERED = "delivered"
    FAILED = "failed"


class TaskKind(StrEnum):
    STAT = "stat"
    WEBHOOK_PUBLISH = "webhook.skill.publish"


class StatKind(StrEnum):
    COMMENT = "comment"
    UNCOMMENT = "uncomment"


class StatEvent(BaseModel):
    skill_id: str
    kind: StatKind


class Task(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    kind: str
    payload: dict[str, Any] = Field(default_factory=dict)
    status: TaskStatus = TaskStatus.PENDING
    attempts: int = 0
    last_error: str | None = None
    created_at: int = Field(default_factory=now_ms)
    delivered_at: int | None = None


class DrainReport(BaseModel):
    delivered: int = 0
    retried: int = 0
    failed: int = 0
