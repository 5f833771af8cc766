"""Audit & stat emitter: append-only audit rows and visibility-delta stat events."""

from __future__ import annotations

from typing import Any

from skillhub.moderation.models import AuditAction, AuditLogEntry
from skillhub.moderation.store import CommentStore
from skillhub.tasks.models import StatEvent, StatKind, TaskKind
from skillhub.tasks.queue import TaskQueue


class AuditEmitter:
    """Pure recorder. Callers decide; the emitter only writes.

    Both methods join the caller's transaction, so audit rows and stat events
    commit or roll back together with the transition that caused them.
    """

    def __init__(self, store: CommentStore, queue: TaskQueue) -> None:
        self._store = store
        self._queue = queue

    def record(
        self,
        actor_id: str,
        action: AuditAction,
        target_id: str,
        *,
        now: int,
        metadata: dict[str, Any] | None = None,
        target_type: str = "comment",
    ) -> int:
        return self._store.insert_audit(
            AuditLogEntry(
                actor_id=actor_id,
                action=action,
                target_type=target_type,
                target_id=target_id,
                metadata=metadata or {},
                created_at=now,
            )
        )

    def stat(self, skill_id: str, kind: StatKind) -> None:
        event = StatEvent(skill_id=skill_id, kind=kind)
        self._queue.enqueue(TaskKind.STAT, event.model_dump(mode="json"))

    def visibility_changed(self, skill_id: str, *, before: bool, after: bool) -> None:
        """Emit exactly one stat event when visibility flips; nothing otherwise."""
        if before and not after:
            self.stat(skill_id, StatKind.UNCOMMENT)
        elif after and not before:
            self.stat(skill_id, StatKind.COMMENT)
