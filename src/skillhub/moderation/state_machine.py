"""Comment lifecycle: active -> hidden -> active, active/hidden -> removed, admin purge."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from skillhub.access import Actor, assert_admin, assert_moderator
from skillhub.errors import NotFoundError, PermissionDeniedError, ValidationError
from skillhub.moderation.audit import AuditEmitter
from skillhub.moderation.models import (
    AuditAction,
    Comment,
    CommentStatus,
    HardDeleteResult,
    ModerationReason,
    ModerationState,
    TransitionResult,
)
from skillhub.moderation.store import CommentStore
from skillhub.registry.models import Skill
from skillhub.storage.database import Database, now_ms

logger = logging.getLogger(__name__)

MODERATOR_HIDE_NOTES = "Hidden by moderator."


class SkillLookup(Protocol):
    def get_skill(self, skill_id: str) -> Skill | None: ...


# --- state constructors: every field is set explicitly ---


def removed_state(
    prev: ModerationState, *, actor_id: str, by_owner: bool, now: int
) -> ModerationState:
    return ModerationState(
        status=CommentStatus.REMOVED,
        reason=ModerationReason.USER_DELETE if by_owner else ModerationReason.MODERATOR_DELETE,
        notes=None,
        report_count=prev.report_count,
        last_reported_at=prev.last_reported_at,
        hidden_at=prev.hidden_at,
        soft_deleted_at=now,
        deleted_by=actor_id,
        last_reviewed_at=now,
    )


def hidden_state(
    prev: ModerationState, *, actor_id: str, notes: str | None, now: int
) -> ModerationState:
    return ModerationState(
        status=CommentStatus.HIDDEN,
        reason=ModerationReason.MODERATION,
        notes=notes or MODERATOR_HIDE_NOTES,
        report_count=prev.report_count,
        last_reported_at=prev.last_reported_at,
        hidden_at=now,
        soft_deleted_at=now,
        deleted_by=actor_id,
        last_reviewed_at=now,
    )


def restored_state(prev: ModerationState, *, now: int) -> ModerationState:
    return ModerationState(
        status=CommentStatus.ACTIVE,
        reason=None,
        notes=None,
        report_count=prev.report_count,
        last_reported_at=prev.last_reported_at,
        hidden_at=None,
        soft_deleted_at=None,
        deleted_by=None,
        last_reviewed_at=now,
    )


def reported_state(prev: ModerationState, *, report_count: int, now: int) -> ModerationState:
    return ModerationState(
        status=prev.status,
        reason=prev.reason,
        notes=prev.notes,
        report_count=report_count,
        last_reported_at=now,
        hidden_at=prev.hidden_at,
        soft_deleted_at=prev.soft_deleted_at,
        deleted_by=prev.deleted_by,
        last_reviewed_at=prev.last_reviewed_at,
    )


def auto_hidden_state(prev: ModerationState, *, report_count: int, now: int) -> ModerationState:
    return ModerationState(
        status=CommentStatus.HIDDEN,
        reason=ModerationReason.AUTO_REPORTS,
        notes=f"Auto-hidden after {report_count} unique reports.",
        report_count=report_count,
        last_reported_at=now,
        hidden_at=now,
        soft_deleted_at=now,
        deleted_by=None,
        last_reviewed_at=now,
    )


class CommentStateMachine:
    def __init__(
        self,
        db: Database,
        comments: CommentStore,
        skills: SkillLookup,
        emitter: AuditEmitter,
        *,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._db = db
        self._comments = comments
        self._skills = skills
        self._emitter = emitter
        self._clock = clock

    def add(self, actor: Actor, skill_id: str, body: str) -> Comment:
        body = body.strip()
        if not body:
            raise ValidationError("Comment body required")

        with self._db.transaction():
            skill = self._skills.get_skill(skill_id)
            if skill is None:
                raise NotFoundError("Skill not found")
            now = self._clock()
            comment = Comment(skill_id=skill.id, author_id=actor.id, body=body, created_at=now)
            self._comments.insert_comment(comment)
            self._emitter.visibility_changed(skill.id, before=False, after=True)
            self._emitter.record(
                actor.id, AuditAction.ADD, comment.id, now=now, metadata={"skill_id": skill.id}
            )
        logger.info(f"Comment {comment.id[:8]} added on skill {skill.id[:8]}")
        return comment

    def remove(self, actor: Actor, comment_id: str) -> TransitionResult:
        """Author self-delete of an active comment, or moderator delete."""
        with self._db.transaction():
            comment = self._require(comment_id)
            if comment.status == CommentStatus.REMOVED:
                return TransitionResult(comment_id=comment.id, changed=False, status=comment.status)

            by_owner = comment.author_id == actor.id and comment.status == CommentStatus.ACTIVE
            if not by_owner:
                try:
                    assert_moderator(actor)
                except PermissionDeniedError:
                    if comment.author_id == actor.id:
                        raise PermissionDeniedError("Comment is under moderation review") from None
                    raise

            now = self._clock()
            state = removed_state(comment.moderation, actor_id=actor.id, by_owner=by_owner, now=now)
            self._transition(actor, comment, state, AuditAction.DELETE, now)
        return TransitionResult(comment_id=comment.id, changed=True, status=state.status)

    def hide(self, actor: Actor, comment_id: str, notes: str | None = None) -> TransitionResult:
        assert_moderator(actor)
        with self._db.transaction():
            comment = self._require_not_removed(comment_id)
            if comment.status == CommentStatus.HIDDEN:
                return TransitionResult(comment_id=comment.id, changed=False, status=comment.status)
            now = self._clock()
            cleaned = notes.strip()[:500] if notes else None
            state = hidden_state(comment.moderation, actor_id=actor.id, notes=cleaned, now=now)
            self._transition(actor, comment, state, AuditAction.HIDE, now)
        return TransitionResult(comment_id=comment.id, changed=True, status=state.status)

    def restore(self, actor: Actor, comment_id: str) -> TransitionResult:
        assert_moderator(actor)
        with self._db.transaction():
            comment = self._require_not_removed(comment_id)
            if comment.visible:
                return TransitionResult(comment_id=comment.id, changed=False, status=comment.status)
            now = self._clock()
            state = restored_state(comment.moderation, now=now)
            self._transition(actor, comment, state, AuditAction.RESTORE, now)
        return TransitionResult(comment_id=comment.id, changed=True, status=state.status)

    def hard_delete(self, actor: Actor, comment_id: str) -> HardDeleteResult:
        """Admin purge of a comment and all of its reports."""
        assert_admin(actor)
        with self._db.transaction():
            comment = self._comments.get_comment(comment_id)
            if comment is None:
                return HardDeleteResult(deleted=False)
            reports_deleted = self._comments.delete_reports_for_comment(comment.id)
            self._comments.delete_comment(comment.id)
            now = self._clock()
            self._emitter.visibility_changed(comment.skill_id, before=comment.visible, after=False)
            self._emitter.record(
                actor.id,
                AuditAction.HARD_DELETE,
                comment.id,
                now=now,
                metadata={"skill_id": comment.skill_id, "report_count": reports_deleted},
            )
        logger.info(f"Comment {comment.id[:8]} hard-deleted with {reports_deleted} reports")
        return HardDeleteResult(deleted=True, reports_deleted=reports_deleted)

    def _transition(
        self,
        actor: Actor,
        comment: Comment,
        state: ModerationState,
        action: AuditAction,
        now: int,
    ) -> None:
        self._comments.replace_state(comment.id, state)
        self._emitter.visibility_changed(
            comment.skill_id, before=comment.visible, after=state.visible
        )
        self._emitter.record(
            actor.id, action, comment.id, now=now, metadata={"skill_id": comment.skill_id}
        )
        logger.info(f"Comment {comment.id[:8]}: {comment.status} -> {state.status} ({action})")

    def _require(self, comment_id: str) -> Comment:
        comment = self._comments.get_comment(comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        return comment

    def _require_not_removed(self, comment_id: str) -> Comment:
        comment = self._require(comment_id)
        if comment.status == CommentStatus.REMOVED:
            raise NotFoundError("Comment not found")
        return comment
