"""Report ledger: one report per (comment, reporter), per-user caps, auto-hide."""

from __future__ import annotations

import logging
from collections.abc import Callable

from skillhub.access import Actor
from skillhub.errors import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from skillhub.moderation.audit import AuditEmitter
from skillhub.moderation.models import (
    AuditAction,
    CommentReport,
    CommentStatus,
    ReportResult,
)
from skillhub.moderation.state_machine import auto_hidden_state, reported_state
from skillhub.moderation.store import CommentStore
from skillhub.storage.database import Database, now_ms

logger = logging.getLogger(__name__)

MAX_ACTIVE_REPORTS_PER_USER = 20
AUTO_HIDE_REPORT_THRESHOLD = 3
MAX_REPORT_REASON_LENGTH = 500


class ReportLedger:
    def __init__(
        self,
        db: Database,
        comments: CommentStore,
        emitter: AuditEmitter,
        *,
        clock: Callable[[], int] = now_ms,
        max_active_reports: int = MAX_ACTIVE_REPORTS_PER_USER,
        auto_hide_threshold: int = AUTO_HIDE_REPORT_THRESHOLD,
    ) -> None:
        self._db = db
        self._comments = comments
        self._emitter = emitter
        self._clock = clock
        self._max_active_reports = max_active_reports
        self._auto_hide_threshold = auto_hide_threshold

    def report(self, actor: Actor, comment_id: str, reason: str) -> ReportResult:
        """Record a report from ``actor``.

        Duplicate reports return ``already_reported`` without writing. The
        comment is hidden automatically once more than ``auto_hide_threshold``
        distinct users have reported it, inside the same transaction that
        stores the report, so concurrent reporters can never both trigger it.
        """
        reason = reason.strip()
        if not reason:
            raise ValidationError("Report reason required.")
        reason = reason[:MAX_REPORT_REASON_LENGTH]

        with self._db.transaction():
            comment = self._comments.get_comment(comment_id)
            if comment is None or comment.status == CommentStatus.REMOVED:
                raise NotFoundError("Comment not found")
            if comment.status == CommentStatus.HIDDEN or not comment.visible:
                raise InvalidStateError("Comment is already hidden.")

            if self._comments.get_report(comment.id, actor.id) is not None:
                return ReportResult(reported=False, already_reported=True)

            active = self._comments.count_active_reports(actor.id, cap=self._max_active_reports)
            if active >= self._max_active_reports:
                raise RateLimitError(
                    f"Report limit reached. You can have up to "
                    f"{self._max_active_reports} active reports."
                )

            now = self._clock()
            try:
                self._comments.insert_report(
                    CommentReport(
                        comment_id=comment.id,
                        skill_id=comment.skill_id,
                        reporter_id=actor.id,
                        reason=reason,
                        created_at=now,
                    )
                )
            except ConflictError:
                return ReportResult(reported=False, already_reported=True)

            report_count = comment.moderation.report_count + 1
            auto_hide = report_count > self._auto_hide_threshold
            if auto_hide:
                state = auto_hidden_state(comment.moderation, report_count=report_count, now=now)
            else:
                state = reported_state(comment.moderation, report_count=report_count, now=now)
            self._comments.replace_state(comment.id, state)

            metadata = {"skill_id": comment.skill_id, "report_count": report_count}
            self._emitter.record(
                actor.id, AuditAction.REPORT, comment.id, now=now, metadata=metadata
            )
            if auto_hide:
                self._emitter.visibility_changed(comment.skill_id, before=True, after=False)
                self._emitter.record(
                    actor.id, AuditAction.AUTO_HIDE, comment.id, now=now, metadata=metadata
                )

        if auto_hide:
            logger.info(f"Comment {comment.id[:8]} auto-hidden after {report_count} reports")
        else:
            logger.debug(f"Comment {comment.id[:8]} reported ({report_count})")
        return ReportResult(reported=True, already_reported=False, auto_hidden=auto_hide)
