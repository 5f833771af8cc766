"""Comment moderation: lifecycle state machine, report ledger, and audit trail."""

from skillhub.moderation.audit import AuditEmitter
from skillhub.moderation.ledger import ReportLedger
from skillhub.moderation.models import (
    AuditAction,
    AuditLogEntry,
    Comment,
    CommentReport,
    CommentStatus,
    ModerationReason,
    ModerationState,
    ReportResult,
)
from skillhub.moderation.queries import ModerationQueries
from skillhub.moderation.state_machine import CommentStateMachine
from skillhub.moderation.store import CommentStore

__all__ = [
    "AuditAction",
    "AuditEmitter",
    "AuditLogEntry",
    "Comment",
    "CommentReport",
    "CommentStateMachine",
    "CommentStatus",
    "CommentStore",
    "ModerationQueries",
    "ModerationReason",
    "ModerationState",
    "ReportLedger",
    "ReportResult",
]
