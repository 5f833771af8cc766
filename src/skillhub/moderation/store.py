"""CommentStore: persistence for comments, reports, and the audit log.

Only the state machine and the report ledger call the write methods here.
"""

from __future__ import annotations

import json
import sqlite3

from skillhub.errors import ConflictError
from skillhub.moderation.models import (
    AuditLogEntry,
    Comment,
    CommentReport,
    CommentStatus,
    ModerationState,
)
from skillhub.storage.database import Database


class CommentStore:
    def __init__(self, db: Database) -> None:
        self._db = db

    # --- comments ---

    def insert_comment(self, comment: Comment) -> str:
        m = comment.moderation
        with self._db.transaction() as conn:
            conn.execute(
                """INSERT INTO comments
                   (id, skill_id, author_id, body, created_at,
                    moderation_status, moderation_reason, moderation_notes,
                    report_count, last_reported_at, hidden_at,
                    soft_deleted_at, deleted_by, last_reviewed_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    comment.id,
                    comment.skill_id,
                    comment.author_id,
                    comment.body,
                    comment.created_at,
                    m.status,
                    m.reason,
                    m.notes,
                    m.report_count,
                    m.last_reported_at,
                    m.hidden_at,
                    m.soft_deleted_at,
                    m.deleted_by,
                    m.last_reviewed_at,
                ),
            )
        return comment.id

    def get_comment(self, comment_id: str) -> Comment | None:
        row = self._db.fetchone("SELECT * FROM comments WHERE id = ?", (comment_id,))
        return self._row_to_comment(row) if row else None

    def replace_state(self, comment_id: str, state: ModerationState) -> None:
        """Overwrite every moderation column with ``state``."""
        with self._db.transaction() as conn:
            conn.execute(
                """UPDATE comments SET
                    moderation_status=?, moderation_reason=?, moderation_notes=?,
                    report_count=?, last_reported_at=?, hidden_at=?,
                    soft_deleted_at=?, deleted_by=?, last_reviewed_at=?
                   WHERE id=?""",
                (
                    state.status,
                    state.reason,
                    state.notes,
                    state.report_count,
                    state.last_reported_at,
                    state.hidden_at,
                    state.soft_deleted_at,
                    state.deleted_by,
                    state.last_reviewed_at,
                    comment_id,
                ),
            )

    def delete_comment(self, comment_id: str) -> None:
        with self._db.transaction() as conn:
            conn.execute("DELETE FROM comments WHERE id = ?", (comment_id,))

    def list_for_skill(
        self, skill_id: str, *, limit: int = 50, visible_only: bool = False
    ) -> list[Comment]:
        sql = "SELECT * FROM comments WHERE skill_id = ?"
        params: list = [skill_id]
        if visible_only:
            sql += " AND moderation_status = ? AND soft_deleted_at IS NULL"
            params.append(CommentStatus.ACTIVE.value)
        sql += " ORDER BY created_at DESC, rowid DESC LIMIT ?"
        params.append(limit)
        rows = self._db.fetchall(sql, params)
        return [self._row_to_comment(r) for r in rows]

    def list_recent(self, *, limit: int) -> list[Comment]:
        rows = self._db.fetchall(
            "SELECT * FROM comments ORDER BY created_at DESC, rowid DESC LIMIT ?",
            (limit,),
        )
        return [self._row_to_comment(r) for r in rows]

    # --- reports ---

    def get_report(self, comment_id: str, reporter_id: str) -> CommentReport | None:
        row = self._db.fetchone(
            "SELECT * FROM comment_reports WHERE comment_id = ? AND reporter_id = ?",
            (comment_id, reporter_id),
        )
        return self._row_to_report(row) if row else None

    def insert_report(self, report: CommentReport) -> str:
        """Insert a report; raises ConflictError if the reporter already reported it."""
        try:
            with self._db.transaction() as conn:
                conn.execute(
                    """INSERT INTO comment_reports
                       (id, comment_id, skill_id, reporter_id, reason, created_at)
                       VALUES (?, ?, ?, ?, ?, ?)""",
                    (
                        report.id,
                        report.comment_id,
                        report.skill_id,
                        report.reporter_id,
                        report.reason,
                        report.created_at,
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise ConflictError("Comment already reported by this user") from e
        return report.id

    def count_active_reports(self, reporter_id: str, *, cap: int) -> int:
        """Reports on still-visible comments whose author is active, counted up to ``cap``."""
        row = self._db.fetchone(
            """SELECT COUNT(*) FROM (
                   SELECT 1 FROM comment_reports r
                   JOIN comments c ON c.id = r.comment_id
                   JOIN accounts a ON a.id = c.author_id
                   WHERE r.reporter_id = ?
                     AND c.moderation_status = ?
                     AND c.soft_deleted_at IS NULL
                     AND a.deactivated_at IS NULL
                   LIMIT ?
               )""",
            (reporter_id, CommentStatus.ACTIVE.value, cap),
        )
        return row[0]

    def list_reports_for_comment(
        self, comment_id: str, *, limit: int | None = None
    ) -> list[CommentReport]:
        sql = "SELECT * FROM comment_reports WHERE comment_id = ? ORDER BY created_at DESC"
        params: list = [comment_id]
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        return [self._row_to_report(r) for r in self._db.fetchall(sql, params)]

    def delete_reports_for_comment(self, comment_id: str) -> int:
        with self._db.transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM comment_reports WHERE comment_id = ?", (comment_id,)
            )
        return cursor.rowcount

    # --- audit ---

    def insert_audit(self, entry: AuditLogEntry) -> int:
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """INSERT INTO audit_logs
                   (actor_id, action, target_type, target_id, metadata, created_at)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (
                    entry.actor_id,
                    entry.action,
                    entry.target_type,
                    entry.target_id,
                    json.dumps(entry.metadata),
                    entry.created_at,
                ),
            )
        return cursor.lastrowid

    def list_audit(
        self,
        *,
        target_id: str | None = None,
        actor_id: str | None = None,
        limit: int = 100,
    ) -> list[AuditLogEntry]:
        clauses: list[str] = []
        params: list = []
        if target_id:
            clauses.append("target_id = ?")
            params.append(target_id)
        if actor_id:
            clauses.append("actor_id = ?")
            params.append(actor_id)
        where = " AND ".join(clauses) if clauses else "1=1"
        params.append(limit)
        rows = self._db.fetchall(
            f"SELECT * FROM audit_logs WHERE {where} ORDER BY id LIMIT ?", params
        )
        return [self._row_to_audit(r) for r in rows]

    @staticmethod
    def _row_to_comment(row: sqlite3.Row) -> Comment:
        return Comment(
            id=row["id"],
            skill_id=row["skill_id"],
            author_id=row["author_id"],
            body=row["body"],
            created_at=row["created_at"],
            moderation=ModerationState(
                status=row["moderation_status"],
                reason=row["moderation_reason"],
                notes=row["moderation_notes"],
                report_count=row["report_count"],
                last_reported_at=row["last_reported_at"],
                hidden_at=row["hidden_at"],
                soft_deleted_at=row["soft_deleted_at"],
                deleted_by=row["deleted_by"],
                last_reviewed_at=row["last_reviewed_at"],
            ),
        )

    @staticmethod
    def _row_to_report(row: sqlite3.Row) -> CommentReport:
        return CommentReport(
            id=row["id"],
            comment_id=row["comment_id"],
            skill_id=row["skill_id"],
            reporter_id=row["reporter_id"],
            reason=row["reason"],
            created_at=row["created_at"],
        )

    @staticmethod
    def _row_to_audit(row: sqlite3.Row) -> AuditLogEntry:
        return AuditLogEntry(
            id=row["id"],
            actor_id=row["actor_id"],
            action=row["action"],
            target_type=row["target_type"],
            target_id=row["target_id"],
            metadata=json.loads(row["metadata"]),
            created_at=row["created_at"],
        )
