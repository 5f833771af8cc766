"""TaskQueue: transactional outbox rows in the hub database."""

from __future__ import annotations

import json
import sqlite3
from typing import Any

from skillhub.storage.database import Database, now_ms
from skillhub.tasks.models import Task, TaskStatus


class TaskQueue:
    """Enqueue joins the caller's transaction, so a task exists only if its cause committed."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def enqueue(self, kind: str, payload: dict[str, Any]) -> Task:
        task = Task(kind=kind, payload=payload)
        with self._db.transaction() as conn:
            conn.execute(
                """INSERT INTO tasks (id, kind, payload, status, attempts, created_at)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (
                    task.id,
                    task.kind,
                    json.dumps(task.payload),
                    task.status,
                    task.attempts,
                    task.created_at,
                ),
            )
        return task

    def get(self, task_id: str) -> Task | None:
        row = self._db.fetchone("SELECT * FROM tasks WHERE id = ?", (task_id,))
        return self._row_to_task(row) if row else None

    def list_tasks(
        self,
        *,
        status: TaskStatus | None = None,
        kind: str | None = None,
        limit: int = 100,
    ) -> list[Task]:
        clauses: list[str] = []
        params: list = []
        if status:
            clauses.append("status = ?")
            params.append(status.value)
        if kind:
            clauses.append("kind = ?")
            params.append(kind)
        where = " AND ".join(clauses) if clauses else "1=1"
        params.append(limit)
        rows = self._db.fetchall(
            f"SELECT * FROM tasks WHERE {where} ORDER BY created_at, rowid LIMIT ?",
            params,
        )
        return [self._row_to_task(r) for r in rows]

    def pending(self, limit: int = 100) -> list[Task]:
        return self.list_tasks(status=TaskStatus.PENDING, limit=limit)

    def mark_delivered(self, task_id: str) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """UPDATE tasks SET status=?, attempts=attempts + 1, last_error=NULL,
                   delivered_at=? WHERE id=?""",
                (TaskStatus.DELIVERED.value, now_ms(), task_id),
            )

    def mark_attempt_failed(self, task_id: str, error: str, *, max_attempts: int) -> TaskStatus:
        with self._db.transaction() as conn:
            row = conn.execute("SELECT attempts FROM tasks WHERE id = ?", (task_id,)).fetchone()
            attempts = (row["attempts"] if row else 0) + 1
            status = TaskStatus.FAILED if attempts >= max_attempts else TaskStatus.PENDING
            conn.execute(
                "UPDATE tasks SET status=?, attempts=?, last_error=? WHERE id=?",
                (status.value, attempts, error[:500], task_id),
            )
        return status

    def counts(self) -> dict[str, int]:
        return {
            r["status"]: r["cnt"]
            for r in self._db.fetchall(
                "SELECT status, COUNT(*) as cnt FROM tasks GROUP BY status"
            )
        }

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=row["id"],
            kind=row["kind"],
            payload=json.loads(row["payload"]),
            status=row["status"],
            attempts=row["attempts"],
            last_error=row["last_error"],
            created_at=row["created_at"],
            delivered_at=row["delivered_at"],
        )
