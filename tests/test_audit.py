"""Tests for the audit & stat emitter and audit log immutability."""

from __future__ import annotations

import sqlite3

import pytest

from skillhub.moderation.audit import AuditEmitter
from skillhub.moderation.models import AuditAction
from skillhub.moderation.store import CommentStore
from skillhub.tasks.models import StatKind, TaskKind
from skillhub.tasks.queue import TaskQueue
from tests.conftest import BASE_MS


@pytest.fixture
def store(db):
    return CommentStore(db)


@pytest.fixture
def queue(db):
    return TaskQueue(db)


@pytest.fixture
def emitter(store, queue):
    return AuditEmitter(store, queue)


class TestRecord:
    def test_appends_entry(self, emitter, store):
        entry_id = emitter.record(
            "mod", AuditAction.HIDE, "c1", now=BASE_MS, metadata={"skill_id": "s1"}
        )
        entries = store.list_audit(target_id="c1")
        assert [e.id for e in entries] == [entry_id]
        assert entries[0].action == AuditAction.HIDE
        assert entries[0].target_type == "comment"
        assert entries[0].metadata == {"skill_id": "s1"}
        assert entries[0].created_at == BASE_MS

    def test_filter_by_actor(self, emitter, store):
        emitter.record("a", AuditAction.ADD, "c1", now=BASE_MS)
        emitter.record("b", AuditAction.ADD, "c2", now=BASE_MS)
        assert [e.target_id for e in store.list_audit(actor_id="b")] == ["c2"]

    def test_rolled_back_with_caller(self, db, emitter, store):
        with pytest.raises(RuntimeError), db.transaction():
            emitter.record("a", AuditAction.ADD, "c1", now=BASE_MS)
            emitter.stat("s1", StatKind.COMMENT)
            raise RuntimeError("boom")
        assert store.list_audit() == []
        assert TaskQueue(db).list_tasks() == []


class TestImmutability:
    def test_update_rejected(self, db, emitter):
        emitter.record("a", AuditAction.ADD, "c1", now=BASE_MS)
        with pytest.raises(sqlite3.IntegrityError, match="append-only"):
            db.execute("UPDATE audit_logs SET action = 'comment.delete'")

    def test_delete_rejected(self, db, emitter):
        emitter.record("a", AuditAction.ADD, "c1", now=BASE_MS)
        with pytest.raises(sqlite3.IntegrityError, match="append-only"):
            db.execute("DELETE FROM audit_logs")


class TestStats:
    def test_stat_enqueues_task(self, emitter, queue):
        emitter.stat("s1", StatKind.UNCOMMENT)
        tasks = queue.list_tasks(kind=TaskKind.STAT)
        assert len(tasks) == 1
        assert tasks[0].payload == {"skill_id": "s1", "kind": "uncomment"}

    @pytest.mark.parametrize(
        ("before", "after", "expected"),
        [
            (True, False, ["uncomment"]),
            (False, True, ["comment"]),
            (True, True, []),
            (False, False, []),
        ],
    )
    def test_visibility_changed(self, emitter, queue, before, after, expected):
        emitter.visibility_changed("s1", before=before, after=after)
        assert [t.payload["kind"] for t in queue.list_tasks()] == expected
