"""SQLite DDL and migration runner for the hub database."""

from __future__ import annotations

import sqlite3

SCHEMA_VERSIONS_DDL = """
CREATE TABLE IF NOT EXISTS schema_versions (
    version INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

ACCOUNTS_DDL = """
CREATE TABLE IF NOT EXISTS accounts (
    id TEXT PRIMARY KEY,
    handle TEXT NOT NULL,
    role TEXT NOT NULL DEFAULT 'user',
    created_at INTEGER NOT NULL,
    deactivated_at INTEGER
);
"""

SKILLS_DDL = """
CREATE TABLE IF NOT EXISTS skills (
    id TEXT PRIMARY KEY,
    slug TEXT NOT NULL UNIQUE,
    display_name TEXT NOT NULL,
    owner_id TEXT NOT NULL,
    summary TEXT,
    latest_version_id TEXT,
    comment_count INTEGER NOT NULL DEFAULT 0,
    created_at INTEGER NOT NULL
);
"""

SKILL_VERSIONS_DDL = """
CREATE TABLE IF NOT EXISTS skill_versions (
    id TEXT PRIMARY KEY,
    skill_id TEXT NOT NULL,
    version TEXT NOT NULL,
    changelog TEXT NOT NULL DEFAULT '',
    files TEXT NOT NULL DEFAULT '[]',
    readme_ref TEXT,
    quality TEXT,
    quality_decision TEXT,
    created_at INTEGER NOT NULL,
    UNIQUE(skill_id, version)
);
"""

SKILLS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_skills_owner ON skills(owner_id, created_at);",
    "CREATE INDEX IF NOT EXISTS idx_versions_skill ON skill_versions(skill_id);",
    "CREATE INDEX IF NOT EXISTS idx_versions_quality ON skill_versions(quality_decision);",
]

APPLIED_STAT_EVENTS_DDL = """
CREATE TABLE IF NOT EXISTS applied_stat_events (
    event_id TEXT PRIMARY KEY,
    skill_id TEXT NOT NULL,
    kind TEXT NOT NULL,
    applied_at INTEGER NOT NULL
);
"""

COMMENTS_DDL = """
CREATE TABLE IF NOT EXISTS comments (
    id TEXT PRIMARY KEY,
    skill_id TEXT NOT NULL,
    author_id TEXT NOT NULL,
    body TEXT NOT NULL,
    created_at INTEGER NOT NULL,
    moderation_status TEXT NOT NULL DEFAULT 'active',
    moderation_reason TEXT,
    moderation_notes TEXT,
    report_count INTEGER NOT NULL DEFAULT 0,
    last_reported_at INTEGER,
    hidden_at INTEGER,
    soft_deleted_at INTEGER,
    deleted_by TEXT,
    last_reviewed_at INTEGER
);
"""

COMMENTS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_comments_skill ON comments(skill_id, created_at);",
    "CREATE INDEX IF NOT EXISTS idx_comments_created ON comments(created_at);",
]

COMMENT_REPORTS_DDL = """
CREATE TABLE IF NOT EXISTS comment_reports (
    id TEXT PRIMARY KEY,
    comment_id TEXT NOT NULL,
    skill_id TEXT NOT NULL,
    reporter_id TEXT NOT NULL,
    reason TEXT NOT NULL,
    created_at INTEGER NOT NULL
);
"""

COMMENT_REPORTS_INDEXES = [
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_reports_comment_user"
    " ON comment_reports(comment_id, reporter_id);",
    "CREATE INDEX IF NOT EXISTS idx_reports_user ON comment_reports(reporter_id);",
    "CREATE INDEX IF NOT EXISTS idx_reports_comment_created"
    " ON comment_reports(comment_id, created_at);",
]

AUDIT_LOGS_DDL = """
CREATE TABLE IF NOT EXISTS audit_logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    actor_id TEXT NOT NULL,
    action TEXT NOT NULL,
    target_type TEXT NOT NULL,
    target_id TEXT NOT NULL,
    metadata TEXT NOT NULL DEFAULT '{}',
    created_at INTEGER NOT NULL
);
"""

AUDIT_LOGS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_audit_target ON audit_logs(target_type, target_id);",
    "CREATE INDEX IF NOT EXISTS idx_audit_actor ON audit_logs(actor_id);",
]

AUDIT_LOGS_TRIGGERS = [
    """
    CREATE TRIGGER IF NOT EXISTS audit_logs_no_update BEFORE UPDATE ON audit_logs BEGIN
        SELECT RAISE(ABORT, 'audit_logs is append-only');
    END;
    """,
    """
    CREATE TRIGGER IF NOT EXISTS audit_logs_no_delete BEFORE DELETE ON audit_logs BEGIN
        SELECT RAISE(ABORT, 'audit_logs is append-only');
    END;
    """,
]

TASKS_DDL = """
CREATE TABLE IF NOT EXISTS tasks (
    id TEXT PRIMARY KEY,
    kind TEXT NOT NULL,
    payload TEXT NOT NULL DEFAULT '{}',
    status TEXT NOT NULL DEFAULT 'pending',
    attempts INTEGER NOT NULL DEFAULT 0,
    last_error TEXT,
    created_at INTEGER NOT NULL,
    delivered_at INTEGER
);
"""

TASKS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status, created_at);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_kind ON tasks(kind);",
]

MIGRATIONS: dict[int, list[str]] = {
    1: [
        ACCOUNTS_DDL,
        SKILLS_DDL,
        SKILL_VERSIONS_DDL,
        *SKILLS_INDEXES,
        COMMENTS_DDL,
        *COMMENTS_INDEXES,
        COMMENT_REPORTS_DDL,
        *COMMENT_REPORTS_INDEXES,
        AUDIT_LOGS_DDL,
        *AUDIT_LOGS_INDEXES,
        *AUDIT_LOGS_TRIGGERS,
    ],
    2: [
        TASKS_DDL,
        *TASKS_INDEXES,
        APPLIED_STAT_EVENTS_DDL,
    ],
}


def _get_current_version(db: sqlite3.Connection) -> int:
    try:
        row = db.execute("SELECT MAX(version) FROM schema_versions").fetchone()
        return row[0] or 0
    except sqlite3.OperationalError:
        return 0


def run_migrations(db: sqlite3.Connection) -> None:
    """Apply all pending migrations to the hub database."""
    db.execute("PRAGMA journal_mode=WAL")
    db.executescript(SCHEMA_VERSIONS_DDL)

    current = _get_current_version(db)
    for version in sorted(MIGRATIONS.keys()):
        if version <= current:
            continue
        for statement in MIGRATIONS[version]:
            db.executescript(statement)
        db.execute("INSERT INTO schema_versions (version) VALUES (?)", (version,))
    db.commit()
