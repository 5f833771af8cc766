"""RegistryStore: accounts, skills, versions, and the comment-count aggregate."""

from __future__ import annotations

import json
import sqlite3

from skillhub.access import Account
from skillhub.quality.models import QualityAssessment, QualityDecision
from skillhub.registry.models import ActivityEntry, Skill, SkillFile, SkillVersion
from skillhub.storage.database import Database, now_ms


class RegistryStore:
    """Skill registry CRUD, sharing the hub Database."""

    def __init__(self, db: Database) -> None:
        self._db = db

    # --- accounts ---

    def save_account(self, account: Account) -> str:
        with self._db.transaction() as conn:
            conn.execute(
                """INSERT INTO accounts (id, handle, role, created_at, deactivated_at)
                   VALUES (?, ?, ?, ?, ?)
                   ON CONFLICT(id) DO UPDATE SET
                    handle=excluded.handle, role=excluded.role,
                    deactivated_at=excluded.deactivated_at""",
                (
                    account.id,
                    account.handle,
                    account.role,
                    account.created_at,
                    account.deactivated_at,
                ),
            )
        return account.id

    def get_account(self, account_id: str) -> Account | None:
        row = self._db.fetchone("SELECT * FROM accounts WHERE id = ?", (account_id,))
        return self._row_to_account(row) if row else None

    def get_handles(self, account_ids: list[str]) -> dict[str, str]:
        if not account_ids:
            return {}
        placeholders = ",".join("?" for _ in account_ids)
        rows = self._db.fetchall(
            f"SELECT id, handle FROM accounts WHERE id IN ({placeholders})", account_ids
        )
        return {r["id"]: r["handle"] for r in rows}

    # --- skills ---

    def get_skill(self, skill_id: str) -> Skill | None:
        row = self._db.fetchone("SELECT * FROM skills WHERE id = ?", (skill_id,))
        return self._row_to_skill(row) if row else None

    def get_skill_by_slug(self, slug: str) -> Skill | None:
        row = self._db.fetchone("SELECT * FROM skills WHERE slug = ?", (slug,))
        return self._row_to_skill(row) if row else None

    def insert_skill(self, skill: Skill) -> str:
        with self._db.transaction() as conn:
            conn.execute(
                """INSERT INTO skills
                   (id, slug, display_name, owner_id, summary,
                    latest_version_id, comment_count, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    skill.id,
                    skill.slug,
                    skill.display_name,
                    skill.owner_id,
                    skill.summary,
                    skill.latest_version_id,
                    skill.comment_count,
                    skill.created_at,
                ),
            )
        return skill.id

    def update_skill_listing(
        self,
        skill_id: str,
        *,
        display_name: str,
        summary: str | None,
        latest_version_id: str,
    ) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """UPDATE skills SET display_name=?, summary=?, latest_version_id=?
                   WHERE id=?""",
                (display_name, summary, latest_version_id, skill_id),
            )

    def list_recent_activity(self, owner_id: str, limit: int) -> list[ActivityEntry]:
        rows = self._db.fetchall(
            """SELECT s.slug, s.created_at, v.readme_ref
               FROM skills s
               LEFT JOIN skill_versions v ON v.id = s.latest_version_id
               WHERE s.owner_id = ?
               ORDER BY s.created_at DESC LIMIT ?""",
            (owner_id, limit),
        )
        return [
            ActivityEntry(
                slug=r["slug"],
                created_at=r["created_at"],
                latest_document_ref=r["readme_ref"],
            )
            for r in rows
        ]

    # --- versions ---

    def insert_version(self, version: SkillVersion) -> str:
        quality_json = version.quality.model_dump_json() if version.quality else None
        decision = version.quality.decision.value if version.quality else None
        files_json = json.dumps([f.model_dump() for f in version.files])
        with self._db.transaction() as conn:
            conn.execute(
                """INSERT INTO skill_versions
                   (id, skill_id, version, changelog, files, readme_ref,
                    quality, quality_decision, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    version.id,
                    version.skill_id,
                    version.version,
                    version.changelog,
                    files_json,
                    version.readme_ref,
                    quality_json,
                    decision,
                    version.created_at,
                ),
            )
        return version.id

    def get_version(self, version_id: str) -> SkillVersion | None:
        row = self._db.fetchone("SELECT * FROM skill_versions WHERE id = ?", (version_id,))
        return self._row_to_version(row) if row else None

    def has_version(self, skill_id: str, version: str) -> bool:
        row = self._db.fetchone(
            "SELECT COUNT(*) FROM skill_versions WHERE skill_id = ? AND version = ?",
            (skill_id, version),
        )
        return row[0] > 0

    def list_versions_by_decision(
        self, decision: QualityDecision, *, limit: int = 50
    ) -> list[SkillVersion]:
        rows = self._db.fetchall(
            """SELECT * FROM skill_versions WHERE quality_decision = ?
               ORDER BY created_at DESC LIMIT ?""",
            (decision.value, limit),
        )
        return [self._row_to_version(r) for r in rows]

    # --- stat aggregate ---

    def apply_stat(self, event_id: str, skill_id: str, kind: str) -> bool:
        """Apply a comment/uncomment delta once per event id. Returns False on replay."""
        delta = 1 if kind == "comment" else -1
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """INSERT OR IGNORE INTO applied_stat_events
                   (event_id, skill_id, kind, applied_at) VALUES (?, ?, ?, ?)""",
                (event_id, skill_id, kind, now_ms()),
            )
            if cursor.rowcount == 0:
                return False
            conn.execute(
                "UPDATE skills SET comment_count = comment_count + ? WHERE id = ?",
                (delta, skill_id),
            )
        return True

    def emit(self, skill_id: str, kind: str, *, event_id: str) -> None:
        self.apply_stat(event_id, skill_id, kind)

    @staticmethod
    def _row_to_account(row: sqlite3.Row) -> Account:
        return Account(
            id=row["id"],
            handle=row["handle"],
            role=row["role"],
            created_at=row["created_at"],
            deactivated_at=row["deactivated_at"],
        )

    @staticmethod
    def _row_to_skill(row: sqlite3.Row) -> Skill:
        return Skill(
            id=row["id"],
            slug=row["slug"],
            display_name=row["display_name"],
            owner_id=row["owner_id"],
            summary=row["summary"],
            latest_version_id=row["latest_version_id"],
            comment_count=row["comment_count"],
            created_at=row["created_at"],
        )

    @staticmethod
    def _row_to_version(row: sqlite3.Row) -> SkillVersion:
        quality = None
        if row["quality"]:
            quality = QualityAssessment.model_validate_json(row["quality"])
        return SkillVersion(
            id=row["id"],
            skill_id=row["skill_id"],
            version=row["version"],
            changelog=row["changelog"],
            files=[SkillFile(**f) for f in json.loads(row["files"])],
            readme_ref=row["readme_ref"],
            quality=quality,
            created_at=row["created_at"],
        )
