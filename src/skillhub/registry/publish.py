"""Publish pipeline: request validation, quality gate, and version insertion."""

from __future__ import annotations

import logging
import re
import sqlite3
import uuid
from collections.abc import Callable
from pathlib import PurePosixPath

from skillhub.access import Actor, assert_moderator
from skillhub.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    QualityRejectError,
    ValidationError,
)
from skillhub.quality.engine import QualityGate
from skillhub.quality.models import QualityAssessment, QualityDecision
from skillhub.registry.documents import DocumentStore
from skillhub.registry.models import (
    PublishRequest,
    PublishResult,
    QuarantineEntry,
    Skill,
    SkillFile,
    SkillVersion,
)
from skillhub.registry.store import RegistryStore
from skillhub.storage.database import Database, now_ms
from skillhub.tasks.models import TaskKind
from skillhub.tasks.queue import TaskQueue

logger = logging.getLogger(__name__)

MAX_TOTAL_BYTES = 50 * 1024 * 1024
README_NAMES = ("skill.md", "skills.md")

_SLUG_RE = re.compile(r"^[a-z0-9][a-z0-9-]*$")
# Semantic version: MAJOR.MINOR.PATCH with optional pre-release and build metadata
_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)

TEXT_EXTENSIONS = frozenset(
    {
        ".md", ".mdx", ".txt", ".rst", ".json", ".jsonc", ".yaml", ".yml", ".toml",
        ".ini", ".cfg", ".conf", ".env", ".xml", ".csv", ".tsv", ".html", ".css",
        ".js", ".mjs", ".cjs", ".ts", ".tsx", ".jsx", ".py", ".rb", ".go", ".rs",
        ".java", ".kt", ".swift", ".c", ".h", ".cpp", ".hpp", ".cs", ".php", ".lua",
        ".sh", ".bash", ".zsh", ".fish", ".ps1", ".sql", ".graphql", ".svg",
    }
)
TEXT_CONTENT_TYPES = frozenset(
    {
        "application/json",
        "application/xml",
        "application/yaml",
        "application/x-yaml",
        "application/toml",
        "application/javascript",
        "application/typescript",
        "image/svg+xml",
    }
)


def sanitize_path(path: str) -> str | None:
    """Normalize a bundle path; None when it escapes the bundle root or is empty."""
    cleaned = path.strip().replace("\\", "/")
    while cleaned.startswith("./"):
        cleaned = cleaned[2:]
    cleaned = cleaned.lstrip("/")
    if not cleaned:
        return None
    parts = cleaned.split("/")
    if any(part in ("", ".", "..") for part in parts):
        return None
    return cleaned


def is_text_file(path: str, content_type: str | None = None) -> bool:
    if content_type:
        base = content_type.split(";", 1)[0].strip().lower()
        if base.startswith("text/") or base in TEXT_CONTENT_TYPES:
            return True
    return PurePosixPath(path).suffix.lower() in TEXT_EXTENSIONS


def is_valid_semver(version: str) -> bool:
    return _SEMVER_RE.match(version) is not None


def parse_frontmatter(text: str) -> dict[str, str]:
    """Parse simple ``key: value`` frontmatter between leading ``---`` markers."""
    lines = text.split("\n")
    if not lines or lines[0].strip() != "---":
        return {}
    frontmatter: dict[str, str] = {}
    for line in lines[1:]:
        if line.strip() == "---":
            return frontmatter
        if ":" in line and not line.startswith((" ", "\t")):
            key, _, value = line.partition(":")
            frontmatter[key.strip()] = value.strip().strip('"').strip("'")
    return {}


class Publisher:
    def __init__(
        self,
        db: Database,
        store: RegistryStore,
        documents: DocumentStore,
        queue: TaskQueue,
        *,
        gate: QualityGate | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._db = db
        self._store = store
        self._documents = documents
        self._queue = queue
        self._gate = gate or QualityGate(store, documents)
        self._clock = clock

    def publish(
        self,
        actor: Actor,
        request: PublishRequest,
        *,
        contents: dict[str, str] | None = None,
    ) -> PublishResult:
        """Publish a skill version.

        ``contents`` maps storage refs to file text not yet written to the
        document store. Those blobs are stored only once the request has
        passed validation and the quality gate.
        """
        contents = contents or {}
        slug = request.slug.strip().lower()
        display_name = request.display_name.strip()
        version = request.version.strip()
        files = self._validate(slug, display_name, version, request.files)
        readme = next(f for f in files if f.path.lower() in README_NAMES)

        existing = self._store.get_skill_by_slug(slug)
        if existing is not None:
            if existing.owner_id != actor.id:
                raise PermissionDeniedError("Only the owner can publish new versions")
            if self._store.has_version(existing.id, version):
                raise ConflictError("Version already exists")

        readme_text = contents.get(readme.storage_ref)
        if readme_text is None:
            readme_text = self._documents.fetch_text(readme.storage_ref)
        summary = parse_frontmatter(readme_text).get("description") or None
        now = self._clock()

        assessment: QualityAssessment | None = None
        if existing is None:
            owner = self._store.get_account(actor.id)
            if owner is None:
                raise NotFoundError("Owner not found")
            assessment = self._gate.assess(
                owner, slug=slug, readme_text=readme_text, summary=summary, now=now
            )
            if assessment.decision == QualityDecision.REJECT:
                raise QualityRejectError(assessment)

        for text in contents.values():
            self._documents.put_text(text)

        skill_id = existing.id if existing else str(uuid.uuid4())
        skill_version = SkillVersion(
            id=str(uuid.uuid4()),
            skill_id=skill_id,
            version=version,
            changelog=request.changelog.strip(),
            files=files,
            readme_ref=readme.storage_ref,
            quality=assessment,
            created_at=now,
        )
        try:
            with self._db.transaction():
                if existing is None:
                    self._store.insert_skill(
                        Skill(
                            id=skill_id,
                            slug=slug,
                            display_name=display_name,
                            owner_id=actor.id,
                            summary=summary,
                            created_at=now,
                        )
                    )
                self._store.insert_version(skill_version)
                self._store.update_skill_listing(
                    skill_id,
                    display_name=display_name,
                    summary=summary,
                    latest_version_id=skill_version.id,
                )
                self._queue.enqueue(
                    TaskKind.WEBHOOK_PUBLISH,
                    {
                        "slug": slug,
                        "display_name": display_name,
                        "version": version,
                        "summary": summary,
                        "owner_handle": self._owner_handle(actor.id),
                        "tags": [t.strip() for t in request.tags if t.strip()],
                    },
                )
        except sqlite3.IntegrityError as e:
            raise ConflictError(f"Skill {slug}@{version} already exists") from e

        logger.info(
            f"Published {slug}@{version} by {actor.id}"
            + (f" ({assessment.decision})" if assessment else "")
        )
        return PublishResult(
            skill_id=skill_id,
            version_id=skill_version.id,
            is_new_skill=existing is None,
            quality=assessment,
        )

    def list_quarantined(self, actor: Actor, *, limit: int = 50) -> list[QuarantineEntry]:
        assert_moderator(actor)
        entries: list[QuarantineEntry] = []
        for version in self._store.list_versions_by_decision(
            QualityDecision.QUARANTINE, limit=limit
        ):
            skill = self._store.get_skill(version.skill_id)
            if skill is None:
                continue
            entries.append(
                QuarantineEntry(
                    slug=skill.slug,
                    display_name=skill.display_name,
                    owner_id=skill.owner_id,
                    version=version,
                )
            )
        return entries

    def _validate(
        self,
        slug: str,
        display_name: str,
        version: str,
        files: list[SkillFile],
    ) -> list[SkillFile]:
        if not slug or not display_name:
            raise ValidationError("Slug and display name required")
        if not _SLUG_RE.match(slug):
            raise ValidationError("Slug must be lowercase and url-safe")
        if not is_valid_semver(version):
            raise ValidationError("Version must be valid semver")

        safe: list[SkillFile] = []
        for file in files:
            path = sanitize_path(file.path)
            if path is None:
                raise ValidationError("Invalid file paths")
            safe.append(file.model_copy(update={"path": path}))
        if any(not is_text_file(f.path, f.content_type) for f in safe):
            raise ValidationError("Only text-based files are allowed")
        if sum(f.size for f in safe) > MAX_TOTAL_BYTES:
            raise ValidationError("Skill bundle exceeds 50MB limit")
        if not any(f.path.lower() in README_NAMES for f in safe):
            raise ValidationError("SKILL.md is required")
        return safe

    def _owner_handle(self, owner_id: str) -> str | None:
        account = self._store.get_account(owner_id)
        return account.handle if account else None
