"""Shared fixtures for skillhub tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from skillhub.access import Account, Actor, Role
from skillhub.hub import Hub
from skillhub.moderation.models import Comment
from skillhub.quality.trust import DAY_MS
from skillhub.registry.documents import FileDocumentStore
from skillhub.registry.models import Skill
from skillhub.storage.database import Database

BASE_MS = 1_767_225_600_000  # 2026-01-01T00:00:00Z

RICH_README = """---
name: sqlite-migrations
description: Versioned schema migrations for embedded SQLite databases.
---

# SQLite Migrations

Keep embedded database schemas evolving safely while applications ship new
releases to thousands of desktop machines.

## When to use

- Adding columns or indexes without losing existing rows
- Renaming tables while older clients still read them
- Backfilling derived values after a release

## Workflow

1. Record every schema version inside a dedicated bookkeeping table.
2. Apply pending scripts in ascending order within one transaction.
3. Verify integrity with pragma checks before committing.

## Pitfalls

- SQLite cannot drop columns on legacy builds, so copy data into a replacement table.
- Long migrations block writers; split heavy backfills into batches.
- Foreign key enforcement is disabled by default and must be switched on per connection.
"""

THIN_README = "# Tips\n\n" + " ".join(f"w{i:02d}" for i in range(40)) + "\n"


class FakeClock:
    """Deterministic epoch-millisecond clock."""

    def __init__(self, start: int = BASE_MS) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def db():
    database = Database(":memory:")
    yield database
    database.close()


@pytest.fixture
def documents(tmp_path: Path) -> FileDocumentStore:
    return FileDocumentStore(tmp_path / "documents")


@pytest.fixture
def hub(db: Database, documents: FileDocumentStore, clock: FakeClock) -> Hub:
    return Hub(db, documents, clock=clock)


def make_account(
    hub: Hub,
    account_id: str,
    *,
    role: Role = Role.USER,
    age_days: int = 365,
    deactivated: bool = False,
) -> Actor:
    now = BASE_MS
    account = Account(
        id=account_id,
        handle=f"{account_id}-handle",
        role=role,
        created_at=now - age_days * DAY_MS,
        deactivated_at=now if deactivated else None,
    )
    hub.registry.save_account(account)
    return account.as_actor()


def make_skill(hub: Hub, slug: str = "demo-skill", owner_id: str = "owner") -> Skill:
    skill = Skill(
        id=f"skill-{slug}",
        slug=slug,
        display_name=slug.replace("-", " ").title(),
        owner_id=owner_id,
        created_at=BASE_MS,
    )
    hub.registry.insert_skill(skill)
    return skill


def post_comment(hub: Hub, author: Actor, skill: Skill, body: str = "Nice skill!") -> Comment:
    return hub.state_machine.add(author, skill.id, body)
