"""Service wiring shared by the HTTP server and the CLI."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import httpx

from skillhub.access import AccessControl
from skillhub.config import HubConfig
from skillhub.moderation.audit import AuditEmitter
from skillhub.moderation.ledger import ReportLedger
from skillhub.moderation.queries import ModerationQueries
from skillhub.moderation.state_machine import CommentStateMachine
from skillhub.moderation.store import CommentStore
from skillhub.quality.engine import QualityGate
from skillhub.registry.documents import FileDocumentStore
from skillhub.registry.publish import Publisher
from skillhub.registry.store import RegistryStore
from skillhub.storage.database import Database, now_ms
from skillhub.tasks.dispatch import Dispatcher
from skillhub.tasks.queue import TaskQueue
from skillhub.tasks.webhooks import WebhookSender


class Hub:
    """Every store and service, built over one Database."""

    def __init__(
        self,
        db: Database,
        documents: FileDocumentStore,
        config: HubConfig | None = None,
        *,
        clock: Callable[[], int] = now_ms,
        webhook_client: httpx.Client | None = None,
    ) -> None:
        self.config = config or HubConfig()
        self.db = db
        self.documents = documents
        self.registry = RegistryStore(db)
        self.comments = CommentStore(db)
        self.queue = TaskQueue(db)
        self.access = AccessControl(self.registry)

        emitter = AuditEmitter(self.comments, self.queue)
        self.publisher = Publisher(
            db,
            self.registry,
            documents,
            self.queue,
            gate=QualityGate(self.registry, documents),
            clock=clock,
        )
        self.state_machine = CommentStateMachine(
            db, self.comments, self.registry, emitter, clock=clock
        )
        self.ledger = ReportLedger(db, self.comments, emitter, clock=clock)
        self.queries = ModerationQueries(self.comments, self.registry)

        self.webhooks = WebhookSender(
            self.config.webhook_url,
            timeout=self.config.webhook_timeout,
            client=webhook_client,
        )
        self.dispatcher = Dispatcher.for_hub(
            self.queue,
            self.registry,
            self.webhooks,
            max_attempts=self.config.task_max_attempts,
        )

    @classmethod
    def open(
        cls,
        db_path: str | Path,
        documents_dir: Path,
        config: HubConfig | None = None,
        **kwargs,
    ) -> Hub:
        if str(db_path) != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        return cls(Database(str(db_path)), FileDocumentStore(documents_dir), config, **kwargs)

    def close(self) -> None:
        self.webhooks.close()
        self.db.close()
