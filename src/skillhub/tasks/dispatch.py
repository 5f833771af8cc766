"""Dispatcher: at-least-once delivery of outbox tasks to their consumers."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from skillhub.tasks.models import DrainReport, StatEvent, Task, TaskKind, TaskStatus
from skillhub.tasks.queue import TaskQueue
from skillhub.tasks.webhooks import WebhookSender

logger = logging.getLogger(__name__)

TaskHandler = Callable[[Task], None]


class StatAggregator(Protocol):
    def emit(self, skill_id: str, kind: str, *, event_id: str) -> None: ...


def stat_handler(aggregator: StatAggregator) -> TaskHandler:
    def handle(task: Task) -> None:
        event = StatEvent.model_validate(task.payload)
        aggregator.emit(event.skill_id, event.kind, event_id=task.id)

    return handle


def webhook_handler(sender: WebhookSender) -> TaskHandler:
    def handle(task: Task) -> None:
        sender.send_publish(task.payload)

    return handle


class Dispatcher:
    def __init__(
        self,
        queue: TaskQueue,
        handlers: dict[str, TaskHandler],
        *,
        max_attempts: int = 5,
    ) -> None:
        self._queue = queue
        self._handlers = handlers
        self._max_attempts = max_attempts

    @classmethod
    def for_hub(
        cls,
        queue: TaskQueue,
        aggregator: StatAggregator,
        sender: WebhookSender,
        *,
        max_attempts: int = 5,
    ) -> Dispatcher:
        return cls(
            queue,
            {
                TaskKind.STAT: stat_handler(aggregator),
                TaskKind.WEBHOOK_PUBLISH: webhook_handler(sender),
            },
            max_attempts=max_attempts,
        )

    def drain(self, limit: int = 100) -> DrainReport:
        report = DrainReport()
        for task in self._queue.pending(limit):
            handler = self._handlers.get(task.kind)
            if handler is None:
                logger.warning(f"No handler for task kind {task.kind!r} ({task.id[:8]})")
                self._record_failure(task, f"no handler for {task.kind}", report)
                continue
            try:
                handler(task)
            except Exception as e:
                logger.warning(f"Task {task.kind} {task.id[:8]} failed: {e}")
                self._record_failure(task, str(e), report)
                continue
            self._queue.mark_delivered(task.id)
            report.delivered += 1
        return report

    def _record_failure(self, task: Task, error: str, report: DrainReport) -> None:
        status = self._queue.mark_attempt_failed(
            task.id, error, max_attempts=self._max_attempts
        )
        if status == TaskStatus.FAILED:
            report.failed += 1
        else:
            report.retried += 1
