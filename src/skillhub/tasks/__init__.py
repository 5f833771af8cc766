"""Outbound task queue: transactional outbox, dispatcher, and webhook delivery."""

from skillhub.tasks.dispatch import Dispatcher, StatAggregator
from skillhub.tasks.models import StatEvent, StatKind, Task, TaskKind, TaskStatus
from skillhub.tasks.queue import TaskQueue
from skillhub.tasks.webhooks import WebhookSender

__all__ = [
    "Dispatcher",
    "StatAggregator",
    "StatEvent",
    "StatKind",
    "Task",
    "TaskKind",
    "TaskQueue",
    "TaskStatus",
    "WebhookSender",
]
