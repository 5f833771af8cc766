"""Tests for the outbound task queue, dispatcher, and webhook sender."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import httpx
import pytest

from skillhub.registry.models import Skill
from skillhub.registry.store import RegistryStore
from skillhub.tasks.dispatch import Dispatcher
from skillhub.tasks.models import StatKind, TaskKind, TaskStatus
from skillhub.tasks.queue import TaskQueue
from skillhub.tasks.webhooks import WebhookSender, build_publish_payload
from tests.conftest import make_account, make_skill

PUBLISH_EVENT = {
    "slug": "demo-skill",
    "display_name": "Demo Skill",
    "version": "1.2.0",
    "summary": "Does demo things.",
    "owner_handle": "alice",
    "tags": ["demo", "test"],
}


def _skill() -> Skill:
    return Skill(id="s1", slug="s1", display_name="S1", owner_id="o", created_at=0)


@pytest.fixture
def queue(db):
    return TaskQueue(db)


class TestTaskQueue:
    def test_enqueue_and_pending(self, queue):
        task = queue.enqueue(TaskKind.STAT, {"skill_id": "s1", "kind": "comment"})
        pending = queue.pending()
        assert [t.id for t in pending] == [task.id]
        assert pending[0].payload == {"skill_id": "s1", "kind": "comment"}
        assert pending[0].status == TaskStatus.PENDING

    def test_mark_delivered(self, queue):
        task = queue.enqueue(TaskKind.STAT, {})
        queue.mark_delivered(task.id)
        stored = queue.get(task.id)
        assert stored.status == TaskStatus.DELIVERED
        assert stored.attempts == 1
        assert stored.delivered_at is not None
        assert queue.pending() == []

    def test_failed_after_max_attempts(self, queue):
        task = queue.enqueue(TaskKind.STAT, {})
        assert queue.mark_attempt_failed(task.id, "e1", max_attempts=2) == TaskStatus.PENDING
        assert queue.mark_attempt_failed(task.id, "e2", max_attempts=2) == TaskStatus.FAILED
        stored = queue.get(task.id)
        assert stored.attempts == 2
        assert stored.last_error == "e2"

    def test_counts(self, queue):
        a = queue.enqueue(TaskKind.STAT, {})
        queue.enqueue(TaskKind.STAT, {})
        queue.mark_delivered(a.id)
        assert queue.counts() == {"delivered": 1, "pending": 1}


class TestDispatcher:
    def test_delivers_to_handler(self, queue):
        handler = MagicMock()
        task = queue.enqueue("custom", {"x": 1})
        report = Dispatcher(queue, {"custom": handler}).drain()

        assert report.delivered == 1
        handler.assert_called_once()
        assert handler.call_args.args[0].id == task.id
        assert queue.get(task.id).status == TaskStatus.DELIVERED

    def test_failure_retried_then_failed(self, queue):
        handler = MagicMock(side_effect=RuntimeError("down"))
        task = queue.enqueue("custom", {})
        dispatcher = Dispatcher(queue, {"custom": handler}, max_attempts=2)

        first = dispatcher.drain()
        assert first.retried == 1
        assert queue.get(task.id).status == TaskStatus.PENDING

        second = dispatcher.drain()
        assert second.failed == 1
        stored = queue.get(task.id)
        assert stored.status == TaskStatus.FAILED
        assert stored.last_error == "down"

        assert dispatcher.drain().delivered == 0
        assert handler.call_count == 2

    def test_unknown_kind_counts_as_failure(self, queue):
        queue.enqueue("mystery", {})
        report = Dispatcher(queue, {}, max_attempts=1).drain()
        assert report.failed == 1

    def test_one_failure_does_not_block_others(self, queue):
        ok = MagicMock()
        bad = MagicMock(side_effect=ValueError("nope"))
        queue.enqueue("bad", {})
        queue.enqueue("ok", {})
        report = Dispatcher(queue, {"bad": bad, "ok": ok}).drain()
        assert report.delivered == 1
        assert report.retried == 1


class TestStatAggregation:
    def test_comment_count_follows_visibility(self, hub):
        author = make_account(hub, "author")
        skill = make_skill(hub)
        comment = hub.state_machine.add(author, skill.id, "hello")
        hub.state_machine.add(author, skill.id, "again")
        hub.dispatcher.drain()
        assert hub.registry.get_skill(skill.id).comment_count == 2

        hub.state_machine.remove(author, comment.id)
        hub.dispatcher.drain()
        assert hub.registry.get_skill(skill.id).comment_count == 1

    def test_apply_stat_idempotent(self, db):
        registry = RegistryStore(db)
        registry.insert_skill(_skill())
        assert registry.apply_stat("e1", "s1", StatKind.COMMENT) is True
        assert registry.apply_stat("e1", "s1", StatKind.COMMENT) is False
        assert registry.get_skill("s1").comment_count == 1

    def test_out_of_order_events_converge(self, db):
        registry = RegistryStore(db)
        registry.insert_skill(_skill())
        # A retried comment event can arrive after its matching uncomment.
        registry.apply_stat("e2", "s1", StatKind.UNCOMMENT)
        registry.apply_stat("e1", "s1", StatKind.COMMENT)
        assert registry.get_skill("s1").comment_count == 0

        registry.apply_stat("e3", "s1", StatKind.COMMENT)
        assert registry.get_skill("s1").comment_count == 1

    def test_redelivery_does_not_double_count(self, hub):
        skill = make_skill(hub)
        task = hub.queue.enqueue(TaskKind.STAT, {"skill_id": skill.id, "kind": "comment"})
        hub.dispatcher.drain()
        # At-least-once: the same task may be handed to the consumer again.
        hub.registry.emit(skill.id, "comment", event_id=task.id)
        assert hub.registry.get_skill(skill.id).comment_count == 1


class TestWebhookSender:
    def test_payload_shape(self):
        payload = build_publish_payload(PUBLISH_EVENT)
        embed = payload["embeds"][0]
        assert embed["title"] == "Demo Skill v1.2.0"
        assert embed["description"] == "Does demo things."
        assert {"name": "Owner", "value": "@alice", "inline": True} in embed["fields"]

    def test_disabled_without_url(self):
        sender = WebhookSender(None, client=MagicMock())
        assert sender.enabled is False
        assert sender.send_publish(PUBLISH_EVENT) is False

    def test_posts_json(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(204)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        sender = WebhookSender("https://hooks.example.test/x", client=client)
        assert sender.send_publish(PUBLISH_EVENT) is True
        assert len(seen) == 1
        assert json.loads(seen[0].content)["content"] == "New skill published"

    def test_error_status_raises(self):
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(500)))
        sender = WebhookSender("https://hooks.example.test/x", client=client)
        with pytest.raises(RuntimeError, match="500"):
            sender.send_publish(PUBLISH_EVENT)

    def test_failed_webhook_task_is_retried(self, db):
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(502)))
        queue = TaskQueue(db)
        dispatcher = Dispatcher.for_hub(
            queue,
            MagicMock(),
            WebhookSender("https://hooks.example.test/x", client=client),
            max_attempts=3,
        )
        task = queue.enqueue(TaskKind.WEBHOOK_PUBLISH, PUBLISH_EVENT)
        report = dispatcher.drain()
        assert report.retried == 1
        assert "502" in queue.get(task.id).last_error
