"""Read-side views: public comment listing and the moderator report queue."""

from __future__ import annotations

from skillhub.access import Actor, assert_moderator
from skillhub.moderation.models import CommentView, ReportedComment, ReportSample
from skillhub.moderation.store import CommentStore
from skillhub.registry.store import RegistryStore

REPORT_SAMPLE_SIZE = 5
MAX_REPORTED_LIMIT = 200
MAX_REPORTED_SCAN = 1000
NO_REASON = "No reason provided."


class ModerationQueries:
    def __init__(self, comments: CommentStore, registry: RegistryStore) -> None:
        self._comments = comments
        self._registry = registry

    def list_for_skill(self, skill_id: str, limit: int = 50) -> list[CommentView]:
        comments = self._comments.list_for_skill(
            skill_id, limit=max(1, limit), visible_only=True
        )
        handles = self._registry.get_handles(sorted({c.author_id for c in comments}))
        return [CommentView(comment=c, author_handle=handles.get(c.author_id)) for c in comments]

    def list_reported(self, actor: Actor, limit: int = 25) -> list[ReportedComment]:
        """Moderator queue: recently reported comments with sample reasons."""
        assert_moderator(actor)
        limit = max(1, min(limit, MAX_REPORTED_LIMIT))
        scan = min(limit * 5, MAX_REPORTED_SCAN)

        reported = [
            c for c in self._comments.list_recent(limit=scan) if c.moderation.report_count > 0
        ]
        reported.sort(key=lambda c: c.moderation.last_reported_at or 0, reverse=True)
        reported = reported[:limit]

        samples = {
            c.id: self._comments.list_reports_for_comment(c.id, limit=REPORT_SAMPLE_SIZE)
            for c in reported
        }
        account_ids = {c.author_id for c in reported}
        for reports in samples.values():
            account_ids.update(r.reporter_id for r in reports)
        handles = self._registry.get_handles(sorted(account_ids))

        items: list[ReportedComment] = []
        for comment in reported:
            skill = self._registry.get_skill(comment.skill_id)
            items.append(
                ReportedComment(
                    comment=comment,
                    skill_slug=skill.slug if skill else None,
                    skill_owner_id=skill.owner_id if skill else None,
                    author_handle=handles.get(comment.author_id),
                    reports=[
                        ReportSample(
                            reason=r.reason.strip() or NO_REASON,
                            created_at=r.created_at,
                            reporter_id=r.reporter_id,
                            reporter_handle=handles.get(r.reporter_id),
                        )
                        for r in samples[comment.id]
                    ],
                )
            )
        return items
