"""Quality scoring, tiered verdicts, and the recent-duplicate scan."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from skillhub.access import Account
from skillhub.errors import DocumentNotFoundError
from skillhub.quality.fingerprint import to_structural_fingerprint
from skillhub.quality.models import (
    QualityAssessment,
    QualityDecision,
    QualitySignals,
    TrustTier,
)
from skillhub.quality.signals import compute_quality_signals
from skillhub.quality.trust import DAY_MS, classify_trust_tier
from skillhub.registry.documents import DocumentStore
from skillhub.registry.models import ActivityEntry, ActivityLookup

logger = logging.getLogger(__name__)

QUALITY_WINDOW_MS = DAY_MS
QUALITY_ACTIVITY_LIMIT = 60

# Tier-dependent thresholds
_REJECT_WORDS: dict[TrustTier, int] = {
    TrustTier.LOW: 45,
    TrustTier.MEDIUM: 35,
    TrustTier.TRUSTED: 28,
}
_REJECT_CHARS: dict[TrustTier, int] = {
    TrustTier.LOW: 260,
    TrustTier.MEDIUM: 180,
    TrustTier.TRUSTED: 140,
}
_QUARANTINE_SCORE: dict[TrustTier, int] = {
    TrustTier.LOW: 72,
    TrustTier.MEDIUM: 60,
    TrustTier.TRUSTED: 50,
}
_SIMILARITY_REJECT: dict[TrustTier, int] = {
    TrustTier.LOW: 5,
    TrustTier.MEDIUM: 8,
    TrustTier.TRUSTED: 12,
}

REASON_TEMPLATE_SPAM = "Skill appears to be repeated template spam from this account."
REASON_THIN_CONTENT = (
    "Skill content is too thin or templated. Add meaningful, specific documentation."
)
REASON_QUARANTINE = "Skill quality is low and requires moderation review before being listed."
REASON_PASS = "Quality checks passed."


def score_quality(signals: QualitySignals) -> int:
    score = 100
    if signals.body_chars < 250:
        score -= 28
    if signals.body_words < 80:
        score -= 24
    if signals.unique_word_ratio < 0.45:
        score -= 14
    if signals.heading_count < 2:
        score -= 10
    if signals.bullet_count < 3:
        score -= 8
    score -= min(28, signals.template_marker_hits * 9)
    if signals.generic_summary:
        score -= 20
    return max(0, score)


def evaluate_quality(
    signals: QualitySignals,
    trust_tier: TrustTier,
    similar_recent_count: int = 0,
    *,
    evaluated_at: int | None = None,
) -> QualityAssessment:
    score = score_quality(signals)
    repeated_template = similar_recent_count >= _SIMILARITY_REJECT[trust_tier]
    hard_reject = (
        signals.body_words < _REJECT_WORDS[trust_tier]
        or signals.body_chars < _REJECT_CHARS[trust_tier]
        or (signals.template_marker_hits >= 3 and signals.body_words < 120)
        or repeated_template
    )

    if hard_reject:
        decision = QualityDecision.REJECT
        reason = REASON_TEMPLATE_SPAM if repeated_template else REASON_THIN_CONTENT
    elif score < _QUARANTINE_SCORE[trust_tier]:
        decision = QualityDecision.QUARANTINE
        reason = REASON_QUARANTINE
    else:
        decision = QualityDecision.PASS
        reason = REASON_PASS

    return QualityAssessment(
        score=score,
        decision=decision,
        reason=reason,
        trust_tier=trust_tier,
        similar_recent_count=similar_recent_count,
        signals=signals.summary(),
        evaluated_at=evaluated_at,
    )


def count_similar_recent(
    activity: Iterable[ActivityEntry],
    fingerprint: str,
    documents: DocumentStore,
    *,
    slug: str,
    now: int,
    window_ms: int = QUALITY_WINDOW_MS,
) -> int:
    """Count the owner's recent skills whose primary document has the same fingerprint.

    Entries for the slug being published, entries outside the window, and
    entries without a locatable document are skipped.
    """
    cutoff = now - window_ms
    count = 0
    for entry in activity:
        if entry.slug == slug or entry.created_at < cutoff or not entry.latest_document_ref:
            continue
        try:
            text = documents.fetch_text(entry.latest_document_ref)
        except DocumentNotFoundError:
            logger.debug(f"Skipping {entry.slug}: primary document missing")
            continue
        if to_structural_fingerprint(text) == fingerprint:
            count += 1
    return count


class QualityGate:
    """Evaluates first-time skill submissions for the publish pipeline."""

    def __init__(
        self,
        activity: ActivityLookup,
        documents: DocumentStore,
        *,
        activity_limit: int = QUALITY_ACTIVITY_LIMIT,
        window_ms: int = QUALITY_WINDOW_MS,
    ) -> None:
        self._activity = activity
        self._documents = documents
        self._activity_limit = activity_limit
        self._window_ms = window_ms

    def assess(
        self,
        owner: Account,
        *,
        slug: str,
        readme_text: str,
        summary: str | None,
        now: int,
    ) -> QualityAssessment:
        recent = self._activity.list_recent_activity(owner.id, self._activity_limit)
        trust_tier = classify_trust_tier(now - owner.created_at, len(recent))
        signals = compute_quality_signals(readme_text, summary)
        similar = count_similar_recent(
            recent,
            signals.structural_fingerprint,
            self._documents,
            slug=slug,
            now=now,
            window_ms=self._window_ms,
        )
        assessment = evaluate_quality(signals, trust_tier, similar, evaluated_at=now)
        logger.info(
            f"Quality gate for {slug}: {assessment.decision} "
            f"(score={assessment.score}, tier={trust_tier}, similar={similar})"
        )
        return assessment
