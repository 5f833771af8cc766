"""Pydantic models and enums for the publish quality gate."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class TrustTier(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    TRUSTED = "trusted"


class QualityDecision(StrEnum):
    PASS = "pass"
    QUARANTINE = "quarantine"
    REJECT = "reject"


class SignalSummary(BaseModel):
    """Quality signals as persisted on a version (no fingerprint)."""

    model_config = ConfigDict(frozen=True)

    body_chars: int
    body_words: int
    unique_word_ratio: float = Field(ge=0.0, le=1.0)
    heading_count: int
    bullet_count: int
    template_marker_hits: int
    generic_summary: bool


class QualitySignals(SignalSummary):
    structural_fingerprint: str

    def summary(self) -> SignalSummary:
        return SignalSummary(**self.model_dump(exclude={"structural_fingerprint"}))


class QualityAssessment(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    decision: QualityDecision
    reason: str
    trust_tier: TrustTier
    similar_recent_count: int = 0
    signals: SignalSummary
    evaluated_at: int | None = None
