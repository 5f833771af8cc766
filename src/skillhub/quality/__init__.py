"""Publish quality gate: signals, fingerprints, trust tiers, and verdicts."""

from skillhub.quality.fingerprint import to_structural_fingerprint
from skillhub.quality.models import (
    QualityAssessment,
    QualityDecision,
    QualitySignals,
    SignalSummary,
    TrustTier,
)
from skillhub.quality.signals import compute_quality_signals
from skillhub.quality.trust import classify_trust_tier

__all__ = [
    "QualityAssessment",
    "QualityDecision",
    "QualitySignals",
    "SignalSummary",
    "TrustTier",
    "classify_trust_tier",
    "compute_quality_signals",
    "to_structural_fingerprint",
]
