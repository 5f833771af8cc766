"""Trust tier classification from account age and prior publishing volume."""

from __future__ import annotations

from skillhub.quality.models import TrustTier

DAY_MS = 24 * 60 * 60 * 1000
ACCOUNT_AGE_LOW_MS = 30 * DAY_MS
ACCOUNT_AGE_MEDIUM_MS = 90 * DAY_MS
SKILLS_LOW = 10
SKILLS_MEDIUM = 50


def classify_trust_tier(account_age_ms: int, prior_skill_count: int) -> TrustTier:
    if account_age_ms < ACCOUNT_AGE_LOW_MS or prior_skill_count < SKILLS_LOW:
        return TrustTier.LOW
    if account_age_ms < ACCOUNT_AGE_MEDIUM_MS or prior_skill_count < SKILLS_MEDIUM:
        return TrustTier.MEDIUM
    return TrustTier.TRUSTED
