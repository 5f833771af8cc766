"""Objective text metrics derived from a submission's primary document."""

from __future__ import annotations

import re

from skillhub.quality.fingerprint import (
    strip_frontmatter,
    to_structural_fingerprint,
    tokenize_words,
)
from skillhub.quality.models import QualitySignals

TEMPLATE_MARKERS: tuple[str, ...] = (
    "expert guidance for",
    "practical skill guidance",
    "step-by-step tutorials",
    "tips and techniques",
    "project ideas",
    "resource recommendations",
    "help with this skill",
    "learning guidance",
)

_WHITESPACE_RE = re.compile(r"\s+")
_HEADING_RE = re.compile(r"^#{1,3}\s+")
_BULLET_RE = re.compile(r"^[-*]\s+")
_GENERIC_SUMMARY_RE = re.compile(r"^expert guidance for [a-z0-9-]+\.?$")


def is_generic_summary(summary: str | None) -> bool:
    """True for auto-generated summaries shaped like ``Expert guidance for <slug>.``"""
    text = (summary or "").strip().lower()
    return _GENERIC_SUMMARY_RE.fullmatch(text) is not None


def count_template_markers(body: str) -> int:
    lowered = body.lower()
    return sum(1 for marker in TEMPLATE_MARKERS if marker in lowered)


def compute_quality_signals(readme_text: str, summary: str | None = None) -> QualitySignals:
    body = strip_frontmatter(readme_text)
    words = tokenize_words(body)
    lines = [line.strip() for line in body.split("\n")]
    return QualitySignals(
        body_chars=len(_WHITESPACE_RE.sub("", body)),
        body_words=len(words),
        unique_word_ratio=len(set(words)) / len(words) if words else 0.0,
        heading_count=sum(1 for line in lines if _HEADING_RE.match(line)),
        bullet_count=sum(1 for line in lines if _BULLET_RE.match(line)),
        template_marker_hits=count_template_markers(body),
        generic_summary=is_generic_summary(summary),
        structural_fingerprint=to_structural_fingerprint(readme_text),
    )
