"""Tests for quality signal extraction."""

from __future__ import annotations

import pytest

from skillhub.quality.signals import (
    TEMPLATE_MARKERS,
    compute_quality_signals,
    count_template_markers,
    is_generic_summary,
)
from tests.conftest import RICH_README


class TestGenericSummary:
    @pytest.mark.parametrize(
        "summary",
        [
            "Expert guidance for docker.",
            "expert guidance for k8s-ops",
            "  Expert Guidance For x1.  ",
        ],
    )
    def test_generic(self, summary):
        assert is_generic_summary(summary) is True

    @pytest.mark.parametrize(
        "summary",
        [None, "", "Expert guidance for docker and compose.", "Versioned schema migrations."],
    )
    def test_specific(self, summary):
        assert is_generic_summary(summary) is False


class TestTemplateMarkers:
    def test_each_marker_counted_once(self):
        body = "Project ideas! more PROJECT IDEAS and tips and techniques"
        assert count_template_markers(body) == 2

    def test_all_markers(self):
        assert count_template_markers(" ".join(TEMPLATE_MARKERS)) == len(TEMPLATE_MARKERS)


class TestComputeSignals:
    def test_rich_document(self):
        signals = compute_quality_signals(RICH_README, "Versioned schema migrations.")
        assert signals.heading_count == 4
        assert signals.bullet_count == 6
        assert signals.body_words >= 80
        assert signals.body_chars >= 250
        assert signals.unique_word_ratio >= 0.45
        assert signals.template_marker_hits == 0
        assert signals.generic_summary is False

    def test_frontmatter_excluded_from_counts(self):
        text = "---\ndescription: alpha beta gamma\n---\nhello world"
        signals = compute_quality_signals(text)
        assert signals.body_words == 2
        assert signals.body_chars == len("helloworld")

    def test_empty_document(self):
        signals = compute_quality_signals("")
        assert signals.body_words == 0
        assert signals.unique_word_ratio == 0.0
        assert signals.structural_fingerprint == ""

    def test_headings_deeper_than_three_not_counted(self):
        signals = compute_quality_signals("# a1\n## b2\n### c3\n#### d4\n")
        assert signals.heading_count == 3

    def test_unique_ratio(self):
        signals = compute_quality_signals("spam spam spam eggs")
        assert signals.unique_word_ratio == pytest.approx(0.5)

    def test_summary_drops_fingerprint(self):
        signals = compute_quality_signals(RICH_README)
        summary = signals.summary()
        assert "structural_fingerprint" not in summary.model_dump()
        assert summary.body_words == signals.body_words
