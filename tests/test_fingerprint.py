"""Tests for structural fingerprints."""

from __future__ import annotations

from skillhub.quality.fingerprint import (
    MAX_FINGERPRINT_LINES,
    strip_frontmatter,
    to_structural_fingerprint,
    tokenize_words,
    word_bucket,
)


class TestStripFrontmatter:
    def test_removes_leading_block(self):
        text = "---\nname: x\ndescription: y\n---\n# Title\n"
        assert strip_frontmatter(text) == "# Title\n"

    def test_without_frontmatter_is_unchanged(self):
        assert strip_frontmatter("# Title\nbody") == "# Title\nbody"

    def test_only_first_block_removed(self):
        text = "---\na: 1\n---\nbody\n---\nb: 2\n---\n"
        assert strip_frontmatter(text) == "body\n---\nb: 2\n---\n"


class TestTokenize:
    def test_lowercases_and_drops_single_chars(self):
        words = tokenize_words("A Quick brown-fox, it's 2 go")
        assert words == ["quick", "brown-fox", "it's", "go"]

    def test_word_buckets(self):
        assert word_bucket("one two") == "s"
        assert word_bucket("one two three") == "m"
        assert word_bucket("one two three four five six") == "m"
        assert word_bucket("one two three four five six seven") == "l"


class TestFingerprint:
    def test_line_kinds(self):
        md = (
            "# Title\n## Section name\n### Deep\n"
            "- bullet item\n* star item\n1. numbered step\nplain"
        )
        assert to_structural_fingerprint(md) == "h1:s|h2:s|h3:s|b:s|b:s|n:s|p:s"

    def test_blank_lines_and_frontmatter_ignored(self):
        md = "---\ndescription: hi\n---\n\n# Title\n\n\nsome text here\n"
        assert to_structural_fingerprint(md) == "h1:s|p:m"

    def test_deterministic(self):
        md = "# A\n\n- one two three\n- four five\n\nParagraph with several words in it today."
        assert to_structural_fingerprint(md) == to_structural_fingerprint(md)

    def test_wording_change_inside_bucket_keeps_fingerprint(self):
        before = "# Guide\n- install the package\n"
        after = "# Guide\n- configure the package\n"
        assert to_structural_fingerprint(before) == to_structural_fingerprint(after)

    def test_crossing_bucket_boundary_changes_fingerprint(self):
        before = "# Guide\n- install package\n"
        after = "# Guide\n- install the package\n"
        assert to_structural_fingerprint(before) == "h1:s|b:s"
        assert to_structural_fingerprint(after) == "h1:s|b:m"

    def test_truncates_to_max_lines(self):
        md = "\n".join(f"line {i}" for i in range(MAX_FINGERPRINT_LINES + 20))
        assert len(to_structural_fingerprint(md).split("|")) == MAX_FINGERPRINT_LINES

    def test_empty_document(self):
        assert to_structural_fingerprint("") == ""
