"""Structural fingerprints: line-shape token sequences for near-duplicate detection."""

from __future__ import annotations

import re

_FRONTMATTER_RE = re.compile(r"^---\s*\n.*?\n---\s*\n?", re.MULTILINE | re.DOTALL)
_WORD_RE = re.compile(r"[a-z0-9][a-z0-9'-]*")
_BULLET_RE = re.compile(r"^[-*]\s+")
_NUMBERED_RE = re.compile(r"^\d+\.\s+")

MAX_FINGERPRINT_LINES = 80
FINGERPRINT_DELIMITER = "|"


def strip_frontmatter(raw: str) -> str:
    """Remove the first ``---`` delimited metadata block."""
    return _FRONTMATTER_RE.sub("", raw, count=1)


def tokenize_words(text: str) -> list[str]:
    return [word for word in _WORD_RE.findall(text.lower()) if len(word) > 1]


def word_bucket(text: str) -> str:
    words = len(tokenize_words(text))
    if words <= 2:
        return "s"
    if words <= 6:
        return "m"
    return "l"


def _line_token(line: str) -> str:
    if line.startswith("### "):
        return f"h3:{word_bucket(line[4:])}"
    if line.startswith("## "):
        return f"h2:{word_bucket(line[3:])}"
    if line.startswith("# "):
        return f"h1:{word_bucket(line[2:])}"
    if _BULLET_RE.match(line):
        return f"b:{word_bucket(_BULLET_RE.sub('', line, count=1))}"
    if _NUMBERED_RE.match(line):
        return f"n:{word_bucket(_NUMBERED_RE.sub('', line, count=1))}"
    return f"p:{word_bucket(line)}"


def to_structural_fingerprint(markdown: str) -> str:
    body = strip_frontmatter(markdown)
    lines = [line.strip() for line in body.split("\n")]
    lines = [line for line in lines if line][:MAX_FINGERPRINT_LINES]
    return FINGERPRINT_DELIMITER.join(_line_token(line) for line in lines)
