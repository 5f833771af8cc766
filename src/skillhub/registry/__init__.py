"""Skill registry: accounts, skills, versions, documents, and publishing."""

from skillhub.registry.models import (
    ActivityEntry,
    PublishRequest,
    PublishResult,
    QuarantineEntry,
    Skill,
    SkillFile,
    SkillVersion,
)

__all__ = [
    "ActivityEntry",
    "PublishRequest",
    "PublishResult",
    "QuarantineEntry",
    "Skill",
    "SkillFile",
    "SkillVersion",
]
