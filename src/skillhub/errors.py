"""Error taxonomy shared by the quality gate, moderation engine, and request layer."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from skillhub.quality.models import QualityAssessment


class HubError(Exception):
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(HubError):
    """Malformed input, rejected before any read."""

    status_code = 400


class AuthenticationError(HubError):
    status_code = 401


class PermissionDeniedError(HubError):
    status_code = 403


class NotFoundError(HubError):
    status_code = 404


class DocumentNotFoundError(NotFoundError):
    pass


class ConflictError(HubError):
    """Uniqueness violation. A duplicate report is handled as "already reported"."""

    status_code = 409


class InvalidStateError(HubError):
    status_code = 409


class RateLimitError(HubError):
    status_code = 429


class QualityRejectError(HubError):
    """Hard-reject verdict from the publish quality gate. Nothing is persisted."""

    status_code = 422

    def __init__(self, assessment: QualityAssessment) -> None:
        super().__init__(assessment.reason)
        self.assessment = assessment
