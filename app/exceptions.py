"""Custom exceptions shared across services."""

from dataclasses import dataclass
from enum import Enum


class FailureReason(str, Enum):
    """Why a remote generation attempt failed."""

    RATE_LIMITED = "rate_limited"
    TIMEOUT = "timeout"
    HTTP_ERROR = "http_error"
    TRANSPORT = "transport"
    INVALID_RESPONSE = "invalid_response"


@dataclass(eq=False)
class ServiceError(Exception):
    """Base exception for service layer failures."""

    message: str
    code: str = "service_error"
    status_code: int | None = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.message


@dataclass(eq=False)
class GenerationError(ServiceError):
    """Raised when the remote model fails to return a haiku."""

    code: str = "generation_error"
    reason: FailureReason = FailureReason.TRANSPORT

    @property
    def is_rate_limited(self) -> bool:
        return self.reason is FailureReason.RATE_LIMITED


class ThemeValidationError(ValueError):
    """Raised when a theme is empty or too long."""
