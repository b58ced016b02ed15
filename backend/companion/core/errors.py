"""
Centralized error handling for the chat pipeline.
Domain exceptions carry their HTTP status so routes stay thin; the generation
apology rules live here so new provider failure types are easy to add.
"""
from __future__ import annotations

from typing import Callable

from companion.core.constants import (
    MSG_CONFIGURATION,
    MSG_CONNECTION_TROUBLE,
    MSG_RATE_LIMITED,
    MSG_REPHRASE,
    MSG_SESSION_NOT_FOUND,
    RETRYABLE_CLIENT_STATUSES,
    STATUS_RATE_LIMITED,
)

STATUS_OK = 200
STATUS_BAD_REQUEST = 400
STATUS_NOT_FOUND = 404
STATUS_INTERNAL_ERROR = 500
STATUS_SERVICE_UNAVAILABLE = 503


class CompanionError(Exception):
    """Base for errors that map to a user-facing HTTP reply."""

    status_code = STATUS_INTERNAL_ERROR

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(CompanionError):
    """Request content is unusable (e.g. empty message or title)."""

    status_code = STATUS_BAD_REQUEST


class ConfigurationError(CompanionError):
    """Required credential is missing."""

    status_code = STATUS_SERVICE_UNAVAILABLE

    def __init__(self, detail: str = MSG_CONFIGURATION) -> None:
        super().__init__(detail)


class PersistenceError(CompanionError):
    """The relational store failed; earlier commits in the same request are kept."""

    status_code = STATUS_INTERNAL_ERROR


class NotFoundError(CompanionError):
    """Operation on an unknown session id."""

    status_code = STATUS_NOT_FOUND

    def __init__(self, detail: str = MSG_SESSION_NOT_FOUND) -> None:
        super().__init__(detail)


class GenerationError(CompanionError):
    """
    Provider failure after retries (or a non-retryable one).
    Never reaches the client as an error: it is turned into an apology reply.
    """

    status_code = STATUS_OK

    def __init__(self, detail: str = "", status: int | None = None, attempts: int = 0) -> None:
        super().__init__(detail)
        self.status = status
        self.attempts = attempts


# ---------------------------------------------------------------------------
# Provider status rules
# ---------------------------------------------------------------------------

def is_client_error(status: int | None) -> bool:
    """4xx from the provider that another attempt will not fix (bad request, auth, ...)."""
    return status is not None and 400 <= status < 500 and status not in RETRYABLE_CLIENT_STATUSES


def _is_rate_limited(exc: GenerationError) -> bool:
    return exc.status == STATUS_RATE_LIMITED


def _is_rejected(exc: GenerationError) -> bool:
    return is_client_error(exc.status)


# List of (predicate, apology). First match wins; anything else gets MSG_CONNECTION_TROUBLE.
GENERATION_APOLOGY_RULES: list[tuple[Callable[[GenerationError], bool], str]] = [
    (_is_rate_limited, MSG_RATE_LIMITED),
    (_is_rejected, MSG_REPHRASE),
]


def generation_error_to_reply(exc: GenerationError) -> str:
    """Map a GenerationError to the degraded text sent back as the assistant reply."""
    for predicate, message in GENERATION_APOLOGY_RULES:
        if predicate(exc):
            return message
    return MSG_CONNECTION_TROUBLE
