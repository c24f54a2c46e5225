"""Structured error handling — exception types, classification, and tool error model."""

from __future__ import annotations

from enum import Enum

import httpx
from pydantic import BaseModel

CREDENTIAL_ERROR_MARKER = "Requested entity was not found"


class InputError(ValueError):
    """Raised when dream input text cannot be turned into a batch."""


class InvalidTransitionError(RuntimeError):
    """Raised when a scene is moved along an edge the state machine forbids."""


class GenerationError(Exception):
    """Raised when the remote video operation finishes with an error."""


class NoMediaError(GenerationError):
    """Raised when a finished operation carries no generated video."""


class GenerationTimeoutError(GenerationError):
    """Raised when polling exceeds the configured ``max_poll_seconds``."""


class DownloadError(Exception):
    """Raised when fetching generated media returns a non-success response."""


class EmptyMediaError(DownloadError):
    """Raised when the downloaded media payload has zero bytes."""


class ErrorCategory(str, Enum):
    """Categories of errors for diagnostics."""

    INPUT_INVALID = "INPUT_INVALID"
    API_CREDENTIAL_INVALID = "API_CREDENTIAL_INVALID"
    API_QUOTA_EXCEEDED = "API_QUOTA_EXCEEDED"
    API_INVALID_ARGUMENT = "API_INVALID_ARGUMENT"
    GENERATION_FAILED = "GENERATION_FAILED"
    NO_MEDIA = "NO_MEDIA"
    DOWNLOAD_FAILED = "DOWNLOAD_FAILED"
    NETWORK_ERROR = "NETWORK_ERROR"
    UNKNOWN = "UNKNOWN"


class ToolError(BaseModel):
    """Structured error returned from any tool."""

    error: str
    category: str
    hint: str
    retryable: bool = False
    retry_after_seconds: int | None = None


def is_credential_error(error: Exception | str) -> bool:
    """Return True when *error* is the remote 'entity not found' credential failure."""
    return CREDENTIAL_ERROR_MARKER in str(error)


def categorize_error(error: Exception) -> tuple[ErrorCategory, str]:
    """Map an exception to an ErrorCategory + human-readable hint."""
    s = str(error).lower()

    if isinstance(error, InputError):
        return (
            ErrorCategory.INPUT_INVALID,
            "Format input as: Theme ; Scene 1 ; Scene 2 (semicolon separated)",
        )
    if is_credential_error(error):
        return (
            ErrorCategory.API_CREDENTIAL_INVALID,
            "API key is invalid or revoked — reselect it with infra_credentials(action='reselect')",
        )
    if isinstance(error, NoMediaError):
        return (
            ErrorCategory.NO_MEDIA,
            "Generation finished without a video — try rephrasing the scene",
        )
    if isinstance(error, GenerationError):
        return (
            ErrorCategory.GENERATION_FAILED,
            "Veo rejected or aborted the generation — check the prompt and model",
        )
    if isinstance(error, DownloadError):
        return (
            ErrorCategory.DOWNLOAD_FAILED,
            "Generated video could not be downloaded — resubmit the dream",
        )
    if isinstance(error, (httpx.TimeoutException, httpx.NetworkError, TimeoutError)):
        return (
            ErrorCategory.NETWORK_ERROR,
            "Request timed out or connection failed — try again or check connectivity",
        )
    if "429" in s or "quota" in s or "resource_exhausted" in s:
        return (
            ErrorCategory.API_QUOTA_EXCEEDED,
            "Rate limit hit — wait and retry, or switch to a fast Veo model",
        )
    if "400" in s or "invalid_argument" in s:
        return (
            ErrorCategory.API_INVALID_ARGUMENT,
            "Bad request — check model, resolution, and aspect ratio",
        )
    if "unknown veo model" in s or "invalid resolution" in s or "invalid aspect ratio" in s:
        return (
            ErrorCategory.API_INVALID_ARGUMENT,
            "Invalid configuration value — see available_models in infra_configure",
        )
    if "timeout" in s or "timed out" in s:
        return (
            ErrorCategory.NETWORK_ERROR,
            "Request timed out — try again or check connectivity",
        )

    return (ErrorCategory.UNKNOWN, str(error))


def make_tool_error(error: Exception) -> dict:
    """Create a serialisable ToolError dict from an exception."""
    cat, hint = categorize_error(error)
    retryable = cat in {
        ErrorCategory.API_QUOTA_EXCEEDED,
        ErrorCategory.NETWORK_ERROR,
        ErrorCategory.DOWNLOAD_FAILED,
    }
    return ToolError(
        error=str(error),
        category=cat.value,
        hint=hint,
        retryable=retryable,
        retry_after_seconds=60 if cat == ErrorCategory.API_QUOTA_EXCEEDED else None,
    ).model_dump(mode="json")
