"""Turns fetch failures into user-facing error descriptions.

The retry decision shown to users comes straight from ``is_retryable`` so
the UI offers a retry control exactly when the fetch layer would retry.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional

import httpx

from .errors import ErrorKind, RadarError, UpstreamError, is_retryable


class ErrorCategory(str, Enum):
    NETWORK = "network"
    API_RATE_LIMIT = "api-rate-limit"
    NOT_FOUND = "not-found"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


@dataclass
class ProcessedError:
    """Standardized description of a failure."""
    message: str
    category: ErrorCategory
    user_message: str
    is_retryable: bool
    suggested_action: Optional[str] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        return {
            "message": data["message"],
            "category": self.category.value,
            "userMessage": data["user_message"],
            "isRetryable": data["is_retryable"],
            "suggestedAction": data["suggested_action"],
        }


def _categorize(error: BaseException) -> tuple[ErrorCategory, str, str]:
    if isinstance(error, httpx.TransportError) or (
        isinstance(error, RadarError) and error.kind is ErrorKind.NETWORK
    ):
        return (
            ErrorCategory.NETWORK,
            "Unable to connect to package registries. Please check your internet connection.",
            "Check your internet connection and try again.",
        )

    if isinstance(error, UpstreamError):
        if error.status in (403, 429):
            return (
                ErrorCategory.API_RATE_LIMIT,
                "GitHub API rate limit reached. Please try again later.",
                "Wait a few minutes before trying again, or add a GitHub token to increase rate limits.",
            )
        if error.status >= 500:
            return (
                ErrorCategory.NETWORK,
                "Package registry service is temporarily unavailable.",
                "Try refreshing in a few moments.",
            )

    if isinstance(error, RadarError) and error.kind is ErrorKind.NOT_FOUND:
        return (
            ErrorCategory.NOT_FOUND,
            "Package or version not found.",
            "Verify the package name and version are correct.",
        )

    if isinstance(error, RadarError) and error.kind is ErrorKind.VALIDATION:
        return (
            ErrorCategory.VALIDATION,
            "Invalid data received from package registry.",
            "This appears to be a data issue. Please report this problem.",
        )

    return (
        ErrorCategory.UNKNOWN,
        "Something went wrong. Please try again.",
        "Try refreshing the page or check back later.",
    )


def process_error(error: BaseException, context: Optional[str] = None) -> ProcessedError:
    """Describe any error raised while fetching radar data."""
    category, user_message, suggested_action = _categorize(error)
    if category is ErrorCategory.UNKNOWN and context:
        user_message = f"Something went wrong in {context}. Please try again."

    return ProcessedError(
        message=str(error) or type(error).__name__,
        category=category,
        user_message=user_message,
        is_retryable=is_retryable(error),
        suggested_action=suggested_action,
    )


_ITEM_MESSAGES = {
    ErrorCategory.API_RATE_LIMIT: "Rate limited",
    ErrorCategory.NETWORK: "Connection failed",
    ErrorCategory.NOT_FOUND: "Not found",
    ErrorCategory.VALIDATION: "Invalid data",
}


def item_error_message(error: BaseException) -> str:
    """Short label for a failure on a single dashboard card."""
    return _ITEM_MESSAGES.get(process_error(error).category, "Failed to load")


def should_auto_retry(processed: ProcessedError) -> bool:
    """Rate limits are retryable by hand but never automatically."""
    return processed.is_retryable and processed.category is not ErrorCategory.API_RATE_LIMIT


_RETRY_DELAYS = {
    ErrorCategory.NETWORK: 2.0,
    ErrorCategory.API_RATE_LIMIT: 60.0,
    ErrorCategory.NOT_FOUND: 5.0,
}


def retry_delay_for(processed: ProcessedError) -> Optional[float]:
    """Suggested wait in seconds before a manual retry, or None."""
    if not processed.is_retryable:
        return None
    return _RETRY_DELAYS.get(processed.category, 3.0)
