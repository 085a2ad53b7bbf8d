"""Error taxonomy and CLI-facing formatting helpers."""

import asyncio
import errno
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SaasFactoryError(Exception):
    """Base error with a machine-readable code and an optional user suggestion."""

    code = "SAASFACTORY_ERROR"

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion


class ConfigurationError(SaasFactoryError):
    code = "CONFIGURATION_ERROR"


class GenerationError(SaasFactoryError):
    code = "GENERATION_ERROR"


class NetworkError(SaasFactoryError):
    code = "NETWORK_ERROR"


class ValidationError(SaasFactoryError):
    code = "VALIDATION_ERROR"


class ExternalServiceError(SaasFactoryError):
    code = "EXTERNAL_SERVICE_ERROR"

    def __init__(
        self, service: str, message: str, suggestion: str | None = None, status_code: int | None = None
    ) -> None:
        super().__init__(f"{service}: {message}", suggestion)
        self.service = service
        self.status_code = status_code


class WizardAbort(SaasFactoryError):
    """A required wizard operation failed; the run must stop with a non-zero exit."""

    code = "WIZARD_ABORT"


_ERRNO_MESSAGES: dict[int, tuple[str, str]] = {
    errno.ENOENT: (
        "File or directory not found",
        "Check that the path exists and you have permission to access it",
    ),
    errno.EACCES: (
        "Permission denied",
        "Try running with appropriate permissions or check file ownership",
    ),
    errno.EEXIST: (
        "File or directory already exists",
        "Use a different name or remove the existing file/directory",
    ),
    errno.ECONNREFUSED: (
        "Connection refused",
        "Check your internet connection and try again",
    ),
    errno.ETIMEDOUT: (
        "Connection timed out",
        "Check your internet connection and try again",
    ),
}


def format_error(error: BaseException) -> tuple[str, str | None]:
    """Return (message, suggestion) for display."""
    if isinstance(error, SaasFactoryError):
        return error.message, error.suggestion
    if isinstance(error, OSError) and error.errno in _ERRNO_MESSAGES:
        message, suggestion = _ERRNO_MESSAGES[error.errno]
        if error.filename:
            message = f"{message}: {error.filename}"
        return message, suggestion
    return str(error) or type(error).__name__, None


def root_cause(error: BaseException) -> BaseException:
    """Follow __cause__/__context__ to the innermost exception."""
    seen = {id(error)}
    current = error
    while True:
        nxt = current.__cause__ or current.__context__
        if nxt is None or id(nxt) in seen:
            return current
        seen.add(id(nxt))
        current = nxt


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    *,
    max_retries: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 10.0,
    should_retry: Callable[[Exception], bool] = lambda _e: True,
) -> T:
    """Await fn() with exponential backoff between failed attempts."""
    delay = initial_delay
    for attempt in range(max_retries + 1):
        try:
            return await fn()
        except Exception as e:
            if attempt == max_retries or not should_retry(e):
                raise
            logger.debug("Attempt %d failed (%s); retrying in %.1fs", attempt + 1, e, delay)
            await asyncio.sleep(delay)
            delay = min(delay * 2, max_delay)
    raise AssertionError("unreachable")
