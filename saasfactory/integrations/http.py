"""Small JSON-over-HTTP helper shared by the hosted-service integrations."""

import logging
from typing import Any

import httpx

from saasfactory.core.errors import ExternalServiceError, NetworkError, with_retry

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0


def _is_transient(error: Exception) -> bool:
    if isinstance(error, NetworkError):
        return True
    if isinstance(error, ExternalServiceError):
        return (error.status_code or 0) >= 500
    return False


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:200] or f"HTTP {response.status_code}"
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if data.get("message"):
            return str(data["message"])
    return f"HTTP {response.status_code}"


async def request_json(
    service: str,
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    json: Any = None,
    timeout: float = DEFAULT_TIMEOUT,
    retries: int = 2,
    allow_status: tuple[int, ...] = (),
) -> tuple[int, Any]:
    """Send one request and return (status, decoded JSON or None).

    Connection failures and 5xx responses are retried with backoff. Other
    error statuses raise ExternalServiceError unless listed in ``allow_status``.
    """

    async def attempt() -> tuple[int, Any]:
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.request(method, url, headers=headers, json=json)
        except httpx.TimeoutException as e:
            raise NetworkError(f"{service} request timed out", "Check your internet connection and try again") from e
        except httpx.TransportError as e:
            raise NetworkError(f"{service} is unreachable: {e}", "Check your internet connection and try again") from e

        if response.status_code >= 400 and response.status_code not in allow_status:
            raise ExternalServiceError(service, _error_message(response), status_code=response.status_code)
        if not response.content:
            return response.status_code, None
        try:
            return response.status_code, response.json()
        except ValueError:
            return response.status_code, None

    return await with_retry(attempt, max_retries=retries, initial_delay=0.5, should_retry=_is_transient)
