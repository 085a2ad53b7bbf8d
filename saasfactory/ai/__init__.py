"""External AI assistant: subprocess runner, stream parsing and content helpers."""

from saasfactory.ai.runner import (
    AssistantError,
    AssistantFailedError,
    AssistantRunner,
    AssistantTimeoutError,
    AssistantUnavailableError,
    TaskResult,
    is_assistant_available,
    run_external_task,
)

__all__ = [
    "AssistantError",
    "AssistantFailedError",
    "AssistantRunner",
    "AssistantTimeoutError",
    "AssistantUnavailableError",
    "TaskResult",
    "is_assistant_available",
    "run_external_task",
]
