"""Helpers shared by the CLI commands."""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any, NoReturn, TypeVar

import typer
from rich.console import Console

from saasfactory.core.errors import format_error, root_cause
from saasfactory.core.processes import registry
from saasfactory.core.settings import get_setting, load_settings
from saasfactory.core.terminal import reset_terminal
from saasfactory.wizard.prompts import EscapeTracker, Prompter, QuestionaryBackend
from saasfactory.wizard.ui import WizardUI

logger = logging.getLogger(__name__)

T = TypeVar("T")

console = Console()


def make_ui() -> WizardUI:
    return WizardUI(console)


def make_prompter(settings: dict[str, Any] | None = None) -> Prompter:
    """Terminal prompter. Tests replace this to script answers."""
    settings = settings if settings is not None else load_settings()
    window = float(get_setting(settings, "wizard.double_escape_window", 1.0))
    return Prompter(QuestionaryBackend(), EscapeTracker(window=window))


def cancelled() -> NoReturn:
    """User-initiated cancel: stop children, say so, exit 0."""
    registry.terminate_all()
    reset_terminal()
    console.print("\n[yellow]Cancelled[/]")
    raise typer.Exit(code=0)


def fail(error: BaseException) -> NoReturn:
    """Print a fatal error with its root cause and exit 1."""
    message, suggestion = format_error(error)
    console.print(f"[red]✗[/] {message}")
    cause = root_cause(error)
    if cause is not error:
        cause_message, _ = format_error(cause)
        if cause_message != message:
            console.print(f"  [dim]Cause:[/] {cause_message}")
    if suggestion:
        console.print(f"  [dim]→[/] {suggestion}")
    logger.error("Fatal: %s", message, exc_info=error)
    raise typer.Exit(code=1)


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run a command coroutine; Ctrl-C anywhere becomes a clean cancel."""
    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        cancelled()
