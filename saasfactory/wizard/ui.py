"""Shared terminal styling for the wizard."""

from collections.abc import Callable, Iterator
from contextlib import contextmanager

from questionary import Style
from rich.console import Console

from saasfactory.ai.stream import ProgressEvent

STYLE = Style(
    [
        ("qmark", "fg:cyan bold"),
        ("question", "bold"),
        ("answer", "fg:green bold"),
        ("pointer", "fg:cyan bold"),
        ("highlighted", "fg:cyan bold"),
        ("selected", "fg:green"),
        ("instruction", "fg:ansibrightblack"),
    ]
)


class WizardUI:
    """Thin wrapper over a rich Console so steps print consistently."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def banner(self) -> None:
        self.console.print("\n[bold magenta]SaasFactory[/] [dim]- scaffold a SaaS in minutes[/]\n")
        self.console.print("[dim]Tip: double-press ESC to go back, Ctrl-C to quit[/]\n")

    def heading(self, text: str) -> None:
        self.console.print(f"\n[bold magenta]▸ {text}[/]\n")

    def info(self, text: str) -> None:
        self.console.print(f"[cyan]ℹ[/] {text}")

    def success(self, text: str) -> None:
        self.console.print(f"[green]✓[/] {text}")

    def warn(self, text: str) -> None:
        self.console.print(f"[yellow]⚠[/] {text}")

    def error(self, text: str) -> None:
        self.console.print(f"[red]✗[/] {text}")

    def log(self, text: str = "") -> None:
        self.console.print(text)

    def key_value(self, key: str, value: str) -> None:
        self.console.print(f"  [dim]{key}:[/] {value}")

    def bullets(self, items: list[str]) -> None:
        for item in items:
            self.console.print(f"  [dim]•[/] {item}")

    @contextmanager
    def progress(self, message: str) -> Iterator[Callable[[ProgressEvent], None]]:
        """Spinner whose text follows assistant progress events."""
        with self.console.status(message) as status:

            def update(event: ProgressEvent) -> None:
                text = event.message
                if event.kind == "sources":
                    text = f"Found {event.total_sources} sources..."
                status.update(text)

            yield update
