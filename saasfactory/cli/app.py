"""Typer application and process entry point."""

import logging
import sys
from pathlib import Path

import typer
from dotenv import load_dotenv

from saasfactory import __version__
from saasfactory.cli import common
from saasfactory.cli.commands import (
    check_domain,
    compete,
    compete_command,
    config_command,
    configure,
    deploy,
    deploy_command,
    domain_command,
)
from saasfactory.cli.create import CreateOptions, create, create_project
from saasfactory.core.logging_config import setup_logging
from saasfactory.core.processes import registry
from saasfactory.core.settings import get_home, get_setting, load_settings
from saasfactory.wizard.outcomes import BACK
from saasfactory.wizard.prompts import Option, Prompter, required

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="SaasFactory: scaffold a production-ready SaaS in minutes.",
    add_completion=False,
)

app.command(name="create")(create)
app.command(name="config")(config_command)
app.command(name="domain")(domain_command)
app.command(name="deploy")(deploy_command)
app.command(name="compete")(compete_command)

MENU = [
    Option("Create a new project", "create", "Run the project wizard"),
    Option("Research competitors", "compete", "Analyze an idea or a competitor URL"),
    Option("Check a domain", "domain", "See if a domain is available and get suggestions"),
    Option("Deploy a project", "deploy", "Create a Vercel project for the current directory"),
    Option("Configure", "config", "Set API credentials and defaults"),
    Option("Exit", "exit"),
]


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"saasfactory {__version__}")
        raise typer.Exit()


def bootstrap(verbose: bool = False) -> dict:
    """Load .env, settings and logging for this process."""
    home = get_home()
    load_dotenv(home / ".env")
    settings = load_settings()
    setup_logging(home, settings, verbose=verbose)
    registry.grace_period = float(get_setting(settings, "assistant.kill_grace_period", registry.grace_period))
    return settings


async def run_menu(prompter: Prompter) -> int:
    ui = common.make_ui()
    ui.banner()
    choice = await prompter.select("What would you like to do?", MENU, can_go_back=False)
    if choice == "create":
        return await create_project(CreateOptions(), prompter=prompter)
    if choice == "compete":
        value = await prompter.text("Describe the idea or paste a competitor URL:", validate=required("Input is required"))
        if value is BACK:
            return 0
        return await compete(value.strip(), prompter=prompter)
    if choice == "domain":
        name = await prompter.text("Domain or name to check:", validate=required("Domain is required"))
        if name is BACK:
            return 0
        return await check_domain(name.strip(), suggest=True)
    if choice == "deploy":
        return await deploy(Path.cwd(), production=False)
    if choice == "config":
        return await configure(prompter)
    return 0


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to the console"),
    version: bool | None = typer.Option(
        None, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit"
    ),
) -> None:
    """SaasFactory CLI."""
    settings = bootstrap(verbose)
    logger.debug("Command: %s", ctx.invoked_subcommand or "menu")
    if ctx.invoked_subcommand is None:
        code = common.run_async(run_menu(common.make_prompter(settings)))
        raise typer.Exit(code=code)


def main() -> None:
    # Ctrl-C must reach our handler even inside a running assistant task
    registry.install_signal_handlers()
    try:
        app()
    except KeyboardInterrupt:
        registry.terminate_all()
        common.console.print("\n[yellow]Cancelled[/]")
        sys.exit(0)
