"""One-shot commands that do not use the wizard: config, domain, deploy, compete."""

import json
import logging
from pathlib import Path

import typer

from saasfactory.ai.reports import render_research_summary, research_one_liner, write_research_report
from saasfactory.ai.research import MODES, ResearchMode, extract_keywords, is_url, research_competitors, should_proceed
from saasfactory.ai.runner import AssistantError, AssistantRunner, get_runner
from saasfactory.ai.stream import hostname
from saasfactory.cli import common
from saasfactory.core.config import load_config, save_config
from saasfactory.core.context import sanitize_project_name
from saasfactory.core.errors import SaasFactoryError
from saasfactory.core.secrets import CREDENTIAL_KEYS, credentials_path, get_secret, is_keyring_available, set_secret
from saasfactory.core.settings import get_setting, load_settings
from saasfactory.integrations.domain import DomainClient, normalize_domain
from saasfactory.integrations.github import GitHubClient
from saasfactory.integrations.vercel import setup_vercel_project
from saasfactory.wizard.outcomes import BACK
from saasfactory.wizard.prompts import Option, Prompter

logger = logging.getLogger(__name__)


def mask(value: str) -> str:
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}...{value[-4:]}"


# -- config -----------------------------------------------------------------


async def configure(prompter: Prompter) -> int:
    ui = common.make_ui()
    ui.heading("Configuration")
    for key, label in CREDENTIAL_KEYS.items():
        current = get_secret(key)
        ui.key_value(label, mask(current) if current else "[dim]not set[/]")
    ui.log()

    if await prompter.confirm("Update credentials?", default=False, can_go_back=False):
        changed = 0
        for key, label in CREDENTIAL_KEYS.items():
            value = await prompter.password(f"{label} (leave empty to keep current):")
            if value is BACK or not value.strip():
                continue
            set_secret(key, value.strip())
            changed += 1
        if changed:
            where = "the OS keyring" if is_keyring_available() else str(credentials_path())
            ui.success(f"Saved {changed} credential(s) to {where}")
        else:
            ui.info("No credentials changed")

    if await prompter.confirm("Update project defaults?", default=False, can_go_back=False):
        config = load_config()
        analytics = await prompter.select(
            "Default analytics provider:",
            [Option("Plausible", "plausible"), Option("PostHog", "posthog"), Option("None", "none")],
            default=config.defaults.analytics,
            can_go_back=False,
        )
        manager = await prompter.select(
            "Package manager:",
            [Option(m, m) for m in ("npm", "pnpm", "yarn", "bun")],
            default=config.defaults.package_manager,
            can_go_back=False,
        )
        config.defaults.analytics = analytics
        config.defaults.package_manager = manager
        save_config(config)
        ui.success("Defaults saved")
    return 0


def config_command() -> None:
    """Configure API credentials and project defaults."""
    common.run_async(configure(common.make_prompter()))


# -- domain -----------------------------------------------------------------


async def check_domain(name: str, suggest: bool, client: DomainClient | None = None) -> int:
    ui = common.make_ui()
    ui.heading("Domain Check")
    domain = normalize_domain(name)
    try:
        client = client or DomainClient.from_credentials()
        with ui.console.status(f"Checking {domain} availability..."):
            result = await client.check(domain)
    except SaasFactoryError as e:
        ui.error(f"Domain check failed: {e.message}")
        if e.suggestion:
            ui.info(e.suggestion)
        return 1

    ui.key_value("Domain", result.domain)
    ui.key_value("Available", "Yes" if result.available else "No")
    if result.price:
        ui.key_value("Registration", f"${result.price.registration:g} {result.price.currency}")
        ui.key_value("Renewal", f"${result.price.renewal:g}/year")

    if suggest or not result.available:
        ui.heading("Suggestions")
        try:
            with ui.console.status("Finding available alternatives..."):
                alternatives = await client.suggest(domain)
        except SaasFactoryError as e:
            ui.warn(f"Could not fetch suggestions: {e.message}")
            return 0
        if alternatives:
            for alt in alternatives:
                ui.success(alt.domain)
        else:
            ui.info("No available alternatives found.")
    return 0


def domain_command(
    name: str = typer.Argument(..., help="Domain or name to check, e.g. acme or acme.io"),
    suggest: bool = typer.Option(False, "--suggest", "-s", help="Show available alternatives"),
) -> None:
    """Check domain availability and get suggestions."""
    code = common.run_async(check_domain(name, suggest))
    if code:
        raise typer.Exit(code=code)


# -- deploy -----------------------------------------------------------------


def read_project_name(project_path: Path) -> str:
    config_file = project_path / "saasfactory.json"
    if not config_file.exists():
        raise SaasFactoryError(
            "Not a SaasFactory project (saasfactory.json not found)",
            "Run this inside a generated project or pass its directory",
        )
    data = json.loads(config_file.read_text(encoding="utf-8"))
    return (data.get("context") or {}).get("name") or project_path.name


async def deploy(project_path: Path, production: bool) -> int:
    ui = common.make_ui()
    ui.heading("Deploy to Vercel")
    try:
        name = read_project_name(project_path)
    except (SaasFactoryError, json.JSONDecodeError) as e:
        common.fail(e)

    github_repo = None
    github = GitHubClient.from_credentials()
    if github is not None:
        user = await github.get_user()
        if user is not None:
            github_repo = f"{user.login}/{name}"

    with ui.console.status("Setting up Vercel project..."):
        result = await setup_vercel_project(name, github_repo=github_repo, production=production)
    if not result.success:
        ui.error(f"Vercel setup failed: {result.error}")
        if "token" in (result.error or ""):
            ui.info("Run `saasfactory config` to set up your Vercel token.")
        return 1
    ui.success("Vercel project created")
    if result.project_url:
        ui.success(f"Project URL: {result.project_url}")
    if github_repo:
        ui.info("Push to GitHub to trigger automatic deployments.")
    return 0


def deploy_command(
    directory: Path = typer.Argument(Path("."), help="Generated project directory"),
    prod: bool = typer.Option(False, "--prod", help="Deploy to production"),
) -> None:
    """Deploy a generated project to Vercel."""
    code = common.run_async(deploy(directory.resolve(), prod))
    if code:
        raise typer.Exit(code=code)


# -- compete ----------------------------------------------------------------


def report_slug(value: str) -> str:
    if is_url(value):
        base = hostname(value) or "competitor"
    else:
        base = extract_keywords(value) or "idea"
    return sanitize_project_name(base)[:40] or "research"


async def choose_mode(prompter: Prompter, value: str, quick: bool, full: bool) -> ResearchMode | None:
    if is_url(value):
        return "url"
    if quick:
        return "quick"
    if full:
        return "full"
    choice = await prompter.select(
        "Choose research depth:",
        [
            Option("Quick (Recommended)", "quick", "3-5 competitors, ~3 minutes, fewer tokens"),
            Option("Full", "full", "5-8 competitors, ~10 minutes, thorough analysis"),
        ],
        can_go_back=True,
    )
    return None if choice is BACK else choice


async def compete(
    value: str,
    *,
    quick: bool = False,
    full: bool = False,
    prompter: Prompter,
    runner: AssistantRunner | None = None,
    cwd: Path | None = None,
) -> int:
    ui = common.make_ui()
    settings = load_settings()
    runner = runner or get_runner()
    if not await runner.is_available():
        ui.error("AI assistant not found. This feature requires the assistant CLI.")
        return 1

    mode = await choose_mode(prompter, value, quick, full)
    if mode is None:
        return 0
    ui.heading("Competitive Research")
    if mode == "url":
        ui.info(f"Analyzing: {value}")
    else:
        ui.info(f'Researching: "{value}"')
    ui.info(f"Mode: {MODES[mode].description} ({MODES[mode].competitors} competitors)")

    with ui.progress("Searching for competitors...") as on_progress:
        result = await research_competitors(runner, value, mode=mode, settings=settings, on_progress=on_progress)
    if result.is_fallback:
        ui.warn(f"Research incomplete: {result.error}")
    else:
        ui.success(f"Research complete ({result.search_count} searches, {len(result.sources)} sources)")

    render_research_summary(ui.console, result.research)
    ui.info(research_one_liner(result.research))
    proceed, advice = should_proceed(result.research)
    (ui.success if proceed else ui.warn)(advice)

    if result.session_id and not result.is_fallback:
        timeout = float(get_setting(settings, "assistant.timeouts.follow_up", 120))
        while True:
            question = await prompter.text("Ask a follow-up question (leave empty to finish):", can_go_back=True)
            if question is BACK or not question.strip():
                break
            try:
                with ui.progress("Thinking...") as on_progress:
                    answer = await runner.follow_up(
                        result.session_id,
                        question.strip(),
                        allowed_tools=["WebSearch"],
                        timeout=timeout,
                        on_progress=on_progress,
                    )
            except AssistantError as e:
                ui.warn(f"Follow-up failed: {e.message}")
                break
            ui.log(answer.text)

    if await prompter.confirm("Save report as markdown?", default=True, can_go_back=False):
        path = (cwd or Path.cwd()) / f"{report_slug(value)}-research.md"
        write_research_report(result.research, path, value)
        ui.success(f"Report saved to {path}")
    return 0


def compete_command(
    value: str = typer.Argument(..., metavar="INPUT", help="Idea description or competitor URL"),
    quick: bool = typer.Option(False, "--quick", "-q", help="Find 3-5 competitors faster"),
    full: bool = typer.Option(False, "--full", "-f", help="Thorough analysis of 5-8 competitors"),
) -> None:
    """Research competitors for an idea or analyze a competitor URL."""
    code = common.run_async(compete(value, quick=quick, full=full, prompter=common.make_prompter()))
    if code:
        raise typer.Exit(code=code)
