"""The ``create`` command: wizard, then materialization, then git/GitHub."""

import logging
from dataclasses import dataclass
from pathlib import Path

import typer

from saasfactory.ai.runner import AssistantRunner, get_runner
from saasfactory.cli import common
from saasfactory.core.config import load_config
from saasfactory.core.context import sanitize_project_name
from saasfactory.core.errors import SaasFactoryError, ValidationError
from saasfactory.core.secrets import has_secret
from saasfactory.core.settings import load_settings
from saasfactory.generator import GenerateResult, materialize
from saasfactory.integrations.git import push_to_remote, run_git, setup_git
from saasfactory.integrations.github import setup_github_repo
from saasfactory.wizard import StepEnv, WizardContext, WizardOptions, WizardUI, run_wizard
from saasfactory.wizard.prompts import Prompter

logger = logging.getLogger(__name__)


@dataclass
class CreateOptions:
    name: str | None = None
    yes: bool = False
    skip_ai: bool = False
    skip_research: bool = False
    skip_git: bool = False
    skip_github: bool = False
    private: bool = False


async def detect_assistant(runner: AssistantRunner, ui: WizardUI, skip_ai: bool) -> bool:
    if skip_ai:
        ui.info("AI features disabled (--skip-ai)")
        return False
    if await runner.is_available():
        return True
    ui.warn("AI assistant not found; continuing without AI features")
    return False


def build_context(options: CreateOptions, ai_available: bool, cwd: Path) -> WizardContext:
    ctx = WizardContext(
        ai_available=ai_available,
        options=WizardOptions(
            yes=options.yes,
            skip_ai=options.skip_ai,
            skip_research=options.skip_research,
            cwd=cwd,
        ),
        user_config=load_config(),
    )
    if options.name:
        name = sanitize_project_name(options.name)
        if not name:
            raise ValidationError(
                f"Invalid project name: {options.name!r}",
                "Use letters, numbers and dashes",
            )
        ctx.name = name
        ctx.name_supplied = True
    return ctx


def report_generation(ui: WizardUI, result: GenerateResult) -> None:
    if result.success:
        ui.success(f"Project generated at {result.project_path}")
        return
    ui.warn(f"Project generated with {len(result.errors)} error(s) at {result.project_path}")
    for error in result.errors:
        ui.error(error)


async def publish(ui: WizardUI, project_path: Path, name: str, description: str, options: CreateOptions) -> None:
    """Git and GitHub setup. Failures are warnings; the project is already on disk."""
    if options.skip_git:
        return
    with ui.console.status("Initializing git repository..."):
        git = await setup_git(project_path, name)
    if not git.success:
        ui.warn(f"Git setup skipped: {git.error}")
        return
    ui.success("Git repository initialized")

    if options.skip_github or not has_secret("GITHUB_TOKEN"):
        return
    with ui.console.status("Creating GitHub repository..."):
        repo = await setup_github_repo(name, description, private=options.private)
    if not repo.success:
        ui.warn(f"GitHub setup skipped: {repo.error}")
        return
    ui.success(f"GitHub repository created: {repo.repo_url}")
    try:
        await run_git("remote", "add", "origin", repo.clone_url, cwd=project_path)
        await push_to_remote(project_path)
    except SaasFactoryError as e:
        ui.warn(f"Could not push to GitHub: {e.message}")
    else:
        ui.success("Pushed to GitHub")


def print_next_steps(ui: WizardUI, project_path: Path, package_manager: str) -> None:
    ui.heading("Next steps")
    ui.bullets(
        [
            f"cd {project_path}",
            f"{package_manager} install",
            "cp .env.example .env.local  # fill in your keys",
            f"{package_manager} run dev",
        ]
    )


async def create_project(
    options: CreateOptions,
    *,
    prompter: Prompter | None = None,
    runner: AssistantRunner | None = None,
    cwd: Path | None = None,
) -> int:
    """Run the whole create flow. Returns the process exit code."""
    settings = load_settings()
    ui = common.make_ui()
    runner = runner or get_runner()
    ui.banner()

    try:
        ai_available = await detect_assistant(runner, ui, options.skip_ai)
        ctx = build_context(options, ai_available, cwd or Path.cwd())
        env = StepEnv(
            prompts=prompter or common.make_prompter(settings),
            ui=ui,
            runner=runner,
            settings=settings,
        )
        result = await run_wizard(ctx, env)
    except SaasFactoryError as e:
        common.fail(e)

    if result.cancelled:
        ui.info("Project generation cancelled.")
        return 0

    project = ctx.to_project()
    target = ctx.project_path or (ctx.options.cwd / project.name)
    ui.heading("Generating project")

    def on_step(name: str, ok: bool) -> None:
        if ok:
            ui.success(f"{name} generated")
        else:
            ui.error(f"{name} failed")

    try:
        generated = materialize(project, target, on_step=on_step)
    except (SaasFactoryError, OSError) as e:
        common.fail(e)
    report_generation(ui, generated)

    await publish(ui, generated.project_path, project.name, project.description, options)
    print_next_steps(ui, generated.project_path, ctx.user_config.defaults.package_manager)
    return 0


def create(
    name: str | None = typer.Argument(None, help="Project name (skips the naming step)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Accept defaults at the confirmation steps"),
    skip_ai: bool = typer.Option(False, "--skip-ai", help="Do not use the AI assistant"),
    skip_research: bool = typer.Option(False, "--skip-research", help="Skip competitor and name research"),
    skip_git: bool = typer.Option(False, "--skip-git", help="Do not initialize a git repository"),
    skip_github: bool = typer.Option(False, "--skip-github", help="Do not create a GitHub repository"),
    private: bool = typer.Option(False, "--private", help="Make the GitHub repository private"),
) -> None:
    """Create a new SaaS project with the interactive wizard."""
    options = CreateOptions(
        name=name,
        yes=yes,
        skip_ai=skip_ai,
        skip_research=skip_research,
        skip_git=skip_git,
        skip_github=skip_github,
        private=private,
    )
    code = common.run_async(create_project(options))
    if code:
        raise typer.Exit(code=code)
