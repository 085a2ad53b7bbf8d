"""Project name, description, idea refinement and name research."""

from saasfactory.ai.refiner import refine_idea, suggest_project_names
from saasfactory.core.context import sanitize_project_name
from saasfactory.wizard.context import WizardContext
from saasfactory.wizard.env import StepEnv
from saasfactory.wizard.outcomes import BACK, Advance, Outcome
from saasfactory.wizard.prompts import Option, min_length, sanitizable

_CUSTOM = "__custom__"
_ORIGINAL = "__original__"

_name_validator = sanitizable(sanitize_project_name, "Must contain at least one letter or number")
_description_validator = min_length(
    20, "Please describe your SaaS idea", "Please provide more detail (at least 20 characters)"
)


async def run_name_step(ctx: WizardContext, env: StepEnv) -> Outcome:
    env.ui.heading("Project Name")
    if ctx.competitors:
        env.ui.log("[bold]Competitors found:[/]")
        for competitor in ctx.competitors[:5]:
            env.ui.log(f"  {competitor.name}: {competitor.description}")
        env.ui.log()

    while True:
        if ctx.suggested_names:
            options = [Option(n, n, sanitize_project_name(n)) for n in ctx.suggested_names]
            options.append(Option("Enter custom name", _CUSTOM, "Type your own project name"))
            choice = await env.prompts.select(
                "Choose a project name:", options, can_go_back=env.can_go_back
            )
            if choice is BACK:
                return BACK
            if choice != _CUSTOM:
                ctx.name = sanitize_project_name(choice)
                env.ui.info(f"Folder name: [cyan]{ctx.name}[/]")
                return Advance(ctx.name)

        typed = await env.prompts.text(
            "What is your project name?",
            default=ctx.name,
            validate=_name_validator,
            can_go_back=env.can_go_back or bool(ctx.suggested_names),
        )
        if typed is BACK:
            if ctx.suggested_names:
                continue
            return BACK
        ctx.name = sanitize_project_name(typed)
        if ctx.name != typed:
            env.ui.info(f"Folder name: [cyan]{ctx.name}[/]")
        return Advance(ctx.name)


async def run_description_step(ctx: WizardContext, env: StepEnv) -> Outcome:
    env.ui.heading("Your Idea")
    text = await env.prompts.text(
        "Describe your SaaS idea:",
        default=ctx.description,
        validate=_description_validator,
        can_go_back=env.can_go_back,
    )
    if text is BACK:
        return BACK
    ctx.description = text.strip()
    return Advance(ctx.description)


async def run_idea_refinement_step(ctx: WizardContext, env: StepEnv) -> Outcome:
    env.ui.heading("Idea Refinement")
    with env.ui.console.status("Analyzing your idea..."):
        result = await refine_idea(env.runner, ctx.description, timeout=env.timeout("refine", 60))
    if not result.success:
        env.ui.warn(f"Could not refine idea ({result.error}); continuing with original")
        return Advance(None)

    ctx.refined_versions = result.versions
    env.ui.success("Generated refined versions")
    env.ui.log("[cyan]Refined versions of your idea:[/]\n")
    for index, version in enumerate(result.versions, start=1):
        label = f"Version {index}" + (" (Recommended)" if index == 1 else "")
        env.ui.log(f"[bold]{label}[/]")
        env.ui.key_value("Summary", version.summary)
        if version.key_features:
            env.ui.key_value("Features", ", ".join(version.key_features))
        if version.target_audience:
            env.ui.key_value("Target", version.target_audience)
        if version.unique_angle:
            env.ui.key_value("Angle", version.unique_angle)
        env.ui.log()

    options = [
        Option(f"Version {i}" + (" (Recommended)" if i == 1 else ""), i - 1)
        for i in range(1, len(result.versions) + 1)
    ]
    options += [Option("Write my own version", _CUSTOM), Option("Use original as-is", _ORIGINAL)]

    while True:
        choice = await env.prompts.select(
            "Which version do you want to use?", options, can_go_back=env.can_go_back
        )
        if choice is BACK:
            return BACK
        if choice == _ORIGINAL:
            env.ui.info("Using original description.")
            return Advance(None)
        if choice == _CUSTOM:
            custom = await env.prompts.text(
                "Enter your refined idea description:",
                default=ctx.description,
                validate=_description_validator,
            )
            if custom is BACK:
                continue
            ctx.description = custom.strip()
            env.ui.success("Using your custom version.")
            return Advance(ctx.description)
        ctx.description = result.versions[choice].summary
        env.ui.success(f"Selected version {choice + 1}")
        return Advance(ctx.description)


async def run_name_research_step(ctx: WizardContext, env: StepEnv) -> Outcome:
    env.ui.heading("Finding Competitors & Suggesting Names")
    with env.ui.console.status("Researching market..."):
        result = await suggest_project_names(
            env.runner, ctx.description, timeout=env.timeout("name_research", 120)
        )
    if not result.success:
        env.ui.warn(f"Could not search competitors ({result.error}); continuing without suggestions")
        ctx.suggested_names = []
        ctx.competitors = []
        return Advance(None)
    ctx.competitors = result.competitors
    ctx.suggested_names = result.suggested_names
    env.ui.success(
        f"Found {len(result.competitors)} competitors, generated {len(result.suggested_names)} name suggestions"
    )
    return Advance(None)
