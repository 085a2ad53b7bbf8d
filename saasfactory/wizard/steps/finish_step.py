"""Summary confirmation and output location."""

from pathlib import Path

from saasfactory.wizard.context import WizardContext
from saasfactory.wizard.env import StepEnv
from saasfactory.wizard.outcomes import BACK, Advance, Exit, Outcome
from saasfactory.wizard.prompts import required


def render_summary(ctx: WizardContext, env: StepEnv) -> None:
    project = ctx.to_project()
    env.ui.heading("Summary")
    env.ui.key_value("Name", f"{project.display_name} ({project.name})")
    env.ui.key_value("Description", project.description or "-")
    env.ui.key_value("Type", project.project_type)
    env.ui.key_value("Pricing", project.pricing.type)
    if ctx.selected_features:
        env.ui.key_value("Features", ", ".join(ctx.selected_features))
    if project.domain:
        env.ui.key_value("Domain", project.domain)
    if project.content.tagline:
        env.ui.key_value("Tagline", project.content.tagline)
    if ctx.discovered_idea is not None:
        env.ui.key_value("Idea", ctx.discovered_idea.name)
    if ctx.competitors:
        env.ui.key_value("Competitors", ", ".join(c.name for c in ctx.competitors[:5]))
    env.ui.log()


async def run_summary_step(ctx: WizardContext, env: StepEnv) -> Outcome:
    render_summary(ctx, env)
    if ctx.options.yes:
        return Advance(True)
    confirmed = await env.prompts.confirm("Generate project?", can_go_back=env.can_go_back)
    if confirmed is BACK:
        return BACK
    if not confirmed:
        return Exit("declined")
    return Advance(True)


async def run_project_location_step(ctx: WizardContext, env: StepEnv) -> Outcome:
    default_path = (ctx.options.cwd / ctx.name).resolve()
    if ctx.options.yes:
        ctx.project_path = default_path
        return Advance(ctx.project_path)

    while True:
        here = await env.prompts.confirm(
            f"Create project in {default_path}?", can_go_back=env.can_go_back
        )
        if here is BACK:
            return BACK
        if here:
            ctx.project_path = default_path
            return Advance(ctx.project_path)

        custom = await env.prompts.text(
            "Enter the parent directory:",
            default=str(ctx.options.cwd),
            validate=required("Please enter a directory"),
        )
        if custom is BACK:
            continue
        parent = Path(custom.strip()).expanduser()
        if not parent.is_absolute():
            parent = ctx.options.cwd / parent
        ctx.project_path = (parent / ctx.name).resolve()
        return Advance(ctx.project_path)
