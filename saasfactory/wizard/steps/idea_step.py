"""Idea mode, rough idea and sector focus."""

from saasfactory.wizard.context import WizardContext
from saasfactory.wizard.env import StepEnv
from saasfactory.wizard.outcomes import BACK, Advance, Outcome
from saasfactory.wizard.prompts import Option, min_length

IDEA_MODE_OPTIONS = [
    Option("Yes, I have an idea", "has_idea", "Continue with your idea"),
    Option("No, help me discover one", "discover", "AI-powered idea research"),
    Option("I have a rough idea to refine", "validate", "Validate and improve your concept"),
]


async def run_idea_mode_step(ctx: WizardContext, env: StepEnv) -> Outcome:
    env.ui.heading("SaaS Idea")
    env.ui.info("Let's start by understanding your idea.")
    mode = await env.prompts.select(
        "Do you have a SaaS idea?",
        IDEA_MODE_OPTIONS,
        default=ctx.idea_mode,
        can_go_back=env.can_go_back,
    )
    if mode is BACK:
        return BACK
    ctx.idea_mode = mode
    return Advance(mode)


async def run_rough_idea_step(ctx: WizardContext, env: StepEnv) -> Outcome:
    idea = await env.prompts.text(
        "Describe your rough idea (we'll research and refine it):",
        default=ctx.rough_idea or "",
        validate=min_length(10, "Please describe your idea", "Please provide a bit more detail"),
        can_go_back=env.can_go_back,
    )
    if idea is BACK:
        return BACK
    ctx.rough_idea = idea.strip()
    return Advance(ctx.rough_idea)


async def run_sector_step(ctx: WizardContext, env: StepEnv) -> Outcome:
    """Optional industry focus. ESC on the sector text returns to the yes/no question."""
    while True:
        want = await env.prompts.confirm(
            "Would you like to focus on a specific sector or industry?",
            default=bool(ctx.sector),
            can_go_back=env.can_go_back,
        )
        if want is BACK:
            return BACK
        if not want:
            ctx.sector = None
            return Advance(None)

        sector = await env.prompts.text(
            'What sector or industry? (e.g., "developer tools", "healthcare", "e-commerce")',
            default=ctx.sector or "",
        )
        if sector is BACK:
            continue
        ctx.sector = sector.strip() or None
        return Advance(ctx.sector)
