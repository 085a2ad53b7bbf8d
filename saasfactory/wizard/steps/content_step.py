"""AI marketing content generation."""

from saasfactory.ai.content import generate_marketing_content
from saasfactory.wizard.context import WizardContext
from saasfactory.wizard.env import StepEnv
from saasfactory.wizard.outcomes import Advance, Outcome


async def run_ai_content_step(ctx: WizardContext, env: StepEnv) -> Outcome:
    # Generated once per run; rewinding this state clears the flag
    if ctx.ai_content_generated:
        return Advance(None)

    env.ui.heading("AI Content")
    with env.ui.console.status("Generating marketing content with AI..."):
        result = await generate_marketing_content(
            env.runner, ctx.to_project(), timeout=env.timeout("content", 120)
        )
    if not result.success:
        env.ui.warn(f"AI content skipped: {result.error}")
        return Advance(None)

    ctx.content = result.content
    ctx.ai_content_generated = True
    env.ui.success("Generated marketing content")
    if result.content.tagline and not ctx.tagline:
        env.ui.key_value("Tagline", result.content.tagline)
    return Advance(None)
