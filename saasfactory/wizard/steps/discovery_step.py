"""Idea discovery: research, list, select and confirm."""

import logging

from saasfactory.ai.discovery import discover_ideas, fallback_ideas
from saasfactory.ai.reports import idea_hint, render_idea_details, render_ideas_list
from saasfactory.core.context import infer_pricing, infer_saas_type, sanitize_project_name
from saasfactory.core.settings import get_setting
from saasfactory.wizard.context import WizardContext
from saasfactory.wizard.env import StepEnv
from saasfactory.wizard.outcomes import BACK, Advance, Outcome, Retry
from saasfactory.wizard.prompts import Option

logger = logging.getLogger(__name__)

_MORE = "__more__"
_SECTOR = "__sector__"


async def run_discovery_research_step(ctx: WizardContext, env: StepEnv) -> Outcome:
    env.ui.heading("Idea Discovery")
    if ctx.rough_idea:
        preview = ctx.rough_idea if len(ctx.rough_idea) <= 50 else ctx.rough_idea[:50] + "..."
        env.ui.info(f'Researching and refining your idea: "{preview}"')
    else:
        env.ui.info("Searching for viable micro-SaaS opportunities...")
    if ctx.sector:
        env.ui.info(f"Focusing on: {ctx.sector}")
    env.ui.info("This takes 5-8 minutes for thorough research.")

    with env.ui.progress("Starting idea discovery...") as on_progress:
        result = await discover_ideas(
            env.runner,
            sector=ctx.sector,
            rough_idea=ctx.rough_idea,
            count=int(get_setting(env.settings, "wizard.discovery_count", 5)),
            timeout=env.timeout("discovery", 600),
            max_turns=env.max_turns("discovery", 25),
            on_progress=on_progress,
        )

    if result.is_fallback:
        env.ui.warn(f"Discovery incomplete: {result.error}")
        env.ui.info("Using example ideas. You can research opportunities manually.")
    else:
        env.ui.success(
            f"Discovery complete! Found {len(result.ideas)} ideas "
            f"({result.search_count} searches, {len(result.sources)} sources)"
        )
    # a rerun replaces the previous candidates
    ctx.discovered_ideas = result.ideas
    ctx.discovery_searches = result.search_count
    ctx.discovery_sources = len(result.sources)
    return Advance(len(result.ideas))


def discovery_fallback(ctx: WizardContext) -> Outcome:
    """Used when research crashed outright: continue with the example ideas."""
    ctx.discovered_ideas = fallback_ideas()
    return Advance(len(ctx.discovered_ideas))


async def run_discovery_results_step(ctx: WizardContext, env: StepEnv) -> Outcome:
    render_ideas_list(env.ui.console, ctx.discovered_ideas)
    return Advance()


async def run_discovery_select_step(ctx: WizardContext, env: StepEnv) -> Outcome:
    options = [Option(idea.name, idea.id, idea_hint(idea)) for idea in ctx.discovered_ideas]
    options += [
        Option("Generate more ideas", _MORE, "Run another discovery search"),
        Option("Focus on different sector", _SECTOR, "Search in a specific industry"),
    ]
    choice = await env.prompts.select(
        "Select an idea to continue:",
        options,
        default=ctx.selected_idea.id if ctx.selected_idea else None,
        can_go_back=env.can_go_back,
    )
    if choice is BACK:
        return BACK
    if choice == _MORE:
        return Retry("more")
    if choice == _SECTOR:
        return Retry("sector")
    ctx.selected_idea = next(i for i in ctx.discovered_ideas if i.id == choice)
    return Advance(ctx.selected_idea)


async def run_discovery_confirm_step(ctx: WizardContext, env: StepEnv) -> Outcome:
    idea = ctx.selected_idea
    if idea is None:
        return Advance(False)
    render_idea_details(env.ui.console, idea)
    confirmed = await env.prompts.confirm(f'Proceed with "{idea.name}"?', can_go_back=env.can_go_back)
    if confirmed is BACK:
        return BACK
    if not confirmed:
        return Advance(False)

    ctx.discovered_idea = idea
    ctx.idea_name = sanitize_project_name(idea.name)
    ctx.idea_description = idea.description
    if not ctx.name_supplied:
        ctx.name = ctx.idea_name
    ctx.description = idea.description
    ctx.inferred_saas_type = infer_saas_type(idea)
    ctx.inferred_pricing = infer_pricing(idea)
    env.ui.success(f"Selected: {idea.name}")
    return Advance(True)
