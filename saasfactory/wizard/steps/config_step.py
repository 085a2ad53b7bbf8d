"""Project configuration (type, pricing, features, scoping questions) and branding."""

import logging
import re

from saasfactory.ai.analyzer import ProjectAnalysis, analyze_project, fallback_analysis
from saasfactory.wizard.context import WizardContext
from saasfactory.wizard.env import StepEnv
from saasfactory.wizard.outcomes import BACK, Advance, Outcome
from saasfactory.wizard.prompts import Option

logger = logging.getLogger(__name__)


async def _load_analysis(ctx: WizardContext, env: StepEnv) -> ProjectAnalysis:
    """Analysis for the current description, cached until the description changes."""
    if ctx.analysis is not None and ctx.analysis_key == ctx.description:
        return ctx.analysis
    if ctx.ai_available:
        with env.ui.console.status("Analyzing your project..."):
            analysis = await analyze_project(
                env.runner, ctx.description, timeout=env.timeout("analyze", 60)
            )
        if analysis.success:
            env.ui.success(f"Detected: {analysis.project_type}")
        else:
            env.ui.warn(f"Project analysis skipped: {analysis.error}")
    else:
        analysis = fallback_analysis()
    ctx.analysis = analysis
    ctx.analysis_key = ctx.description
    return analysis


async def _ask_questions(ctx: WizardContext, env: StepEnv, analysis: ProjectAnalysis) -> dict | None:
    """Scoping questions one by one. None means ESC on the first question."""
    answers: dict[str, str | list[str]] = {}
    index = 0
    while index < len(analysis.questions):
        question = analysis.questions[index]
        options = [Option(o.label, o.value) for o in question.options]
        previous = ctx.custom_answers.get(question.id)
        if question.multi_select:
            answer = await env.prompts.checkbox(
                question.question, options, checked=previous if isinstance(previous, list) else ()
            )
        else:
            answer = await env.prompts.select(question.question, options, default=previous)
        if answer is BACK:
            if index == 0:
                return None
            index -= 1
            continue
        answers[question.id] = answer
        index += 1
    return answers


async def run_project_config_step(ctx: WizardContext, env: StepEnv) -> Outcome:
    env.ui.heading("Project Configuration")
    analysis = await _load_analysis(ctx, env)
    pricing_options = [Option(p.label, p.value, p.hint) for p in analysis.pricing_options]
    feature_options = [Option(f.label, f.id, f.description) for f in analysis.suggested_features]

    # sub-steps: 0 pricing, 1 features, 2 questions; ESC walks back through them
    step = 0
    pricing = ctx.pricing_type or ctx.inferred_pricing
    features = list(ctx.selected_features)
    answers: dict[str, str | list[str]] = dict(ctx.custom_answers)
    while step < 3:
        if step == 0:
            choice = await env.prompts.select(
                "How will you monetize?", pricing_options, default=pricing, can_go_back=env.can_go_back
            )
            if choice is BACK:
                return BACK
            pricing = choice
            step = 1
        elif step == 1:
            if not feature_options:
                step = 2
                continue
            picked = await env.prompts.checkbox(
                "Which features are relevant? (space to select)", feature_options, checked=features
            )
            if picked is BACK:
                step = 0
                continue
            features = picked
            step = 2
        else:
            if not analysis.questions:
                step = 3
                continue
            result = await _ask_questions(ctx, env, analysis)
            if result is None:
                step = 1 if feature_options else 0
                continue
            answers = result
            step = 3

    ctx.project_type = analysis.project_type
    ctx.pricing_type = pricing
    ctx.selected_features = features
    ctx.custom_answers = answers
    return Advance(pricing)


def sanitize_domain(value: str) -> str:
    """Keep letters, digits, dashes and dots, lowercased."""
    return re.sub(r"[^a-z0-9.-]", "", value.strip().lower())


def _check_domain(value: str) -> bool | str:
    if not value.strip():
        return True
    cleaned = sanitize_domain(value)
    if "." not in cleaned or cleaned.startswith(".") or cleaned.endswith("."):
        return "Enter a domain like acme.com, or leave empty"
    return True


async def run_branding_step(ctx: WizardContext, env: StepEnv) -> Outcome:
    """Domain then tagline. Both are written together once the tagline is answered."""
    env.ui.heading("Branding")
    domain = ctx.domain or ""
    while True:
        typed = await env.prompts.text(
            "Domain name (optional, e.g. acme.com):",
            default=domain,
            validate=_check_domain,
            can_go_back=env.can_go_back,
        )
        if typed is BACK:
            return BACK
        domain = sanitize_domain(typed)

        tagline = await env.prompts.text(
            "Tagline (optional, AI can write one):" if ctx.ai_available else "Tagline (optional):",
            default=ctx.tagline,
        )
        if tagline is BACK:
            continue
        ctx.domain = domain or None
        ctx.tagline = tagline.strip()
        return Advance(ctx.domain)
