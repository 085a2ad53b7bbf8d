"""Wizard loop: run the handler for the current state, then follow the graph."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from saasfactory.core.errors import SaasFactoryError, WizardAbort
from saasfactory.wizard import steps
from saasfactory.wizard.context import WizardContext
from saasfactory.wizard.env import StepEnv
from saasfactory.wizard.graph import InvalidTransition, back_target, enter, entry_state, transition
from saasfactory.wizard.outcomes import Advance, Exit, Outcome
from saasfactory.wizard.states import AI_STATES, WizardState

logger = logging.getLogger(__name__)

Handler = Callable[[WizardContext, StepEnv], Awaitable[Outcome]]


def _skip(ctx: WizardContext) -> Outcome:
    return Advance(None)


@dataclass(frozen=True)
class StateSpec:
    """How the loop runs one state.

    An optional state's unexpected failure becomes a warning and ``fallback``;
    a required state's failure aborts the wizard.
    """

    handler: Handler
    optional: bool = False
    label: str = ""
    fallback: Callable[[WizardContext], Outcome] = _skip


S = WizardState

STATE_SPECS: dict[WizardState, StateSpec] = {
    S.IDEA_MODE: StateSpec(steps.run_idea_mode_step),
    S.DISCOVERY_ROUGH_IDEA: StateSpec(steps.run_rough_idea_step),
    S.DISCOVERY_SECTOR: StateSpec(steps.run_sector_step),
    S.DISCOVERY_RESEARCH: StateSpec(
        steps.run_discovery_research_step,
        optional=True,
        label="Idea discovery",
        fallback=steps.discovery_fallback,
    ),
    S.DISCOVERY_RESULTS: StateSpec(steps.run_discovery_results_step),
    S.DISCOVERY_SELECT: StateSpec(steps.run_discovery_select_step),
    S.DISCOVERY_CONFIRM: StateSpec(steps.run_discovery_confirm_step),
    S.NAME: StateSpec(steps.run_name_step),
    S.DESCRIPTION: StateSpec(steps.run_description_step),
    S.IDEA_REFINEMENT: StateSpec(steps.run_idea_refinement_step, optional=True, label="Idea refinement"),
    S.NAME_RESEARCH: StateSpec(steps.run_name_research_step, optional=True, label="Name research"),
    S.PROJECT_CONFIG: StateSpec(steps.run_project_config_step),
    S.BRANDING: StateSpec(steps.run_branding_step),
    S.AI_CONTENT: StateSpec(steps.run_ai_content_step, optional=True, label="AI content"),
    S.SUMMARY: StateSpec(steps.run_summary_step),
    S.PROJECT_LOCATION: StateSpec(steps.run_project_location_step),
}


@dataclass
class WizardResult:
    """Result of running the wizard."""

    completed: bool
    cancelled: bool
    context: WizardContext
    states: list[WizardState] = field(default_factory=list)


async def _run_state(state: WizardState, spec: StateSpec, ctx: WizardContext, env: StepEnv) -> Outcome:
    try:
        return await spec.handler(ctx, env)
    except (KeyboardInterrupt, asyncio.CancelledError):
        raise
    except Exception as e:
        if spec.optional:
            logger.warning("%s failed in state %s", spec.label, state.value, exc_info=True)
            env.ui.warn(f"{spec.label} skipped: {e}")
            return spec.fallback(ctx)
        logger.exception("State %s failed", state.value)
        if isinstance(e, SaasFactoryError):
            raise WizardAbort(e.message, e.suggestion) from e
        raise WizardAbort(f"Wizard step '{state.value}' failed: {e}") from e


async def run_wizard(
    ctx: WizardContext,
    env: StepEnv,
    specs: dict[WizardState, StateSpec] | None = None,
) -> WizardResult:
    """Drive the wizard from its entry state to ``generate``.

    Returns a cancelled result when the user declines at the summary.
    Raises WizardAbort when a required step fails. KeyboardInterrupt propagates.
    """
    specs = specs or STATE_SPECS
    visited: list[WizardState] = []
    state = entry_state(ctx)
    logger.info("Wizard started at %s (assistant available: %s)", state.value, ctx.ai_available)

    while state is not S.GENERATE:
        if not ctx.ai_available and state in AI_STATES:
            raise WizardAbort(f"State {state.value} requires the AI assistant")
        enter(ctx, state)
        visited.append(state)
        env.can_go_back = back_target(state, ctx) is not None

        outcome = await _run_state(state, specs[state], ctx, env)
        if isinstance(outcome, Exit):
            logger.info("Wizard exited at %s: %s", state.value, outcome.reason)
            return WizardResult(completed=False, cancelled=True, context=ctx, states=visited)
        try:
            nxt = transition(state, ctx, outcome)
        except InvalidTransition as e:
            raise WizardAbort(str(e)) from e
        logger.debug("%s -> %s (%r)", state.value, nxt.value, outcome)
        state = nxt

    enter(ctx, S.GENERATE)
    visited.append(S.GENERATE)
    logger.info("Wizard completed after %d states", len(visited))
    return WizardResult(completed=True, cancelled=False, context=ctx, states=visited)
