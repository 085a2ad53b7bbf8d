"""The wizard's state graph.

``transition`` is a total function from (state, context, outcome) to the next
state. Predecessors are not a static table: ``back_target`` looks at the
history to see how the current state was reached. ``enter`` maintains that
history. Entering a state that is already on it rewinds the stack to that
point and resets whatever the rewound states derived, so stale data never
survives a path change.
"""

import logging
from collections.abc import Callable

from saasfactory.core.context import GeneratedContent
from saasfactory.wizard.context import WizardContext
from saasfactory.wizard.outcomes import Advance, Back, Exit, Outcome, Retry
from saasfactory.wizard.states import WizardState as S

logger = logging.getLogger(__name__)


class InvalidTransition(Exception):
    """A handler returned an outcome its state does not accept."""


def entry_state(ctx: WizardContext) -> S:
    if ctx.name_supplied:
        return S.DESCRIPTION
    return S.IDEA_MODE if ctx.ai_available else S.NAME


def back_target(state: S, ctx: WizardContext) -> S | None:
    """Where BACK leads from ``state``, or None when it cannot go back."""
    seen = ctx.visited
    if state is S.IDEA_MODE or state is S.GENERATE:
        return None
    if state is S.DISCOVERY_ROUGH_IDEA:
        return S.IDEA_MODE
    if state is S.DISCOVERY_SECTOR:
        return S.DISCOVERY_ROUGH_IDEA if ctx.idea_mode == "validate" else S.IDEA_MODE
    if state in (S.DISCOVERY_RESEARCH, S.DISCOVERY_RESULTS, S.DISCOVERY_SELECT):
        return S.DISCOVERY_SECTOR
    if state is S.DISCOVERY_CONFIRM:
        return S.DISCOVERY_RESULTS
    if state is S.NAME:
        if seen(S.DISCOVERY_CONFIRM):
            return S.DISCOVERY_RESULTS
        if seen(S.IDEA_REFINEMENT):
            return S.IDEA_REFINEMENT
        if seen(S.DESCRIPTION):
            return S.DESCRIPTION
        return None
    if state is S.DESCRIPTION:
        if seen(S.IDEA_MODE):
            return S.IDEA_MODE
        if seen(S.NAME):
            return S.NAME
        return None
    if state is S.IDEA_REFINEMENT:
        return S.DESCRIPTION
    if state is S.NAME_RESEARCH:
        return S.IDEA_REFINEMENT
    if state is S.PROJECT_CONFIG:
        if seen(S.NAME) and seen(S.DESCRIPTION):
            # Whichever of the two was answered last leads here
            return max(S.NAME, S.DESCRIPTION, key=ctx.history.index)
        return S.NAME if seen(S.NAME) else S.DESCRIPTION
    if state is S.BRANDING:
        return S.PROJECT_CONFIG
    if state is S.AI_CONTENT or state is S.SUMMARY:
        return S.BRANDING
    if state is S.PROJECT_LOCATION:
        return S.SUMMARY
    raise InvalidTransition(f"Unknown state {state!r}")


def _after_idea_mode(ctx: WizardContext, value: object) -> S:
    if value == "discover":
        return S.DISCOVERY_SECTOR
    if value == "validate":
        return S.DISCOVERY_ROUGH_IDEA
    if value == "has_idea":
        return S.DESCRIPTION
    raise InvalidTransition(f"Unknown idea mode {value!r}")


def _after_name(ctx: WizardContext) -> S:
    # Without the assistant the description is asked after the name
    if not ctx.ai_available and not ctx.visited(S.DESCRIPTION):
        return S.DESCRIPTION
    return S.PROJECT_CONFIG


def _after_description(ctx: WizardContext) -> S:
    if ctx.ai_available:
        return S.IDEA_REFINEMENT
    if ctx.name:
        return S.PROJECT_CONFIG
    return S.NAME


def _after_refinement(ctx: WizardContext) -> S:
    return S.NAME if ctx.options.skip_research else S.NAME_RESEARCH


def _forward(state: S, ctx: WizardContext, value: object) -> S:
    if state is S.IDEA_MODE:
        return _after_idea_mode(ctx, value)
    if state is S.DISCOVERY_ROUGH_IDEA:
        return S.DISCOVERY_SECTOR
    if state is S.DISCOVERY_SECTOR:
        return S.DISCOVERY_RESEARCH
    if state is S.DISCOVERY_RESEARCH:
        return S.DISCOVERY_RESULTS
    if state is S.DISCOVERY_RESULTS:
        return S.DISCOVERY_SELECT
    if state is S.DISCOVERY_SELECT:
        return S.DISCOVERY_CONFIRM
    if state is S.DISCOVERY_CONFIRM:
        return S.NAME if value else S.DISCOVERY_SELECT
    if state is S.NAME:
        return _after_name(ctx)
    if state is S.DESCRIPTION:
        return _after_description(ctx)
    if state is S.IDEA_REFINEMENT:
        return _after_refinement(ctx)
    if state is S.NAME_RESEARCH:
        return S.NAME
    if state is S.PROJECT_CONFIG:
        return S.BRANDING
    if state is S.BRANDING:
        return S.AI_CONTENT if ctx.ai_available else S.SUMMARY
    if state is S.AI_CONTENT:
        return S.SUMMARY
    if state is S.SUMMARY:
        return S.PROJECT_LOCATION
    if state is S.PROJECT_LOCATION:
        return S.GENERATE
    raise InvalidTransition(f"No forward edge from {state.value}")


def transition(state: S, ctx: WizardContext, outcome: Outcome) -> S:
    """Next state for ``outcome``. ``Exit`` is handled by the loop, never here."""
    if isinstance(outcome, Advance):
        return _forward(state, ctx, outcome.value)
    if isinstance(outcome, Back):
        target = back_target(state, ctx)
        return state if target is None else target
    if isinstance(outcome, Retry):
        if state is not S.DISCOVERY_SELECT:
            raise InvalidTransition(f"{state.value} cannot retry")
        return S.DISCOVERY_RESEARCH if outcome.reason == "more" else S.DISCOVERY_SECTOR
    if isinstance(outcome, Exit):
        raise InvalidTransition("Exit ends the wizard and has no successor")
    raise InvalidTransition(f"Unknown outcome {outcome!r}")


# -- invalidation -----------------------------------------------------------


def _reset_research(ctx: WizardContext) -> None:
    ctx.discovered_ideas = []
    ctx.discovery_searches = 0
    ctx.discovery_sources = 0


def _reset_select(ctx: WizardContext) -> None:
    ctx.selected_idea = None


def _reset_confirm(ctx: WizardContext) -> None:
    # Prefill that the user kept unchanged goes with the idea
    if ctx.idea_name is not None and ctx.name == ctx.idea_name and not ctx.name_supplied:
        ctx.name = ""
    if ctx.idea_description is not None and ctx.description == ctx.idea_description:
        ctx.description = ""
    ctx.discovered_idea = None
    ctx.idea_name = None
    ctx.idea_description = None
    ctx.inferred_saas_type = None
    ctx.inferred_pricing = None


def _reset_refinement(ctx: WizardContext) -> None:
    ctx.refined_versions = []


def _reset_name_research(ctx: WizardContext) -> None:
    ctx.suggested_names = []
    ctx.competitors = []


def _reset_project_config(ctx: WizardContext) -> None:
    ctx.project_type = None
    ctx.pricing_type = None
    ctx.selected_features = []
    ctx.custom_answers = {}


def _reset_ai_content(ctx: WizardContext) -> None:
    ctx.ai_content_generated = False
    ctx.content = GeneratedContent()


def _reset_location(ctx: WizardContext) -> None:
    ctx.project_path = None


RESETS: dict[S, Callable[[WizardContext], None]] = {
    S.DISCOVERY_RESEARCH: _reset_research,
    S.DISCOVERY_SELECT: _reset_select,
    S.DISCOVERY_CONFIRM: _reset_confirm,
    S.IDEA_REFINEMENT: _reset_refinement,
    S.NAME_RESEARCH: _reset_name_research,
    S.PROJECT_CONFIG: _reset_project_config,
    S.AI_CONTENT: _reset_ai_content,
    S.PROJECT_LOCATION: _reset_location,
}


def enter(ctx: WizardContext, state: S) -> list[S]:
    """Record entry into ``state``. Returns the states that were rewound."""
    if state not in ctx.history:
        ctx.history.append(state)
        return []
    index = ctx.history.index(state)
    rewound = ctx.history[index + 1 :]
    del ctx.history[index + 1 :]
    for undone in reversed(rewound):
        reset = RESETS.get(undone)
        if reset is not None:
            reset(ctx)
    if rewound:
        logger.debug("Rewound %s back to %s", [s.value for s in rewound], state.value)
    return rewound
