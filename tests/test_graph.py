"""Tests for the wizard state graph: transitions, provenance-aware back and invalidation."""

import pytest

from saasfactory.core.context import GeneratedContent, SaasIdea
from saasfactory.wizard.context import WizardContext, WizardOptions
from saasfactory.wizard.graph import InvalidTransition, back_target, enter, entry_state, transition
from saasfactory.wizard.outcomes import BACK, Advance, Exit, Retry
from saasfactory.wizard.states import WizardState as S


def walk(ctx: WizardContext, *states: S) -> None:
    for state in states:
        enter(ctx, state)


def test_entry_states() -> None:
    assert entry_state(WizardContext(ai_available=True)) is S.IDEA_MODE
    assert entry_state(WizardContext(ai_available=False)) is S.NAME
    assert entry_state(WizardContext(ai_available=True, name_supplied=True)) is S.DESCRIPTION


def test_name_back_after_discovery() -> None:
    """Reached through discovery, back from name returns to the results list."""
    ctx = WizardContext(ai_available=True)
    walk(
        ctx,
        S.IDEA_MODE,
        S.DISCOVERY_SECTOR,
        S.DISCOVERY_RESEARCH,
        S.DISCOVERY_RESULTS,
        S.DISCOVERY_SELECT,
        S.DISCOVERY_CONFIRM,
        S.NAME,
    )
    assert transition(S.NAME, ctx, BACK) is S.DISCOVERY_RESULTS


def test_name_back_after_direct_entry() -> None:
    ctx = WizardContext(ai_available=True)
    walk(ctx, S.IDEA_MODE, S.DESCRIPTION, S.IDEA_REFINEMENT, S.NAME_RESEARCH, S.NAME)
    assert transition(S.NAME, ctx, BACK) is S.IDEA_REFINEMENT


def test_name_back_without_assistant() -> None:
    """Without the assistant name is the first state; once description came first, back leads there."""
    ctx = WizardContext(ai_available=False)
    walk(ctx, S.NAME)
    assert back_target(S.NAME, ctx) is None
    assert transition(S.NAME, ctx, BACK) is S.NAME

    ctx = WizardContext(ai_available=False)
    walk(ctx, S.NAME, S.DESCRIPTION)
    assert transition(S.DESCRIPTION, ctx, BACK) is S.NAME


def test_project_config_back_follows_last_answered_step() -> None:
    """Without the assistant, description comes after name, so back from config returns to it."""
    ctx = WizardContext(ai_available=False)
    walk(ctx, S.NAME, S.DESCRIPTION, S.PROJECT_CONFIG)
    assert transition(S.PROJECT_CONFIG, ctx, BACK) is S.DESCRIPTION

    ctx = WizardContext(ai_available=True)
    walk(ctx, S.IDEA_MODE, S.DESCRIPTION, S.IDEA_REFINEMENT, S.NAME_RESEARCH, S.NAME, S.PROJECT_CONFIG)
    assert transition(S.PROJECT_CONFIG, ctx, BACK) is S.NAME


def test_sector_back_depends_on_mode() -> None:
    ctx = WizardContext(ai_available=True, idea_mode="validate")
    assert back_target(S.DISCOVERY_SECTOR, ctx) is S.DISCOVERY_ROUGH_IDEA
    ctx.idea_mode = "discover"
    assert back_target(S.DISCOVERY_SECTOR, ctx) is S.IDEA_MODE


@pytest.mark.parametrize(
    ("state", "value", "expected"),
    [
        (S.IDEA_MODE, "discover", S.DISCOVERY_SECTOR),
        (S.IDEA_MODE, "validate", S.DISCOVERY_ROUGH_IDEA),
        (S.IDEA_MODE, "has_idea", S.DESCRIPTION),
        (S.DISCOVERY_CONFIRM, True, S.NAME),
        (S.DISCOVERY_CONFIRM, False, S.DISCOVERY_SELECT),
        (S.DESCRIPTION, "text", S.IDEA_REFINEMENT),
        (S.IDEA_REFINEMENT, None, S.NAME_RESEARCH),
        (S.NAME_RESEARCH, None, S.NAME),
        (S.NAME, "acme", S.PROJECT_CONFIG),
        (S.BRANDING, None, S.AI_CONTENT),
        (S.AI_CONTENT, None, S.SUMMARY),
        (S.SUMMARY, True, S.PROJECT_LOCATION),
        (S.PROJECT_LOCATION, None, S.GENERATE),
    ],
)
def test_forward_edges_with_assistant(state: S, value: object, expected: S) -> None:
    ctx = WizardContext(ai_available=True)
    assert transition(state, ctx, Advance(value)) is expected


def test_forward_edges_without_assistant() -> None:
    ctx = WizardContext(ai_available=False)
    enter(ctx, S.NAME)
    assert transition(S.NAME, ctx, Advance("acme")) is S.DESCRIPTION
    enter(ctx, S.DESCRIPTION)
    ctx.name = "acme"
    assert transition(S.DESCRIPTION, ctx, Advance("desc")) is S.PROJECT_CONFIG
    assert transition(S.BRANDING, ctx, Advance(None)) is S.SUMMARY


def test_skip_research_goes_straight_to_name() -> None:
    ctx = WizardContext(ai_available=True, options=WizardOptions(skip_research=True))
    assert transition(S.IDEA_REFINEMENT, ctx, Advance(None)) is S.NAME


def test_retry_edges() -> None:
    ctx = WizardContext(ai_available=True)
    assert transition(S.DISCOVERY_SELECT, ctx, Retry("more")) is S.DISCOVERY_RESEARCH
    assert transition(S.DISCOVERY_SELECT, ctx, Retry("sector")) is S.DISCOVERY_SECTOR
    with pytest.raises(InvalidTransition):
        transition(S.NAME, ctx, Retry("more"))


def test_every_state_is_total() -> None:
    """Every non-terminal state has a forward edge and a back answer, and results stay in the state set."""
    ctx = WizardContext(ai_available=True)
    for state in S:
        if state is S.GENERATE:
            continue
        value = "has_idea" if state is S.IDEA_MODE else True
        assert transition(state, ctx, Advance(value)) in set(S)
        assert transition(state, ctx, BACK) in set(S)
    with pytest.raises(InvalidTransition):
        transition(S.SUMMARY, ctx, Exit())


def test_enter_rewinds_and_resets_derived_fields() -> None:
    ctx = WizardContext(ai_available=True)
    walk(ctx, S.IDEA_MODE, S.DESCRIPTION, S.IDEA_REFINEMENT, S.NAME, S.PROJECT_CONFIG, S.BRANDING)
    ctx.pricing_type = "subscription"
    ctx.selected_features = ["x"]
    ctx.domain = "acme.com"
    ctx.description = "typed by the user"

    rewound = enter(ctx, S.NAME)
    assert rewound == [S.PROJECT_CONFIG, S.BRANDING]
    assert ctx.history[-1] is S.NAME
    assert ctx.pricing_type is None
    assert ctx.selected_features == []
    # typed answers survive as defaults
    assert ctx.domain == "acme.com"
    assert ctx.description == "typed by the user"


def test_back_to_branding_resets_ai_content() -> None:
    ctx = WizardContext(ai_available=True)
    walk(ctx, S.DESCRIPTION, S.PROJECT_CONFIG, S.BRANDING, S.AI_CONTENT, S.SUMMARY)
    ctx.ai_content_generated = True
    ctx.content = GeneratedContent(tagline="stale")
    enter(ctx, transition(S.SUMMARY, ctx, BACK))
    assert ctx.ai_content_generated is False
    assert ctx.content.tagline == ""


def test_rewinding_confirm_clears_idea_linkage() -> None:
    """Only prefilled values are cleared; a name the user edited is kept."""
    ctx = WizardContext(ai_available=True)
    walk(ctx, S.IDEA_MODE, S.DISCOVERY_SECTOR, S.DISCOVERY_RESEARCH, S.DISCOVERY_RESULTS)
    walk(ctx, S.DISCOVERY_SELECT, S.DISCOVERY_CONFIRM, S.NAME)
    idea = SaasIdea(id="i", name="FormPilot", description="Forms for devs")
    ctx.selected_idea = idea
    ctx.discovered_idea = idea
    ctx.idea_name, ctx.idea_description = "formpilot", "Forms for devs"
    ctx.name, ctx.description = "my-own-name", "Forms for devs"
    ctx.inferred_saas_type = "tool"

    enter(ctx, S.DISCOVERY_RESULTS)
    assert ctx.discovered_idea is None
    assert ctx.selected_idea is None
    assert ctx.inferred_saas_type is None
    assert ctx.description == ""
    assert ctx.name == "my-own-name"
