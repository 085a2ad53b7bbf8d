"""Tests for individual wizard state handlers."""

from pathlib import Path

import pytest
from conftest import ANALYZE, NAMES, REFINE, FakeRunner, make_env, ui_output

from saasfactory.ai.refiner import CompetitorBrief
from saasfactory.wizard.context import WizardContext, WizardOptions
from saasfactory.wizard.outcomes import BACK, Advance, Exit
from saasfactory.wizard.scripted import DEFAULT, ESCAPE
from saasfactory.wizard.steps import (
    run_branding_step,
    run_idea_refinement_step,
    run_name_research_step,
    run_name_step,
    run_project_config_step,
    run_project_location_step,
    run_sector_step,
    run_summary_step,
)
from saasfactory.wizard.steps.config_step import sanitize_domain

DESCRIPTION = "A tool that helps small teams track unpaid invoices"


def ai_context(tmp_path: Path) -> WizardContext:
    ctx = WizardContext(ai_available=True, options=WizardOptions(cwd=tmp_path))
    ctx.name = "acme-app"
    ctx.description = DESCRIPTION
    return ctx


@pytest.mark.asyncio
async def test_name_from_suggestions(tmp_path: Path) -> None:
    ctx = ai_context(tmp_path)
    ctx.suggested_names = ["Invoice Ping", "PayNudge"]
    ctx.competitors = [CompetitorBrief(name="Chaser", description="Invoice reminders")]
    env, _ = make_env(["Invoice Ping"])
    assert await run_name_step(ctx, env) == Advance("invoice-ping")
    assert "Chaser" in ui_output(env.ui)


@pytest.mark.asyncio
async def test_custom_name_escape_returns_to_suggestions(tmp_path: Path) -> None:
    """ESC ESC on the custom name text goes back to the suggestion list, not out of the step."""
    ctx = ai_context(tmp_path)
    ctx.suggested_names = ["PayNudge"]
    env, backend = make_env(["__custom__", ESCAPE, ESCAPE, "PayNudge"])
    assert await run_name_step(ctx, env) == Advance("paynudge")
    assert [p.kind for p in backend.asked] == ["select", "text", "text", "select"]


@pytest.mark.asyncio
async def test_refinement_pick_version(tmp_path: Path) -> None:
    runner = FakeRunner(
        replies={REFINE: {"versions": [{"summary": "Refined one"}, {"summary": "Refined two, broader"}]}}
    )
    ctx = ai_context(tmp_path)
    env, _ = make_env([1], runner=runner)
    assert await run_idea_refinement_step(ctx, env) == Advance("Refined two, broader")
    assert ctx.description == "Refined two, broader"
    assert len(ctx.refined_versions) == 2


@pytest.mark.asyncio
async def test_refinement_custom_then_back_then_original(tmp_path: Path) -> None:
    runner = FakeRunner(replies={REFINE: {"versions": [{"summary": "Refined one"}]}})
    ctx = ai_context(tmp_path)
    env, _ = make_env(["__custom__", ESCAPE, ESCAPE, "__original__"], runner=runner)
    assert await run_idea_refinement_step(ctx, env) == Advance(None)
    assert ctx.description == DESCRIPTION


@pytest.mark.asyncio
async def test_refinement_failure_keeps_original(tmp_path: Path) -> None:
    ctx = ai_context(tmp_path)
    env, backend = make_env([], runner=FakeRunner())
    assert await run_idea_refinement_step(ctx, env) == Advance(None)
    assert ctx.description == DESCRIPTION
    assert backend.asked == []
    assert "Could not refine idea" in ui_output(env.ui)


@pytest.mark.asyncio
async def test_name_research_success_and_failure(tmp_path: Path) -> None:
    runner = FakeRunner(
        replies={NAMES: {"competitors": [{"name": "Chaser"}], "suggestedNames": ["PayNudge", "Dunly"]}}
    )
    ctx = ai_context(tmp_path)
    env, _ = make_env([], runner=runner)
    await run_name_research_step(ctx, env)
    assert ctx.suggested_names == ["PayNudge", "Dunly"]
    assert ctx.competitors[0].name == "Chaser"

    env, _ = make_env([], runner=FakeRunner())
    await run_name_research_step(ctx, env)
    assert ctx.suggested_names == []
    assert ctx.competitors == []


@pytest.mark.asyncio
async def test_sector_text_escape_returns_to_question(tmp_path: Path) -> None:
    ctx = ai_context(tmp_path)
    env, _ = make_env([True, ESCAPE, ESCAPE, True, "healthcare"])
    assert await run_sector_step(ctx, env) == Advance("healthcare")
    assert ctx.sector == "healthcare"


@pytest.mark.asyncio
async def test_project_config_with_analysis(tmp_path: Path) -> None:
    """Question ESC walks back to features, then forward again."""
    runner = FakeRunner(
        replies={
            ANALYZE: {
                "projectType": "B2B SaaS",
                "suggestedFeatures": [{"id": "reminders", "label": "Reminders"}],
                "pricingOptions": [{"value": "usage", "label": "Usage based"}],
                "questions": [
                    {"id": "q1", "question": "Q1?", "options": [{"value": "a", "label": "A"}]},
                    {
                        "id": "q2",
                        "question": "Q2?",
                        "options": [{"value": "x", "label": "X"}, {"value": "y", "label": "Y"}],
                        "multiSelect": True,
                    },
                ],
            }
        }
    )
    ctx = ai_context(tmp_path)
    env, _ = make_env(
        ["usage", ["reminders"], ESCAPE, ESCAPE, ["reminders"], "a", ["x", "y"]],
        runner=runner,
    )
    assert await run_project_config_step(ctx, env) == Advance("usage")
    assert ctx.project_type == "B2B SaaS"
    assert ctx.selected_features == ["reminders"]
    assert ctx.custom_answers == {"q1": "a", "q2": ["x", "y"]}

    # a second visit with the same description reuses the cached analysis
    env, _ = make_env([DEFAULT, DEFAULT, DEFAULT, DEFAULT], runner=runner)
    await run_project_config_step(ctx, env)
    assert runner.count(ANALYZE) == 1
    assert ctx.custom_answers == {"q1": "a", "q2": ["x", "y"]}


@pytest.mark.asyncio
async def test_project_config_back_from_pricing(tmp_path: Path) -> None:
    ctx = WizardContext(options=WizardOptions(cwd=tmp_path))
    ctx.description = DESCRIPTION
    env, _ = make_env([ESCAPE, ESCAPE])
    assert await run_project_config_step(ctx, env) is BACK
    assert ctx.pricing_type is None


@pytest.mark.asyncio
async def test_branding_is_atomic(tmp_path: Path) -> None:
    """Backing out of the tagline re-asks the domain; nothing is written until both are answered."""
    ctx = ai_context(tmp_path)
    env, _ = make_env(["First.com", ESCAPE, ESCAPE, "Acme.IO", "Get paid"])
    assert await run_branding_step(ctx, env) == Advance("acme.io")
    assert ctx.domain == "acme.io"
    assert ctx.tagline == "Get paid"


@pytest.mark.asyncio
async def test_branding_rejects_bad_domain(tmp_path: Path) -> None:
    ctx = ai_context(tmp_path)
    env, backend = make_env(["nodot", "", ""])
    await run_branding_step(ctx, env)
    assert ctx.domain is None
    assert backend.notices == ["Enter a domain like acme.com, or leave empty"]


def test_sanitize_domain() -> None:
    assert sanitize_domain("  My_Site.COM ") == "mysite.com"


@pytest.mark.asyncio
async def test_summary_outcomes(tmp_path: Path) -> None:
    ctx = ai_context(tmp_path)
    env, _ = make_env([False])
    assert await run_summary_step(ctx, env) == Exit("declined")
    env, _ = make_env([ESCAPE, ESCAPE])
    assert await run_summary_step(ctx, env) is BACK
    ctx.options.yes = True
    env, backend = make_env([])
    assert await run_summary_step(ctx, env) == Advance(True)
    assert backend.asked == []


@pytest.mark.asyncio
async def test_location_custom_parent(tmp_path: Path) -> None:
    ctx = ai_context(tmp_path)
    env, _ = make_env([False, "projects"])
    await run_project_location_step(ctx, env)
    assert ctx.project_path == (tmp_path / "projects" / "acme-app").resolve()


@pytest.mark.asyncio
async def test_location_yes_uses_cwd(tmp_path: Path) -> None:
    ctx = ai_context(tmp_path)
    ctx.options.yes = True
    env, _ = make_env([])
    assert await run_project_location_step(ctx, env) == Advance((tmp_path / "acme-app").resolve())
