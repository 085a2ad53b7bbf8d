"""Tests for the assistant-backed helpers and their fallbacks."""

import json
from datetime import date
from pathlib import Path

import pytest
from conftest import ANALYZE, CONTENT, DISCOVER, NAMES, REFINE, RESEARCH, FakeRunner, idea_payload

from saasfactory.ai.analyzer import analyze_project
from saasfactory.ai.content import build_content_prompt, generate_marketing_content
from saasfactory.ai.discovery import discover_ideas, extract_ideas_payload, fallback_ideas, normalize_idea
from saasfactory.ai.refiner import refine_idea, suggest_project_names
from saasfactory.ai.reports import (
    difficulty_stars,
    render_research_markdown,
    research_one_liner,
    write_research_report,
)
from saasfactory.ai.research import (
    build_research_prompt,
    extract_keywords,
    research_competitors,
    resolve_mode,
    should_proceed,
)
from saasfactory.ai.runner import TaskResult
from saasfactory.core.context import (
    Competitor,
    GeneratedContent,
    MarketResearch,
    MarketValidation,
    ProjectContext,
)

RESEARCH_REPLY = {
    "ideaSummary": "Invoice reminders",
    "marketValidation": {"score": 7, "verdict": "strong", "reasoning": "Clear demand"},
    "competitors": [
        {"name": "Chaser", "url": "https://chaser.io", "description": "Reminders", "weaknesses": ["Pricey"]}
    ],
    "opportunities": ["Small teams"],
    "risks": ["Crowded"],
    "recommendations": ["Start narrow"],
}


# -- discovery ----------------------------------------------------------------


def test_extract_ideas_from_fenced_block() -> None:
    reply = "Here you go:\n```json\n" + json.dumps(idea_payload(2)) + "\n```\nGood luck!"
    ideas = extract_ideas_payload(reply)
    assert [i["name"] for i in ideas] == ["InvoicePing", "ShiftBoard"]


def test_extract_ideas_from_prose_with_trailing_comma() -> None:
    reply = 'I researched a lot. {"ideas": [{"id": "a", "name": "Alpha",},]} Hope this helps.'
    assert extract_ideas_payload(reply) == [{"id": "a", "name": "Alpha"}]


def test_extract_ideas_without_json() -> None:
    assert extract_ideas_payload("Sorry, I could not find anything.") is None


def test_normalize_idea_clamps_and_fills() -> None:
    idea = normalize_idea(
        {
            "marketOpportunity": {"score": 42, "verdict": "AMAZING"},
            "difficulty": {"score": 0},
            "income": {"model": "barter"},
        },
        index=1,
    )
    assert idea.id == "idea-2"
    assert idea.name == "Idea 2"
    assert idea.market_opportunity.score == 10
    assert idea.market_opportunity.verdict == "moderate"
    assert idea.difficulty.score == 1
    assert idea.income.model == "freemium"
    assert idea.target_audience == ["General users"]


@pytest.mark.asyncio
async def test_discovery_success() -> None:
    runner = FakeRunner(replies={DISCOVER: TaskResult(text=json.dumps(idea_payload(5)), search_count=4)})
    result = await discover_ideas(runner, sector="healthcare")
    assert not result.is_fallback
    assert len(result.ideas) == 5
    assert result.search_count == 4
    assert "Found 5 viable" in result.one_liner()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("reply", "error"),
    [
        ("no json at all", "Invalid AI response format"),
        ({"ideas": []}, "No ideas found in response"),
    ],
)
async def test_discovery_fallbacks(reply, error: str) -> None:
    result = await discover_ideas(FakeRunner(replies={DISCOVER: reply}))
    assert result.is_fallback
    assert result.error == error
    assert [i.name for i in result.ideas] == ["WaitlistKit", "FeedbackDrop"]


@pytest.mark.asyncio
async def test_discovery_assistant_failure_falls_back() -> None:
    result = await discover_ideas(FakeRunner())
    assert result.is_fallback
    assert result.ideas == fallback_ideas()
    assert "example ideas" in result.one_liner()


# -- refinement, names, analysis ----------------------------------------------


@pytest.mark.asyncio
async def test_refine_rejects_bad_json() -> None:
    result = await refine_idea(FakeRunner(replies={REFINE: "not json"}), "my idea")
    assert not result.success
    assert result.error == "Invalid AI response format"
    assert result.versions[0].summary == "my idea"


@pytest.mark.asyncio
async def test_refine_without_versions() -> None:
    result = await refine_idea(FakeRunner(replies={REFINE: {"versions": []}}), "my idea")
    assert result.error == "No refined versions generated"


@pytest.mark.asyncio
async def test_name_suggestions_skip_empty_names() -> None:
    runner = FakeRunner(replies={NAMES: {"suggestedNames": ["PayNudge", "", None, "Dunly"]}})
    result = await suggest_project_names(runner, "invoices")
    assert result.success
    assert result.suggested_names == ["PayNudge", "Dunly"]
    assert result.competitors == []


@pytest.mark.asyncio
async def test_analysis_fills_missing_pricing() -> None:
    runner = FakeRunner(replies={ANALYZE: {"projectType": "mobile game app", "suggestedFeatures": []}})
    analysis = await analyze_project(runner, "a game")
    assert analysis.success
    assert analysis.project_type == "mobile game app"
    assert [p.value for p in analysis.pricing_options] == ["freemium", "subscription", "one-time"]


@pytest.mark.asyncio
async def test_analysis_failure_uses_generic_options() -> None:
    analysis = await analyze_project(FakeRunner(), "a game")
    assert not analysis.success
    assert analysis.error == "no scripted reply"
    assert analysis.project_type == "web application"


# -- marketing content --------------------------------------------------------


def project(**overrides) -> ProjectContext:
    values = {"name": "acme-app", "display_name": "Acme App", "description": "Invoice reminders"}
    values.update(overrides)
    return ProjectContext(**values)


@pytest.mark.asyncio
async def test_content_merges_over_existing() -> None:
    """Empty fields in the reply keep what the project already had."""
    runner = FakeRunner(replies={CONTENT: {"tagline": "", "heroHeadline": "Stop chasing invoices"}})
    result = await generate_marketing_content(
        runner, project(content=GeneratedContent(tagline="Mine", meta_description="Meta"))
    )
    assert result.success
    assert result.content.tagline == "Mine"
    assert result.content.hero_headline == "Stop chasing invoices"
    assert result.content.meta_description == "Meta"


@pytest.mark.asyncio
async def test_content_failure_keeps_current_content() -> None:
    current = GeneratedContent(tagline="Mine")
    result = await generate_marketing_content(FakeRunner(replies={CONTENT: "garbage"}), project(content=current))
    assert not result.success
    assert result.content == current


def test_content_prompt_mentions_competitor_weaknesses() -> None:
    research = MarketResearch(competitors=[Competitor(name="Chaser", description="Reminders", weaknesses=["Pricey"])])
    prompt = build_content_prompt(project(market_research=research))
    assert "Chaser: Reminders (weaknesses: Pricey)" in prompt
    assert "differentiates from competitors" in prompt
    assert "Competitor analysis" not in build_content_prompt(project())


# -- competitor research ------------------------------------------------------


def test_research_mode_and_keywords() -> None:
    assert resolve_mode("https://acme.com", "quick") == "url"
    assert resolve_mode("invoice tool", "quick") == "quick"
    assert extract_keywords("A tool for the tracking of unpaid invoices") == "tracking unpaid invoices"
    assert "Analyze this website" in build_research_prompt("https://acme.com", "url")


@pytest.mark.asyncio
async def test_research_success() -> None:
    runner = FakeRunner(
        replies={RESEARCH: TaskResult(text=json.dumps(RESEARCH_REPLY), session_id="s1", sources=["chaser.io"])}
    )
    result = await research_competitors(runner, "invoice reminders for teams", mode="quick")
    assert not result.is_fallback
    assert result.session_id == "s1"
    assert result.research.competitors[0].name == "Chaser"
    assert result.sources == ["chaser.io"]


@pytest.mark.asyncio
async def test_research_incomplete_payload_falls_back() -> None:
    runner = FakeRunner(replies={RESEARCH: TaskResult(text='{"ideaSummary": "x"}', session_id="s1")})
    result = await research_competitors(runner, "invoice reminders")
    assert result.is_fallback
    assert result.error == "Incomplete research data"
    assert result.session_id == "s1"
    assert result.research.recommendations == ["Conduct manual competitor research"]


@pytest.mark.asyncio
async def test_research_url_mode_fallback() -> None:
    runner = FakeRunner(replies={"Analyze this website": "nothing useful"})
    result = await research_competitors(runner, "https://acme.com")
    assert result.is_fallback
    assert result.error == "Invalid AI response format"
    assert result.research.idea_summary == "Analysis of https://acme.com"
    assert result.research.market_validation.reasoning.startswith("AI response did not contain valid JSON")


@pytest.mark.parametrize(
    ("score", "verdict", "proceed"),
    [(8, "strong", True), (5, "moderate", True), (3, "weak", False), (9, "saturated", False)],
)
def test_should_proceed(score: int, verdict: str, proceed: bool) -> None:
    research = MarketResearch(market_validation=MarketValidation(score=score, verdict=verdict))
    assert should_proceed(research)[0] is proceed


# -- reports ------------------------------------------------------------------


def test_research_markdown() -> None:
    research = MarketResearch.model_validate(RESEARCH_REPLY)
    text = render_research_markdown(research, "Acme", today=date(2026, 1, 2))
    assert text.startswith("# Market Research Report: Acme\n")
    assert "Generated by SaasFactory on 2026-01-02" in text
    assert "**Market Validation Score:** 7/10 - STRONG OPPORTUNITY" in text
    assert "### 1. Chaser" in text
    assert "- Pricey" in text
    assert "Proceed with confidence" in text


def test_markdown_for_saturated_market_without_competitors() -> None:
    research = MarketResearch(market_validation=MarketValidation(score=2, verdict="saturated"))
    text = render_research_markdown(research, "Acme")
    assert "No direct competitors identified" in text
    assert "The market appears saturated" in text


def test_write_report_creates_parent(tmp_path: Path) -> None:
    path = write_research_report(MarketResearch(), tmp_path / "out" / "acme-research.md", "Acme")
    assert path.read_text().startswith("# Market Research Report: Acme")


def test_small_formatters() -> None:
    assert difficulty_stars(1) == "★★★★★"
    assert difficulty_stars(5) == "★☆☆☆☆"
    research = MarketResearch.model_validate(RESEARCH_REPLY)
    assert research_one_liner(research).startswith("Score: 7/10 (STRONG OPPORTUNITY) | 1 competitors found")
