"""Idea discovery: web-researched micro-SaaS candidates, with example ideas as fallback."""

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from saasfactory.ai.runner import AssistantError, AssistantRunner
from saasfactory.ai.stream import ProgressEvent
from saasfactory.core.context import (
    Difficulty,
    IncomeProjection,
    MarketingStrategy,
    MarketingTactic,
    MarketOpportunity,
    SaasIdea,
)

logger = logging.getLogger(__name__)

DISCOVERY_PROMPT = """You are a micro-SaaS idea researcher and validator. Discover REAL, VIABLE
micro-SaaS ideas that an AI coding assistant can build in 1-3 days.

Constraints:
1. Every idea MUST be validated through web search; no hypothetical ideas
2. Ideas are focused on one feature (three at most)
3. Ideas must have clear monetization potential

Prefer simple CRUD apps with standard auth, a landing page plus dashboard, and
a single API integration. Avoid real-time multiplayer, media processing,
custom ML models, hardware and compliance-heavy finance.

Difficulty scoring: 1 trivial (2-4 hrs), 2 easy (4-8 hrs), 3 moderate (1-2 days),
4 challenging (2-3 days), 5 complex (3+ days).

For each idea also research the communities where target users gather and
launch strategies that worked for similar products.

Return ONLY valid JSON matching this structure (no markdown, no explanation):
{
  "ideas": [
    {
      "id": "unique-id-1",
      "name": "ShortName",
      "tagline": "One-liner value proposition",
      "description": "2-3 sentences on what it does and who it is for",
      "problemSolved": "The specific pain point",
      "targetAudience": ["Audience 1"],
      "coreFeatures": ["Feature 1", "Feature 2"],
      "marketOpportunity": {"score": 7, "verdict": "strong", "reasoning": "...",
                            "competitors": ["..."], "gap": "..."},
      "difficulty": {"score": 2, "label": "easy", "reasoning": "...",
                     "estimatedHours": "4-8 hours", "aiStrengths": ["..."]},
      "marketing": {"primaryChannels": ["..."], "launchStrategy": "...",
                    "estimatedCost": "free", "timeToFirstUsers": "2-4 weeks",
                    "tactics": [{"channel": "Reddit", "approach": "..."}]},
      "income": {"model": "freemium", "suggestedPricing": "$0 free / $9/mo pro",
                 "monthlyPotential": "$500-2000/month"},
      "sources": ["example.com"]
    }
  ]
}"""

_DIFFICULTY_LABELS = {1: "trivial", 2: "easy", 3: "moderate", 4: "challenging", 5: "complex"}
_DEFAULT_HOURS = {1: "2-4 hours", 2: "4-8 hours", 3: "1-2 days", 4: "2-3 days", 5: "3+ days"}
_VERDICTS = ("strong", "moderate", "weak", "saturated")
_COSTS = ("free", "low", "medium", "high")
_INCOME_MODELS = ("subscription", "freemium", "one-time", "usage-based")

_CODE_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_TRAILING_COMMA = re.compile(r",\s*([}\]])")
_IDEA_ARRAY = re.compile(r"\[\s*\{[\s\S]*?\}\s*\]")


@dataclass
class DiscoveryResult:
    ideas: list[SaasIdea]
    is_fallback: bool = False
    error: str | None = None
    search_count: int = 0
    sources: list[str] = field(default_factory=list)

    def one_liner(self) -> str:
        if self.is_fallback:
            return f"Using example ideas (research unavailable: {self.error})"
        return f"Found {len(self.ideas)} viable micro-SaaS opportunities"


def build_discovery_prompt(sector: str | None, rough_idea: str | None, count: int) -> str:
    focus = (
        f'Focus specifically on the "{sector}" sector/industry.'
        if sector
        else "Look across different sectors for opportunities."
    )
    lines = [DISCOVERY_PROMPT, "", f"TASK: Discover {count} viable micro-SaaS ideas. {focus}"]
    if rough_idea:
        lines.append(
            f'The user has a rough idea to validate and refine: "{rough_idea}". '
            "Search for similar products, identify gaps, and include at least 2 "
            "variations of their idea alongside other opportunities."
        )
    lines.append("Prioritize ideas with difficulty 1-3 and name exact marketing channels.")
    return "\n".join(lines)


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return None


def _balanced_object_around(text: str, index: int) -> str | None:
    start = text.rfind("{", 0, index)
    if start == -1:
        return None
    depth = 0
    for i in range(start, len(text)):
        if text[i] == "{":
            depth += 1
        elif text[i] == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def extract_ideas_payload(response: str) -> list[dict[str, Any]] | None:
    """Pull the raw idea list out of a reply that may wrap JSON in prose or fences."""
    candidates: list[Any] = []
    block = _CODE_BLOCK.search(response)
    if block:
        candidates.append(_loads(block.group(1).strip()))
    key = response.find('"ideas"')
    if key != -1:
        obj = _balanced_object_around(response, key)
        if obj:
            candidates.append(_loads(obj))
    brace = re.search(r"\{[\s\S]*\}", response)
    if brace:
        candidates.append(_loads(brace.group(0)))
        candidates.append(_loads(_TRAILING_COMMA.sub(r"\1", brace.group(0))))
    array = _IDEA_ARRAY.search(response)
    if array:
        candidates.append({"ideas": _loads(array.group(0))})

    for parsed in candidates:
        if isinstance(parsed, dict) and isinstance(parsed.get("ideas"), list):
            return [i for i in parsed["ideas"] if isinstance(i, dict)]
    return None


def _clamp(value: Any, low: int, high: int, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return max(low, min(high, number))


def _pick(value: Any, allowed: tuple[str, ...], default: str) -> str:
    text = str(value).lower() if value is not None else ""
    return text if text in allowed else default


def _str_list(value: Any, default: list[str] | None = None) -> list[str]:
    if isinstance(value, list):
        items = [str(v) for v in value if v]
        if items:
            return items
    return list(default or [])


def normalize_idea(raw: dict[str, Any], index: int) -> SaasIdea:
    """Fill missing fields and clamp scores of one idea from the assistant."""
    market = raw.get("marketOpportunity") or {}
    difficulty = raw.get("difficulty") or {}
    marketing = raw.get("marketing") or {}
    income = raw.get("income") or {}
    diff_score = _clamp(difficulty.get("score"), 1, 5, 3)

    return SaasIdea(
        id=str(raw.get("id") or f"idea-{index + 1}"),
        name=str(raw.get("name") or f"Idea {index + 1}"),
        tagline=str(raw.get("tagline") or "A micro-SaaS opportunity"),
        description=str(raw.get("description") or "No description provided"),
        problem_solved=str(raw.get("problemSolved") or "Problem to be defined"),
        target_audience=_str_list(raw.get("targetAudience"), ["General users"]),
        core_features=_str_list(raw.get("coreFeatures"), ["Core feature"])[:3],
        market_opportunity=MarketOpportunity(
            score=_clamp(market.get("score"), 1, 10, 5),
            verdict=_pick(market.get("verdict"), _VERDICTS, "moderate"),
            reasoning=str(market.get("reasoning") or "Market analysis pending"),
            competitors=_str_list(market.get("competitors")),
            gap=str(market.get("gap") or "Gap to be identified"),
        ),
        difficulty=Difficulty(
            score=diff_score,
            label=str(difficulty.get("label") or _DIFFICULTY_LABELS[diff_score]),
            reasoning=str(difficulty.get("reasoning") or "Difficulty assessment pending"),
            estimated_hours=str(difficulty.get("estimatedHours") or _DEFAULT_HOURS[diff_score]),
            ai_strengths=_str_list(difficulty.get("aiStrengths"), ["Standard patterns"]),
        ),
        marketing=MarketingStrategy(
            primary_channels=_str_list(marketing.get("primaryChannels"), ["To be researched"]),
            launch_strategy=str(marketing.get("launchStrategy") or "Launch strategy pending"),
            estimated_cost=_pick(marketing.get("estimatedCost"), _COSTS, "free"),
            time_to_first_users=str(marketing.get("timeToFirstUsers") or "2-4 weeks"),
            tactics=[
                MarketingTactic(
                    channel=str(t.get("channel") or "Unknown"),
                    approach=str(t.get("approach") or "Approach TBD"),
                    expected_outcome=t.get("expectedOutcome"),
                )
                for t in marketing.get("tactics") or []
                if isinstance(t, dict)
            ],
        ),
        income=IncomeProjection(
            model=_pick(income.get("model"), _INCOME_MODELS, "freemium"),
            suggested_pricing=str(income.get("suggestedPricing") or "$9-29/month"),
            monthly_potential=str(income.get("monthlyPotential") or "$500-2000/month"),
            time_to_first_revenue=income.get("timeToFirstRevenue"),
        ),
        sources=_str_list(raw.get("sources")),
    )


def fallback_ideas() -> list[SaasIdea]:
    """Two worked example ideas shown when research cannot run."""
    return [
        SaasIdea(
            id="fallback-1",
            name="WaitlistKit",
            tagline="Launch a waitlist in 5 minutes",
            description=(
                "Simple waitlist builder for pre-launch products. Collect emails, "
                "show position, referral bonuses."
            ),
            problem_solved="Founders need to validate ideas before building, but waitlists are tedious to set up",
            target_audience=["Indie hackers", "Startup founders", "Product managers"],
            core_features=["Email collection", "Referral tracking", "Embeddable widget"],
            market_opportunity=MarketOpportunity(
                score=7,
                verdict="moderate",
                reasoning="Proven demand with room for simpler alternatives",
                competitors=["LaunchList", "Waitlist.me"],
                gap="Most solutions are overpriced for simple use cases",
            ),
            difficulty=Difficulty(
                score=2,
                label="easy",
                reasoning="Simple CRUD with email collection and counter logic",
                estimated_hours="4-6 hours",
                ai_strengths=["Standard form handling", "Simple database schema"],
            ),
            marketing=MarketingStrategy(
                primary_channels=["r/SideProject", "IndieHackers", "Product Hunt"],
                launch_strategy="Build in public, launch on Product Hunt, post in founder communities",
                estimated_cost="free",
                time_to_first_users="1-2 weeks",
                tactics=[MarketingTactic(channel="IndieHackers", approach="Share the building journey")],
            ),
            income=IncomeProjection(
                model="freemium",
                suggested_pricing="$0 free (100 signups) / $9/mo pro",
                monthly_potential="$500-1500/month",
            ),
        ),
        SaasIdea(
            id="fallback-2",
            name="FeedbackDrop",
            tagline="Collect user feedback without leaving your app",
            description=(
                "Lightweight feedback widget for web apps. Screenshot capture, "
                "categorization, Slack notifications."
            ),
            problem_solved="Developers lose feedback because users will not switch to external tools",
            target_audience=["SaaS developers", "Product teams", "Indie makers"],
            core_features=["Embedded widget", "Screenshot capture", "Slack integration"],
            market_opportunity=MarketOpportunity(
                score=6,
                verdict="moderate",
                reasoning="Incumbents are expensive; room for a lightweight alternative",
                competitors=["Canny", "UserVoice"],
                gap="Simple, affordable option for small teams",
            ),
            difficulty=Difficulty(
                score=3,
                label="moderate",
                reasoning="Widget embedding and screenshots add some complexity",
                estimated_hours="1-2 days",
                ai_strengths=["React components", "Webhook handling"],
            ),
            marketing=MarketingStrategy(
                primary_channels=["r/webdev", "HackerNews", "Dev.to"],
                launch_strategy="Technical blog posts about building feedback systems",
                estimated_cost="free",
                time_to_first_users="2-4 weeks",
            ),
            income=IncomeProjection(
                model="freemium",
                suggested_pricing="$0 free / $19/mo pro",
                monthly_potential="$1000-3000/month",
            ),
        ),
    ]


async def discover_ideas(
    runner: AssistantRunner,
    *,
    sector: str | None = None,
    rough_idea: str | None = None,
    count: int = 5,
    timeout: float = 600,
    max_turns: int = 25,
    on_progress: Callable[[ProgressEvent], None] | None = None,
) -> DiscoveryResult:
    """Research candidate ideas. Never raises for assistant or parse failures."""
    prompt = build_discovery_prompt(sector, rough_idea, count)
    try:
        result = await runner.run_task(
            prompt,
            allowed_tools=["WebSearch"],
            max_turns=max_turns,
            timeout=timeout,
            on_progress=on_progress,
        )
    except AssistantError as e:
        logger.warning("Idea discovery failed: %s", e)
        return DiscoveryResult(ideas=fallback_ideas(), is_fallback=True, error=str(e))

    raw_ideas = extract_ideas_payload(result.text)
    if raw_ideas is None:
        logger.warning("Idea discovery returned no parseable JSON")
        return DiscoveryResult(ideas=fallback_ideas(), is_fallback=True, error="Invalid AI response format")
    if not raw_ideas:
        return DiscoveryResult(ideas=fallback_ideas(), is_fallback=True, error="No ideas found in response")
    try:
        ideas = [normalize_idea(raw, i) for i, raw in enumerate(raw_ideas)]
    except ValidationError as e:
        logger.warning("Discovered ideas failed validation: %s", e)
        return DiscoveryResult(ideas=fallback_ideas(), is_fallback=True, error="Invalid idea data")
    return DiscoveryResult(
        ideas=ideas,
        search_count=result.search_count,
        sources=result.sources,
    )
