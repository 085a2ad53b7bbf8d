"""Competitor research for an idea description or a product URL."""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Literal

from pydantic import ValidationError

from saasfactory.ai.runner import AssistantError, AssistantRunner, extract_json_object
from saasfactory.ai.stream import ProgressEvent
from saasfactory.core.context import MarketResearch, MarketValidation
from saasfactory.core.settings import get_setting

logger = logging.getLogger(__name__)

ResearchMode = Literal["quick", "full", "url"]

_STOP_WORDS = frozenset(
    """a an the is are was were be been being have has had do does did will would could
    should may might must shall can need to of in for on with at by from as and but or
    nor so yet both either neither not only own same than too very just saas app
    application software platform tool service want create build make help helps
    allows lets""".split()
)

_SCHEMA = """Return ONLY valid JSON (no markdown):
{
  "ideaSummary": "Brief summary",
  "marketValidation": {"score": 7, "verdict": "moderate", "reasoning": "Assessment"},
  "marketSize": "Estimated market size if found",
  "targetAudience": ["Audience 1"],
  "competitors": [
    {"name": "Name", "url": "https://...", "description": "What they do",
     "pricing": "$X/month", "features": ["..."], "strengths": ["..."], "weaknesses": ["..."]}
  ],
  "opportunities": ["Gap in market"],
  "risks": ["Risk"],
  "featureIdeas": ["Feature idea from research"],
  "recommendations": ["Strategic recommendation"]
}"""


@dataclass(frozen=True)
class ModeConfig:
    competitors: str
    tools: tuple[str, ...]
    description: str


MODES: dict[str, ModeConfig] = {
    "quick": ModeConfig("3-5", ("WebSearch",), "Find main competitors quickly"),
    "full": ModeConfig("5-8", ("WebSearch",), "Deep competitive analysis"),
    "url": ModeConfig("5-8", ("WebSearch", "WebFetch"), "Analyze website and find competitors"),
}


@dataclass
class ResearchResult:
    research: MarketResearch
    is_fallback: bool = False
    session_id: str | None = None
    error: str | None = None
    search_count: int = 0
    sources: list[str] = field(default_factory=list)


def is_url(value: str) -> bool:
    return value.startswith(("http://", "https://"))


def extract_keywords(description: str, limit: int = 4) -> str:
    words = re.sub(r"[^a-z0-9\s]", " ", description.lower()).split()
    seen: list[str] = []
    for word in words:
        if len(word) > 2 and word not in _STOP_WORDS and word not in seen:
            seen.append(word)
    return " ".join(seen[:limit])


def resolve_mode(value: str, requested: ResearchMode) -> ResearchMode:
    """URL input always runs in url mode."""
    return "url" if is_url(value) else requested


def build_research_prompt(value: str, mode: ResearchMode) -> str:
    config = MODES[mode]
    if mode == "url":
        return (
            "You are a SaaS competitive analysis expert. Analyze this website and find its competitors.\n\n"
            f"URL: {value}\n\n"
            "STEP 1: Use WebFetch to understand what the product does.\n"
            f"STEP 2: Use WebSearch to find {config.competitors} direct competitors.\n"
            "STEP 3: Analyze their features, pricing, strengths and weaknesses.\n"
            "Do not make up competitors.\n\n"
            f"{_SCHEMA}"
        )
    keywords = extract_keywords(value)
    depth = (
        "Focus on speed over depth: name, URL, short description and pricing."
        if mode == "quick"
        else "Analyze features, pricing, strengths and weaknesses; be honest about saturation."
    )
    return (
        "You are a SaaS market research analyst. Research competitors for this SaaS idea:\n\n"
        f'"{value}"\n\n'
        "Search for competitors using queries like:\n"
        f'- "{keywords} alternatives"\n'
        f'- "{keywords} competitors"\n'
        f'- "best {keywords} software"\n\n'
        f"Find {config.competitors} real competitors. {depth}\n"
        "You MUST use WebSearch. Do not make up competitors.\n\n"
        f"{_SCHEMA}"
    )


def fallback_research(value: str, mode: ResearchMode) -> MarketResearch:
    return MarketResearch(
        idea_summary=f"Analysis of {value}" if is_url(value) else value,
        market_validation=MarketValidation(
            score=5,
            verdict="moderate",
            reasoning="Unable to conduct research. Consider researching competitors manually.",
        ),
        target_audience=["Target audience to be determined"],
        opportunities=["Research incomplete - opportunities to be identified"],
        risks=["Research incomplete - risks to be assessed"],
        feature_ideas=[] if mode == "quick" else ["Feature ideas to be determined"],
        recommendations=["Conduct manual competitor research"],
    )


def should_proceed(research: MarketResearch) -> tuple[bool, str]:
    """Rough go/no-go reading of the validation score."""
    validation = research.market_validation
    if validation.verdict == "saturated":
        return False, "Market appears saturated. Consider pivoting or finding a unique angle."
    if validation.score <= 3:
        return False, "Low market validation score. The idea may need refinement."
    if validation.score <= 5:
        return True, "Moderate opportunity. Proceed with caution and focus on differentiation."
    return True, "Good market opportunity identified."


async def research_competitors(
    runner: AssistantRunner,
    value: str,
    *,
    mode: ResearchMode = "full",
    settings: dict | None = None,
    on_progress: Callable[[ProgressEvent], None] | None = None,
) -> ResearchResult:
    """Stream a competitor research task. Assistant or parse failures yield a fallback."""
    mode = resolve_mode(value, mode)
    settings = settings or {}
    config = MODES[mode]
    timeout = float(get_setting(settings, f"assistant.timeouts.compete_{mode}", 600))
    max_turns = int(get_setting(settings, f"assistant.max_turns.compete_{mode}", 15))
    try:
        task = await runner.run_task(
            build_research_prompt(value, mode),
            allowed_tools=list(config.tools),
            max_turns=max_turns,
            timeout=timeout,
            on_progress=on_progress,
        )
    except AssistantError as e:
        logger.warning("Competitor research (%s) failed: %s", mode, e)
        return ResearchResult(research=fallback_research(value, mode), is_fallback=True, error=str(e))

    data = extract_json_object(task.text)
    if data is None:
        research = fallback_research(value, mode)
        research.market_validation.reasoning = (
            "AI response did not contain valid JSON. " + research.market_validation.reasoning
        )
        return ResearchResult(
            research=research,
            is_fallback=True,
            session_id=task.session_id,
            error="Invalid AI response format",
        )
    if "marketValidation" not in data or "competitors" not in data:
        return ResearchResult(
            research=fallback_research(value, mode),
            is_fallback=True,
            session_id=task.session_id,
            error="Incomplete research data",
        )
    try:
        research = MarketResearch.model_validate(data)
    except ValidationError as e:
        logger.debug("Research payload rejected: %s", e)
        return ResearchResult(
            research=fallback_research(value, mode),
            is_fallback=True,
            session_id=task.session_id,
            error="Incomplete research data",
        )
    return ResearchResult(
        research=research,
        session_id=task.session_id,
        search_count=task.search_count,
        sources=task.sources,
    )
