"""Idea refinement and name suggestions."""

import logging

from pydantic import BaseModel, Field, ValidationError

from saasfactory.ai.runner import AssistantError, AssistantRunner, extract_json_object

logger = logging.getLogger(__name__)

REFINE_PROMPT = """You are a SaaS product strategist helping refine rough idea descriptions.

Take the user's raw idea and:
1. Clean up grammar and make it professional
2. Identify the core value proposition
3. Suggest 2-3 refined versions with slightly different angles

Return ONLY valid JSON (no markdown):
{
  "versions": [
    {
      "summary": "Concise description (2-3 sentences max)",
      "keyFeatures": ["Feature 1", "Feature 2", "Feature 3"],
      "targetAudience": "Who this is for",
      "uniqueAngle": "What makes this version different"
    }
  ],
  "clarifyingQuestions": ["Only if critical info is missing"]
}

Version 1 stays most faithful to the user's intent, version 2 is broader and
more commercial, version 3 is more niche."""

NAMES_PROMPT = """You are a SaaS naming expert. Given a product description:
1. Search for 3-5 existing competitors in this space
2. Suggest 5 creative, memorable project names that do not conflict with them

You MUST use web search to find real competitors.

Return ONLY valid JSON (no markdown):
{
  "competitors": [{"name": "Competitor", "description": "What they do (1 sentence)"}],
  "suggestedNames": ["Name1", "Name2", "Name3", "Name4", "Name5"]
}

Names are short (1-2 words), easy to spell, and never match a competitor."""


class RefinedIdea(BaseModel):
    summary: str
    key_features: list[str] = Field(default_factory=list, alias="keyFeatures")
    target_audience: str = Field(default="", alias="targetAudience")
    unique_angle: str | None = Field(default=None, alias="uniqueAngle")

    model_config = {"populate_by_name": True}


class RefinementResult(BaseModel):
    versions: list[RefinedIdea]
    clarifying_questions: list[str] = Field(default_factory=list, alias="clarifyingQuestions")
    success: bool = True
    error: str | None = None

    model_config = {"populate_by_name": True}


class CompetitorBrief(BaseModel):
    name: str
    description: str = ""


class NameSuggestions(BaseModel):
    competitors: list[CompetitorBrief] = Field(default_factory=list)
    suggested_names: list[str] = Field(default_factory=list, alias="suggestedNames")
    success: bool = True
    error: str | None = None

    model_config = {"populate_by_name": True}


def _refinement_fallback(raw_idea: str, error: str) -> RefinementResult:
    return RefinementResult(
        versions=[RefinedIdea(summary=raw_idea, target_audience="To be determined")],
        success=False,
        error=error,
    )


async def refine_idea(runner: AssistantRunner, raw_idea: str, *, timeout: float = 60) -> RefinementResult:
    """Polish a raw idea into 2-3 versions. Falls back to the original text."""
    prompt = (
        "Refine this SaaS idea into 2-3 clear, professional versions:\n\n"
        f'User\'s raw input:\n"{raw_idea}"\n\n{REFINE_PROMPT}'
    )
    try:
        response = await runner.generate(prompt, output_format="json", timeout=timeout)
    except AssistantError as e:
        logger.warning("Idea refinement failed: %s", e)
        return _refinement_fallback(raw_idea, str(e))

    data = extract_json_object(response.text)
    if data is None:
        return _refinement_fallback(raw_idea, "Invalid AI response format")
    try:
        result = RefinementResult.model_validate(
            {
                "versions": data.get("versions") or [],
                "clarifyingQuestions": data.get("clarifyingQuestions") or [],
            }
        )
    except ValidationError as e:
        logger.debug("Refinement payload rejected: %s", e)
        return _refinement_fallback(raw_idea, "Invalid AI response format")
    if not result.versions:
        return _refinement_fallback(raw_idea, "No refined versions generated")
    return result


async def suggest_project_names(
    runner: AssistantRunner, description: str, *, timeout: float = 120
) -> NameSuggestions:
    """Search competitors and propose names. Empty lists on failure."""
    prompt = (
        "Find competitors and suggest project names for this product:\n\n"
        f'"{description}"\n\n{NAMES_PROMPT}'
    )
    try:
        response = await runner.generate(
            prompt,
            output_format="json",
            allowed_tools=["WebSearch"],
            timeout=timeout,
        )
    except AssistantError as e:
        logger.warning("Name research failed: %s", e)
        return NameSuggestions(success=False, error=str(e))

    data = extract_json_object(response.text)
    if data is None:
        return NameSuggestions(success=False, error="Invalid AI response format")
    try:
        return NameSuggestions.model_validate(
            {
                "competitors": data.get("competitors") or [],
                "suggestedNames": [str(n) for n in data.get("suggestedNames") or [] if n],
            }
        )
    except ValidationError as e:
        logger.debug("Name suggestion payload rejected: %s", e)
        return NameSuggestions(success=False, error="Invalid AI response format")
