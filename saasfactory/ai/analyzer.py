"""Project analysis: project type, relevant features, pricing models and scoping questions."""

import logging

from pydantic import BaseModel, Field, ValidationError

from saasfactory.ai.runner import AssistantError, AssistantRunner, extract_json_object

logger = logging.getLogger(__name__)

ANALYZER_PROMPT = """You are a product strategist. Analyze this project idea and suggest RELEVANT options.

Return ONLY valid JSON (no markdown):
{
  "projectType": "short type, e.g. 'mobile game app', 'B2B SaaS'",
  "suggestedFeatures": [{"id": "feature-id", "label": "Feature Name", "description": "Why it is relevant"}],
  "pricingOptions": [{"value": "pricing-id", "label": "Pricing Model", "hint": "Brief explanation"}],
  "questions": [
    {"id": "question-id", "question": "A relevant question?",
     "options": [{"value": "a", "label": "Option A"}], "multiSelect": false}
  ]
}

Give 5-8 features specific to this project type, 3-4 pricing models and 2-4
scoping questions. Keep everything concise."""


class FeatureOption(BaseModel):
    id: str
    label: str
    description: str = ""


class PricingOption(BaseModel):
    value: str
    label: str
    hint: str = ""


class QuestionOption(BaseModel):
    value: str
    label: str


class ProjectQuestion(BaseModel):
    id: str
    question: str
    options: list[QuestionOption] = Field(default_factory=list)
    multi_select: bool = Field(default=False, alias="multiSelect")

    model_config = {"populate_by_name": True}


class ProjectAnalysis(BaseModel):
    project_type: str = Field(default="web application", alias="projectType")
    suggested_features: list[FeatureOption] = Field(default_factory=list, alias="suggestedFeatures")
    pricing_options: list[PricingOption] = Field(default_factory=list, alias="pricingOptions")
    questions: list[ProjectQuestion] = Field(default_factory=list)
    success: bool = True
    error: str | None = None

    model_config = {"populate_by_name": True}


def fallback_analysis(error: str | None = None) -> ProjectAnalysis:
    """Generic options used without the assistant or when analysis fails."""
    return ProjectAnalysis(
        project_type="web application",
        suggested_features=[
            FeatureOption(id="user-accounts", label="User Accounts", description="Basic authentication"),
            FeatureOption(id="analytics", label="Analytics", description="Track usage"),
        ],
        pricing_options=[
            PricingOption(value="freemium", label="Freemium", hint="Free tier + paid"),
            PricingOption(value="subscription", label="Subscription", hint="Monthly/yearly"),
            PricingOption(value="one-time", label="One-time", hint="Single purchase"),
        ],
        success=False,
        error=error,
    )


async def analyze_project(runner: AssistantRunner, description: str, *, timeout: float = 60) -> ProjectAnalysis:
    prompt = (
        "Analyze this project and suggest relevant features, pricing, and questions:\n\n"
        f'"{description}"\n\n{ANALYZER_PROMPT}'
    )
    try:
        response = await runner.generate(prompt, output_format="json", timeout=timeout)
    except AssistantError as e:
        logger.warning("Project analysis failed: %s", e)
        return fallback_analysis(str(e))

    data = extract_json_object(response.text)
    if data is None:
        return fallback_analysis("Invalid AI response format")
    try:
        analysis = ProjectAnalysis.model_validate(
            {
                "projectType": data.get("projectType") or "web application",
                "suggestedFeatures": data.get("suggestedFeatures") or [],
                "pricingOptions": data.get("pricingOptions") or [],
                "questions": data.get("questions") or [],
            }
        )
    except ValidationError as e:
        logger.debug("Analysis payload rejected: %s", e)
        return fallback_analysis("Invalid AI response format")
    if not analysis.pricing_options:
        analysis.pricing_options = fallback_analysis().pricing_options
    return analysis
