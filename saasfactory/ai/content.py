"""Landing-page marketing copy generated from the project context."""

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from saasfactory.ai.runner import AssistantError, AssistantRunner, extract_json_object
from saasfactory.core.context import GeneratedContent, ProjectContext

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a SaaS marketing expert. Generate compelling, conversion-focused content. "
    "Output only valid JSON without any markdown formatting or explanation. "
    "Be specific and avoid generic phrases. Focus on benefits over features."
)


@dataclass
class ContentResult:
    content: GeneratedContent
    success: bool
    error: str | None = None


def _competitor_context(project: ProjectContext) -> str:
    research = project.market_research
    if research is None or not research.competitors:
        return ""
    lines = ["Competitor analysis (use to differentiate):"]
    for c in research.competitors:
        weak = f" (weaknesses: {', '.join(c.weaknesses)})" if c.weaknesses else ""
        lines.append(f"- {c.name}: {c.description}{weak}")
    if research.opportunities:
        lines.append("Market opportunities to highlight:")
        lines.extend(f"- {o}" for o in research.opportunities)
    return "\n".join(lines)


def build_content_prompt(project: ProjectContext) -> str:
    competitors = _competitor_context(project)
    differentiate = " that differentiates from competitors" if competitors else ""
    address = " (address competitor weaknesses)" if competitors else ""
    idea = project.discovered_idea
    audience = f"Target audience: {', '.join(idea.target_audience)}\n" if idea else ""
    return (
        f'Generate marketing content for a {project.saas_type} SaaS called "{project.display_name}".\n\n'
        f"Description: {project.description}\n"
        f"Pricing model: {project.pricing.type}\n"
        f"{audience}"
        f"{competitors}\n"
        "Generate JSON with:\n"
        f"- tagline: Short catchy tagline (max 10 words){differentiate}\n"
        "- heroHeadline: Main headline for landing page\n"
        "- heroSubheadline: Supporting text (1-2 sentences)\n"
        f"- features: Array of 4 features with title and description{address}\n"
        "- faqItems: Array of 4 objects with question and answer\n"
        "- metaDescription: SEO meta description (max 160 chars)\n"
        "- seoKeywords: Array of 5-7 SEO keywords"
    )


async def generate_marketing_content(
    runner: AssistantRunner, project: ProjectContext, *, timeout: float = 120
) -> ContentResult:
    """Ask for marketing copy. On any failure the project's current content is returned unchanged."""
    try:
        response = await runner.generate(
            build_content_prompt(project),
            output_format="json",
            system_prompt=SYSTEM_PROMPT,
            timeout=timeout,
        )
    except AssistantError as e:
        logger.warning("Content generation failed: %s", e)
        return ContentResult(content=project.content, success=False, error=str(e))

    data = extract_json_object(response.text)
    if data is None:
        return ContentResult(content=project.content, success=False, error="Could not parse AI response")
    merged = project.content.model_dump(by_alias=True)
    merged.update({k: v for k, v in data.items() if v})
    try:
        content = GeneratedContent.model_validate(merged)
    except ValidationError as e:
        logger.debug("Content payload rejected: %s", e)
        return ContentResult(content=project.content, success=False, error="Could not parse AI response")
    return ContentResult(content=content, success=True)
