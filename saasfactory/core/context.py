"""Project context: everything the materializer needs to write a project."""

import re
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from saasfactory import __version__

SaasType = Literal["b2b", "b2c", "marketplace", "tool"]
AnalyticsProvider = Literal["plausible", "posthog", "none"]
MarketVerdict = Literal["strong", "moderate", "weak", "saturated", "low", "high", "very_high"]
IncomeModel = Literal["subscription", "freemium", "one-time", "usage-based"]

_NAME_PATTERN = re.compile(r"^[a-z0-9-]+$")


class _Model(BaseModel):
    """Base model: camelCase aliases so assistant JSON validates directly."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class MarketOpportunity(_Model):
    score: int = 5
    verdict: str = "moderate"
    reasoning: str = ""
    competitors: list[str] = Field(default_factory=list)
    gap: str = ""


class Difficulty(_Model):
    score: int = 3
    label: str = "moderate"
    reasoning: str = ""
    estimated_hours: str = ""
    ai_strengths: list[str] = Field(default_factory=list)


class MarketingTactic(_Model):
    channel: str
    approach: str
    expected_outcome: str | None = None


class MarketingStrategy(_Model):
    primary_channels: list[str] = Field(default_factory=list)
    launch_strategy: str = ""
    estimated_cost: str = "low"
    time_to_first_users: str = ""
    tactics: list[MarketingTactic] = Field(default_factory=list)


class IncomeProjection(_Model):
    model: str = "subscription"
    suggested_pricing: str = ""
    monthly_potential: str = ""
    time_to_first_revenue: str | None = None


class SaasIdea(_Model):
    """A candidate idea produced by idea discovery."""

    id: str
    name: str
    tagline: str = ""
    description: str = ""
    problem_solved: str = ""
    target_audience: list[str] = Field(default_factory=list)
    core_features: list[str] = Field(default_factory=list)
    market_opportunity: MarketOpportunity = Field(default_factory=MarketOpportunity)
    difficulty: Difficulty = Field(default_factory=Difficulty)
    marketing: MarketingStrategy = Field(default_factory=MarketingStrategy)
    income: IncomeProjection = Field(default_factory=IncomeProjection)
    sources: list[str] = Field(default_factory=list)


class Competitor(_Model):
    name: str
    url: str = ""
    description: str = ""
    pricing: str | None = None
    features: list[str] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    type: str | None = None
    user_rating: str | None = None
    funding: str | None = None


class MarketValidation(_Model):
    score: int = 5
    verdict: str = "moderate"
    reasoning: str = ""


class ReviewInsights(_Model):
    common_praises: list[str] = Field(default_factory=list)
    common_complaints: list[str] = Field(default_factory=list)
    feature_requests: list[str] = Field(default_factory=list)


class MarketResearch(_Model):
    idea_summary: str = ""
    market_validation: MarketValidation = Field(default_factory=MarketValidation)
    market_size: str | None = None
    market_trends: list[str] = Field(default_factory=list)
    target_audience: list[str] = Field(default_factory=list)
    competitors: list[Competitor] = Field(default_factory=list)
    review_insights: ReviewInsights | None = None
    opportunities: list[str] = Field(default_factory=list)
    risks: list[str] = Field(default_factory=list)
    feature_ideas: list[str] = Field(default_factory=list)
    positioning_strategy: str | None = None
    recommendations: list[str] = Field(default_factory=list)


class ProjectFeatures(_Model):
    auth: bool = True
    database: bool = True
    payments: bool = True
    seo: bool = True
    analytics: AnalyticsProvider = "posthog"
    email: bool = True
    legal: bool = True
    assets: bool = True
    # User-selected extras, by feature id
    extras: list[str] = Field(default_factory=list)


class PricingTier(_Model):
    name: str
    price: float
    interval: Literal["month", "year", "one-time"] = "month"
    features: list[str] = Field(default_factory=list)
    highlighted: bool = False


def _default_tiers() -> list[PricingTier]:
    return [
        PricingTier(name="Free", price=0, features=["Basic features", "Community support"]),
        PricingTier(
            name="Pro",
            price=19,
            features=["All Free features", "Priority support", "Advanced features"],
            highlighted=True,
        ),
        PricingTier(
            name="Enterprise",
            price=99,
            features=["All Pro features", "Dedicated support", "Custom integrations"],
        ),
    ]


class Pricing(_Model):
    type: str = "freemium"
    tiers: list[PricingTier] = Field(default_factory=_default_tiers)


class Feature(_Model):
    title: str
    description: str = ""
    icon: str | None = None


class Testimonial(_Model):
    quote: str
    author: str
    role: str = ""
    company: str = ""


class FAQItem(_Model):
    question: str
    answer: str


class GeneratedContent(_Model):
    """Marketing copy; any field may stay empty when generation was skipped or failed."""

    tagline: str = ""
    hero_headline: str = ""
    hero_subheadline: str = ""
    features: list[Feature] = Field(default_factory=list)
    testimonials: list[Testimonial] = Field(default_factory=list)
    faq_items: list[FAQItem] = Field(default_factory=list)
    seo_keywords: list[str] = Field(default_factory=list)
    meta_description: str = ""


class ProjectContext(_Model):
    name: str
    display_name: str
    description: str = ""
    domain: str | None = None
    project_type: str = "web application"
    saas_type: SaasType = "b2b"
    features: ProjectFeatures = Field(default_factory=ProjectFeatures)
    pricing: Pricing = Field(default_factory=Pricing)
    content: GeneratedContent = Field(default_factory=GeneratedContent)
    custom_answers: dict[str, str | list[str]] = Field(default_factory=dict)
    market_research: MarketResearch | None = None
    discovered_idea: SaasIdea | None = None
    created_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    version: str = __version__

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not _NAME_PATTERN.match(value):
            raise ValueError("name must contain only lowercase letters, digits and dashes")
        return value


def sanitize_project_name(value: str) -> str:
    """Lowercase and collapse anything non-alphanumeric into single dashes."""
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


def display_name_for(name: str) -> str:
    """'acme-app' -> 'Acme App'."""
    return " ".join(word[:1].upper() + word[1:] for word in name.split("-") if word)


def create_default_context(name: str, description: str) -> ProjectContext:
    return ProjectContext(
        name=name or "untitled",
        display_name=display_name_for(name or "untitled"),
        description=description,
    )


def infer_saas_type(idea: SaasIdea) -> SaasType | None:
    """Best-guess SaaS category from the idea's target audience."""
    audience = " ".join(idea.target_audience).lower()
    if any(word in audience for word in ("business", "team", "enterprise")):
        return "b2b"
    if any(word in audience for word in ("developer", "maker")):
        return "tool"
    return None


def infer_pricing(idea: SaasIdea) -> str | None:
    """Pricing model implied by the idea's income model, if it maps onto one."""
    if idea.income.model in ("subscription", "freemium", "one-time"):
        return idea.income.model
    return None
