"""Mutable data accumulated while the wizard runs."""

from dataclasses import dataclass, field
from pathlib import Path

from saasfactory.ai.analyzer import ProjectAnalysis
from saasfactory.ai.refiner import CompetitorBrief, RefinedIdea
from saasfactory.core.config import UserConfig
from saasfactory.core.context import (
    Competitor,
    GeneratedContent,
    MarketResearch,
    ProjectContext,
    ProjectFeatures,
    SaasIdea,
    create_default_context,
)
from saasfactory.wizard.states import WizardState


@dataclass
class WizardOptions:
    """Flags from the ``create`` command line."""

    yes: bool = False
    skip_ai: bool = False
    skip_research: bool = False
    cwd: Path = field(default_factory=Path.cwd)


@dataclass
class WizardContext:
    """Everything the state handlers read and write.

    Typed answers (name, description, domain, tagline) are kept across
    backtracking so they come back as prompt defaults. Fields derived from an
    earlier answer are cleared when the state that derived them is rewound;
    see ``saasfactory.wizard.graph.RESETS``.
    """

    ai_available: bool = False
    options: WizardOptions = field(default_factory=WizardOptions)
    user_config: UserConfig = field(default_factory=UserConfig)
    history: list[WizardState] = field(default_factory=list)

    # identity
    name: str = ""
    description: str = ""
    name_supplied: bool = False

    # idea discovery
    idea_mode: str | None = None
    rough_idea: str | None = None
    sector: str | None = None
    discovered_ideas: list[SaasIdea] = field(default_factory=list)
    selected_idea: SaasIdea | None = None
    discovered_idea: SaasIdea | None = None
    # what discovery_confirm wrote into name/description, to tell it apart from typing
    idea_name: str | None = None
    idea_description: str | None = None
    inferred_saas_type: str | None = None
    inferred_pricing: str | None = None
    discovery_searches: int = 0
    discovery_sources: int = 0

    # refinement and name research
    refined_versions: list[RefinedIdea] = field(default_factory=list)
    suggested_names: list[str] = field(default_factory=list)
    competitors: list[CompetitorBrief] = field(default_factory=list)

    # project configuration
    analysis: ProjectAnalysis | None = None
    analysis_key: str | None = None
    project_type: str | None = None
    pricing_type: str | None = None
    selected_features: list[str] = field(default_factory=list)
    custom_answers: dict[str, str | list[str]] = field(default_factory=dict)

    # branding and content
    domain: str | None = None
    tagline: str = ""
    content: GeneratedContent = field(default_factory=GeneratedContent)
    ai_content_generated: bool = False

    project_path: Path | None = None

    def visited(self, state: WizardState) -> bool:
        return state in self.history

    def to_project(self) -> ProjectContext:
        """Build the materializer's view of the answers collected so far."""
        project = create_default_context(self.name, self.description)
        if self.project_type:
            project.project_type = self.project_type
        if self.inferred_saas_type:
            project.saas_type = self.inferred_saas_type
        project.pricing.type = self.pricing_type or self.inferred_pricing or project.pricing.type
        project.features = ProjectFeatures(
            analytics=self.user_config.defaults.analytics,
            extras=list(self.selected_features),
        )
        project.custom_answers = dict(self.custom_answers)
        project.domain = self.domain or None
        project.discovered_idea = self.discovered_idea
        if self.competitors:
            project.market_research = MarketResearch(
                competitors=[Competitor(name=c.name, description=c.description) for c in self.competitors]
            )
        content = self.content.model_copy(deep=True)
        if self.tagline:
            content.tagline = self.tagline
        project.content = content
        return project
