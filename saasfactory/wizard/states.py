"""Wizard state identifiers."""

from enum import Enum


class WizardState(str, Enum):
    IDEA_MODE = "idea_mode"
    DISCOVERY_SECTOR = "discovery_sector"
    DISCOVERY_ROUGH_IDEA = "discovery_rough_idea"
    DISCOVERY_RESEARCH = "discovery_research"
    DISCOVERY_RESULTS = "discovery_results"
    DISCOVERY_SELECT = "discovery_select"
    DISCOVERY_CONFIRM = "discovery_confirm"
    NAME = "name"
    DESCRIPTION = "description"
    IDEA_REFINEMENT = "idea_refinement"
    NAME_RESEARCH = "name_research"
    PROJECT_CONFIG = "project_config"
    BRANDING = "branding"
    AI_CONTENT = "ai_content"
    SUMMARY = "summary"
    PROJECT_LOCATION = "project_location"
    GENERATE = "generate"


# States that only make sense with the assistant available
AI_STATES = frozenset(
    {
        WizardState.IDEA_MODE,
        WizardState.DISCOVERY_SECTOR,
        WizardState.DISCOVERY_ROUGH_IDEA,
        WizardState.DISCOVERY_RESEARCH,
        WizardState.DISCOVERY_RESULTS,
        WizardState.DISCOVERY_SELECT,
        WizardState.DISCOVERY_CONFIRM,
        WizardState.IDEA_REFINEMENT,
        WizardState.NAME_RESEARCH,
        WizardState.AI_CONTENT,
    }
)

IDEA_MODES = ("has_idea", "discover", "validate")
