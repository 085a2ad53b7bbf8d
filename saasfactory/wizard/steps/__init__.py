"""Wizard state handlers."""

from saasfactory.wizard.steps.config_step import run_branding_step, run_project_config_step
from saasfactory.wizard.steps.content_step import run_ai_content_step
from saasfactory.wizard.steps.discovery_step import (
    discovery_fallback,
    run_discovery_confirm_step,
    run_discovery_research_step,
    run_discovery_results_step,
    run_discovery_select_step,
)
from saasfactory.wizard.steps.finish_step import run_project_location_step, run_summary_step
from saasfactory.wizard.steps.idea_step import run_idea_mode_step, run_rough_idea_step, run_sector_step
from saasfactory.wizard.steps.identity_step import (
    run_description_step,
    run_idea_refinement_step,
    run_name_research_step,
    run_name_step,
)

__all__ = [
    "run_idea_mode_step",
    "run_rough_idea_step",
    "run_sector_step",
    "run_discovery_research_step",
    "run_discovery_results_step",
    "run_discovery_select_step",
    "run_discovery_confirm_step",
    "discovery_fallback",
    "run_name_step",
    "run_description_step",
    "run_idea_refinement_step",
    "run_name_research_step",
    "run_project_config_step",
    "run_branding_step",
    "run_ai_content_step",
    "run_summary_step",
    "run_project_location_step",
]
