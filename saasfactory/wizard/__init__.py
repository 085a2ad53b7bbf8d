"""Interactive project wizard: state graph, prompts, step handlers and loop."""

from saasfactory.wizard.context import WizardContext, WizardOptions
from saasfactory.wizard.env import StepEnv
from saasfactory.wizard.outcomes import BACK, Advance, Back, Exit, Outcome, Retry
from saasfactory.wizard.prompts import EscapeTracker, Prompter, QuestionaryBackend
from saasfactory.wizard.states import WizardState
from saasfactory.wizard.ui import WizardUI
from saasfactory.wizard.wizard import STATE_SPECS, StateSpec, WizardResult, run_wizard

__all__ = [
    "BACK",
    "Advance",
    "Back",
    "Exit",
    "Outcome",
    "Retry",
    "WizardState",
    "WizardContext",
    "WizardOptions",
    "StepEnv",
    "WizardUI",
    "EscapeTracker",
    "Prompter",
    "QuestionaryBackend",
    "StateSpec",
    "STATE_SPECS",
    "WizardResult",
    "run_wizard",
]
