"""Collaborators handed to every state handler."""

from dataclasses import dataclass, field
from typing import Any

from saasfactory.ai.runner import AssistantRunner
from saasfactory.core.settings import get_setting
from saasfactory.wizard.prompts import Prompter
from saasfactory.wizard.ui import WizardUI


@dataclass
class StepEnv:
    prompts: Prompter
    ui: WizardUI
    runner: AssistantRunner
    settings: dict[str, Any] = field(default_factory=dict)
    # Set by the loop before each handler runs
    can_go_back: bool = True

    def timeout(self, name: str, default: float) -> float:
        return float(get_setting(self.settings, f"assistant.timeouts.{name}", default))

    def max_turns(self, name: str, default: int) -> int:
        return int(get_setting(self.settings, f"assistant.max_turns.{name}", default))
