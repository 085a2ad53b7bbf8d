"""Shared fixtures: isolated config home, a scripted prompter and a fake assistant."""

import io
import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from keyring.errors import KeyringError
from rich.console import Console

from saasfactory.ai import runner as runner_module
from saasfactory.ai.runner import AssistantFailedError, TaskResult
from saasfactory.core import settings as settings_module
from saasfactory.wizard.env import StepEnv
from saasfactory.wizard.prompts import Prompter
from saasfactory.wizard.scripted import ScriptedBackend
from saasfactory.wizard.ui import WizardUI

# Substrings that identify each assistant prompt
REFINE = "Refine this SaaS idea"
NAMES = "suggest project names"
ANALYZE = "Analyze this project"
CONTENT = "Generate marketing content"
DISCOVER = "viable micro-SaaS ideas"
RESEARCH = "Research competitors for this SaaS idea"


class FakeRunner:
    """Stands in for AssistantRunner. Replies are keyed by a prompt substring."""

    def __init__(self, available: bool = True, replies: dict[str, Any] | None = None) -> None:
        self.available = available
        self.replies = dict(replies or {})
        self.calls: list[str] = []
        self.prompts: list[str] = []
        self.follow_ups: list[tuple[str, str]] = []

    def count(self, marker: str) -> int:
        return self.calls.count(marker)

    def _reply(self, prompt: str) -> TaskResult:
        self.prompts.append(prompt)
        for marker, reply in self.replies.items():
            if marker in prompt:
                self.calls.append(marker)
                if isinstance(reply, Exception):
                    raise reply
                if isinstance(reply, TaskResult):
                    return reply
                text = reply if isinstance(reply, str) else json.dumps(reply)
                return TaskResult(text=text)
        self.calls.append("unscripted")
        raise AssistantFailedError("no scripted reply", exit_code=1)

    async def is_available(self) -> bool:
        return self.available

    async def generate(self, prompt: str, **options: Any) -> TaskResult:
        return self._reply(prompt)

    async def run_task(self, prompt: str, **options: Any) -> TaskResult:
        return self._reply(prompt)

    async def follow_up(self, session_id: str, question: str, **options: Any) -> TaskResult:
        self.follow_ups.append((session_id, question))
        return TaskResult(text=f"Answer to: {question}", session_id=session_id)


def quiet_ui() -> WizardUI:
    return WizardUI(Console(file=io.StringIO(), width=120, force_terminal=False))


def ui_output(ui: WizardUI) -> str:
    return ui.console.file.getvalue()


def make_env(
    answers: list[Any],
    runner: FakeRunner | None = None,
    settings: dict[str, Any] | None = None,
) -> tuple[StepEnv, ScriptedBackend]:
    backend = ScriptedBackend(answers)
    env = StepEnv(
        prompts=Prompter(backend),
        ui=quiet_ui(),
        runner=runner or FakeRunner(available=False),
        settings=settings or {},
    )
    return env, backend


def idea_payload(count: int = 5) -> dict[str, Any]:
    """Discovery reply with ``count`` ideas; idea 3 targets developers."""
    names = ["InvoicePing", "ShiftBoard", "FormPilot", "ReviewNest", "LinkVault", "QueueBee"]
    ideas = []
    for i in range(count):
        ideas.append(
            {
                "id": f"idea-{i + 1}",
                "name": names[i % len(names)],
                "tagline": f"Tagline {i + 1}",
                "description": f"Description of idea number {i + 1} for small teams",
                "targetAudience": ["Developers"] if i == 2 else ["Freelancers"],
                "coreFeatures": ["One", "Two"],
                "marketOpportunity": {"score": 7, "verdict": "strong"},
                "difficulty": {"score": 2},
                "income": {"model": "subscription"},
            }
        )
    return {"ideas": ideas}


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point the config directory at a temp dir and drop cached settings/runner."""
    home = tmp_path / "home"
    monkeypatch.setenv("SAASFACTORY_HOME", str(home))
    settings_module.reload_settings()
    runner_module.set_runner(None)
    yield home
    settings_module.reload_settings()
    runner_module.set_runner(None)


@pytest.fixture
def no_keyring(monkeypatch: pytest.MonkeyPatch) -> None:
    """Force the file-store path of core.secrets."""
    monkeypatch.setattr("saasfactory.core.secrets._is_fail_backend", lambda: True)
    monkeypatch.setattr("saasfactory.core.secrets.keyring.get_password", lambda *_a: None)

    def _no_entry(*_a: Any) -> None:
        raise KeyringError("no keyring")

    monkeypatch.setattr("saasfactory.core.secrets.keyring.delete_password", _no_entry)
