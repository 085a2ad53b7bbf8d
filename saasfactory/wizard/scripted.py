"""Non-interactive prompt backend that replays a fixed list of answers.

Used by tests and anywhere the wizard has to run without a terminal. Each
answer is consumed by exactly one backend call; ``ESCAPE`` simulates an ESC
press and ``DEFAULT`` accepts whatever default the prompt offered.
"""

from collections import deque
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from saasfactory.wizard.prompts import ESCAPE, Option, Validator


class _Default:
    def __repr__(self) -> str:
        return "DEFAULT"


DEFAULT = _Default()


class ScriptExhausted(RuntimeError):
    """The wizard asked more questions than the script answers."""


@dataclass
class AskedPrompt:
    kind: str
    message: str
    default: Any = None
    options: tuple[Any, ...] = ()


class ScriptedBackend:
    def __init__(self, answers: Iterable[Any] = ()) -> None:
        self.answers: deque[Any] = deque(answers)
        self.asked: list[AskedPrompt] = []
        self.notices: list[str] = []

    def push(self, *answers: Any) -> None:
        self.answers.extend(answers)

    def _next(self, asked: AskedPrompt) -> Any:
        self.asked.append(asked)
        if not self.answers:
            raise ScriptExhausted(f"No scripted answer for {asked.kind} prompt: {asked.message!r}")
        answer = self.answers.popleft()
        if answer is DEFAULT:
            return asked.default
        return answer

    async def text(self, message: str, *, default: str = "", validate: Validator | None = None) -> Any:
        return self._next(AskedPrompt("text", message, default))

    async def password(self, message: str) -> Any:
        return self._next(AskedPrompt("password", message, ""))

    async def select(self, message: str, options: Sequence[Option], *, default: Any = None) -> Any:
        values = tuple(o.value for o in options)
        fallback = default if default in values else (values[0] if values else None)
        return self._next(AskedPrompt("select", message, fallback, values))

    async def checkbox(self, message: str, options: Sequence[Option], *, checked: Sequence[Any] = ()) -> Any:
        values = tuple(o.value for o in options)
        return self._next(AskedPrompt("checkbox", message, list(checked), values))

    async def confirm(self, message: str, *, default: bool = True) -> Any:
        return self._next(AskedPrompt("confirm", message, default))

    def notice(self, message: str) -> None:
        self.notices.append(message)

    @property
    def remaining(self) -> int:
        return len(self.answers)


__all__ = ["ScriptedBackend", "ScriptExhausted", "AskedPrompt", "DEFAULT", "ESCAPE"]
