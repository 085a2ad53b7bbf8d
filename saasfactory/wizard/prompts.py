"""Prompt primitives with double-ESC "go back" navigation.

A backend asks one question and returns the answer or ``ESCAPE``. The
``Prompter`` turns escapes into navigation: the first ESC shows a hint and
re-asks, a second ESC inside the window returns ``BACK``. Prompts marked as
non-backtrackable swallow the gesture and ask again. Validation failures
re-prompt without touching the escape state.
"""

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Literal, Protocol

import questionary
from prompt_toolkit.key_binding import KeyBindings, merge_key_bindings
from questionary import Choice

from saasfactory.wizard.outcomes import BACK, Back
from saasfactory.wizard.ui import STYLE

logger = logging.getLogger(__name__)

BACK_HINT = "Press ESC again within 1 second to go back"

# validator contract follows questionary: True when valid, else the error message
Validator = Callable[[str], bool | str]


class _Escape:
    def __repr__(self) -> str:
        return "ESCAPE"


ESCAPE = _Escape()


@dataclass(frozen=True)
class Option:
    label: str
    value: Any
    hint: str | None = None


class EscapeTracker:
    """Decides whether an ESC press is a lone cancel or the second half of a double press."""

    def __init__(self, window: float = 1.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.window = window
        self._clock = clock
        self._last: float | None = None

    def press(self) -> Literal["hint", "back"]:
        now = self._clock()
        if self._last is not None and now - self._last < self.window:
            self._last = None
            return "back"
        self._last = now
        return "hint"

    def reset(self) -> None:
        self._last = None


class PromptBackend(Protocol):
    """Asks exactly one question. Returns the raw answer or ESCAPE."""

    async def text(self, message: str, *, default: str, validate: Validator | None) -> Any: ...

    async def password(self, message: str) -> Any: ...

    async def select(self, message: str, options: Sequence[Option], *, default: Any) -> Any: ...

    async def checkbox(self, message: str, options: Sequence[Option], *, checked: Sequence[Any]) -> Any: ...

    async def confirm(self, message: str, *, default: bool) -> Any: ...

    def notice(self, message: str) -> None: ...


def _escape_bindings() -> KeyBindings:
    kb = KeyBindings()

    @kb.add("escape", eager=True)
    def _(event: Any) -> None:
        event.app.exit(result=ESCAPE)

    return kb


def _with_escape(question: questionary.Question) -> questionary.Question:
    app = question.application
    extra = _escape_bindings()
    app.key_bindings = merge_key_bindings([app.key_bindings, extra]) if app.key_bindings else extra
    return question


def _choices(options: Sequence[Option], checked: Sequence[Any] = ()) -> list[Choice]:
    return [
        Choice(title=o.label, value=o.value, description=o.hint, checked=o.value in checked)
        for o in options
    ]


class QuestionaryBackend:
    """Terminal backend. Ctrl-C surfaces as KeyboardInterrupt (``unsafe_ask_async``)."""

    def __init__(self, notify: Callable[[str], None] | None = None) -> None:
        self._notify = notify or (lambda msg: questionary.print(msg, style="fg:ansibrightblack"))

    async def _ask(self, question: questionary.Question) -> Any:
        return await _with_escape(question).unsafe_ask_async(patch_stdout=False)

    async def text(self, message: str, *, default: str = "", validate: Validator | None = None) -> Any:
        return await self._ask(questionary.text(message, default=default, validate=validate, style=STYLE))

    async def password(self, message: str) -> Any:
        return await self._ask(questionary.password(message, style=STYLE))

    async def select(self, message: str, options: Sequence[Option], *, default: Any = None) -> Any:
        values = [o.value for o in options]
        return await self._ask(
            questionary.select(
                message,
                choices=_choices(options),
                default=default if default in values else None,
                style=STYLE,
            )
        )

    async def checkbox(self, message: str, options: Sequence[Option], *, checked: Sequence[Any] = ()) -> Any:
        return await self._ask(questionary.checkbox(message, choices=_choices(options, checked), style=STYLE))

    async def confirm(self, message: str, *, default: bool = True) -> Any:
        return await self._ask(questionary.confirm(message, default=default, style=STYLE))

    def notice(self, message: str) -> None:
        self._notify(message)


class Prompter:
    """Prompt primitives returning a validated value or BACK, never both."""

    def __init__(self, backend: PromptBackend, tracker: EscapeTracker | None = None) -> None:
        self.backend = backend
        self.tracker = tracker or EscapeTracker()

    def _on_escape(self, can_go_back: bool) -> Back | None:
        if self.tracker.press() == "back":
            if can_go_back:
                return BACK
            logger.debug("Back gesture ignored on a non-backtrackable prompt")
            return None
        self.backend.notice(BACK_HINT)
        return None

    async def text(
        self,
        message: str,
        *,
        default: str = "",
        validate: Validator | None = None,
        can_go_back: bool = True,
    ) -> str | Back:
        self.tracker.reset()
        while True:
            raw = await self.backend.text(message, default=default, validate=validate)
            if raw is ESCAPE:
                if self._on_escape(can_go_back) is BACK:
                    return BACK
                continue
            value = str(raw or "")
            if validate is not None:
                verdict = validate(value)
                if verdict is not True:
                    self.backend.notice(str(verdict))
                    continue
            return value

    async def password(self, message: str, *, can_go_back: bool = False) -> str | Back:
        self.tracker.reset()
        while True:
            raw = await self.backend.password(message)
            if raw is ESCAPE:
                if self._on_escape(can_go_back) is BACK:
                    return BACK
                continue
            return str(raw or "")

    async def select(
        self,
        message: str,
        options: Sequence[Option],
        *,
        default: Any = None,
        can_go_back: bool = True,
    ) -> Any:
        values = [o.value for o in options]
        self.tracker.reset()
        while True:
            raw = await self.backend.select(message, options, default=default)
            if raw is ESCAPE:
                if self._on_escape(can_go_back) is BACK:
                    return BACK
                continue
            if raw not in values:
                self.backend.notice("Please pick one of the listed options")
                continue
            return raw

    async def checkbox(
        self,
        message: str,
        options: Sequence[Option],
        *,
        checked: Sequence[Any] = (),
        can_go_back: bool = True,
    ) -> list[Any] | Back:
        values = [o.value for o in options]
        self.tracker.reset()
        while True:
            raw = await self.backend.checkbox(message, options, checked=checked)
            if raw is ESCAPE:
                if self._on_escape(can_go_back) is BACK:
                    return BACK
                continue
            picked = list(raw or [])
            if any(v not in values for v in picked):
                self.backend.notice("Please pick from the listed options")
                continue
            return picked

    async def confirm(self, message: str, *, default: bool = True, can_go_back: bool = True) -> bool | Back:
        self.tracker.reset()
        while True:
            raw = await self.backend.confirm(message, default=default)
            if raw is ESCAPE:
                if self._on_escape(can_go_back) is BACK:
                    return BACK
                continue
            return bool(raw)


# -- validators ---------------------------------------------------------------


def required(message: str) -> Validator:
    def check(value: str) -> bool | str:
        return True if value.strip() else message

    return check


def min_length(length: int, empty_message: str, short_message: str) -> Validator:
    def check(value: str) -> bool | str:
        if not value.strip():
            return empty_message
        if len(value.strip()) < length:
            return short_message
        return True

    return check


def sanitizable(sanitize: Callable[[str], str], message: str) -> Validator:
    """Valid when the sanitized form is non-empty."""

    def check(value: str) -> bool | str:
        if not value.strip():
            return "Project name is required"
        return True if sanitize(value) else message

    return check
