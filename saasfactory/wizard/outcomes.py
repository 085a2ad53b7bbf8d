"""What a prompt or state handler hands back to the wizard loop."""

from dataclasses import dataclass
from typing import Any, Literal


@dataclass(frozen=True)
class Advance:
    """Move forward, optionally carrying the answer that decides the branch."""

    value: Any = None


class Back:
    """The user asked to go back. Use the module-level BACK instance."""

    _instance: "Back | None" = None

    def __new__(cls) -> "Back":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "BACK"


BACK = Back()


@dataclass(frozen=True)
class Retry:
    """Repeat an earlier step: "more" reruns discovery, "sector" picks a new focus."""

    reason: Literal["more", "sector"]


@dataclass(frozen=True)
class Exit:
    """Leave the wizard without generating."""

    reason: str = "declined"


Outcome = Advance | Back | Retry | Exit


def is_back(value: Any) -> bool:
    return value is BACK
