"""Yes/no decision gates with an auto-mode bypass.

The orchestrator never talks to the terminal directly.  It asks a
``DecisionGate``, which either answers from the stated default (auto mode) or
forwards the question to a confirm function.  Tests inject a scripted confirm
function instead of Rich's interactive prompt.
"""

from __future__ import annotations

from typing import Callable, Literal

from pydantic import BaseModel
from rich.prompt import Confirm

from .utils import console, print_info

GateName = Literal["overwrite", "createConfig", "generateClient"]

ConfirmFn = Callable[[str, bool], bool]


class DecisionOutcome(BaseModel):
    """Result of a single gate: which decision was taken and its answer."""

    gate: GateName
    value: bool


def rich_confirm(question: str, default: bool) -> bool:
    """Ask *question* on the console; an empty answer takes *default*."""
    return Confirm.ask(question, default=default, console=console)


def decide(
    question: str,
    default: bool,
    auto_mode: bool,
    confirm: ConfirmFn = rich_confirm,
) -> bool:
    """Resolve a yes/no decision.

    In auto mode the *default* is returned without interaction and a notice
    naming the decision is printed.  Otherwise the operator is asked.
    """
    if auto_mode:
        answer = "yes" if default else "no"
        print_info(f"Auto mode: {question} -> {answer}")
        return default
    return confirm(question, default)


class DecisionGate:
    """Binds a run's auto-mode flag and confirm function to named decisions."""

    def __init__(self, auto_mode: bool, confirm: ConfirmFn = rich_confirm) -> None:
        self.auto_mode = auto_mode
        self.confirm = confirm

    def decide(
        self,
        gate: GateName,
        question: str,
        default: bool,
        *,
        auto_default: bool | None = None,
    ) -> DecisionOutcome:
        """Resolve the decision *gate*.

        Args:
            gate: Identity of the decision, recorded on the outcome.
            question: Text shown to the operator.
            default: Answer taken when the operator just presses enter.
            auto_default: Answer used in auto mode when it differs from the
                interactive default.
        """
        effective = default
        if self.auto_mode and auto_default is not None:
            effective = auto_default
        value = decide(question, effective, self.auto_mode, self.confirm)
        return DecisionOutcome(gate=gate, value=value)
