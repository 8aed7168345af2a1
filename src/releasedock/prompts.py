from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable

from .client import ReleaseDockError

InputFn = Callable[[str], str]


class PromptStatus(enum.Enum):
    ANSWERED = "answered"
    ABORTED = "aborted"


@dataclass(frozen=True)
class PromptResult:
    status: PromptStatus
    value: str = ""

    @property
    def aborted(self) -> bool:
        return self.status is PromptStatus.ABORTED


class PromptAbortedError(ReleaseDockError):
    pass


def ask(message: str, *, default: str | None = None, input_fn: InputFn = input) -> PromptResult:
    """Ask once. An empty answer falls back to ``default``; EOF or Ctrl-C is an abort."""
    try:
        raw = input_fn(message)
    except (EOFError, KeyboardInterrupt):
        return PromptResult(PromptStatus.ABORTED)
    value = raw.strip()
    if not value and default is not None:
        value = default
    return PromptResult(PromptStatus.ANSWERED, value)


def confirm(message: str = "Are you sure?", *, input_fn: InputFn = input) -> bool:
    # Enter accepts the "y" default; anything but y/Y declines. No re-prompt.
    result = ask(f"{message}  ", default="y", input_fn=input_fn)
    if result.aborted:
        raise PromptAbortedError("Prompt aborted.")
    return result.value in ("y", "Y")


def request_access_token(*, input_fn: InputFn = input) -> str | None:
    """Return the pasted token (possibly empty), or None if the user aborted."""
    result = ask("Enter your access token:  ", input_fn=input_fn)
    if result.aborted:
        return None
    return result.value
