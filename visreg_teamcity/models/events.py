"""Runner lifecycle events consumed by the translator."""

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import TypeAlias

DiffSaver = Callable[[Path], Awaitable[object]]


class ImageKind(StrEnum):
    """Kind of screenshot captured for a test."""

    REFERENCE = "Reference"
    CURRENT = "Current"
    DIFF = "Diff"


@dataclass(frozen=True, kw_only=True)
class State:
    """A single visual checkpoint within a suite."""

    name: str


@dataclass(frozen=True, kw_only=True)
class Suite:
    """Group of states identified by its full name."""

    full_name: str
    states: Sequence[State] = ()


@dataclass(frozen=True, kw_only=True)
class StateEvent:
    """Common fields of events that concern one state in one browser."""

    suite: Suite
    state: State
    browser_id: str
    session_id: str


@dataclass(frozen=True, kw_only=True)
class BeginState(StateEvent):
    """A state started running."""


@dataclass(frozen=True, kw_only=True)
class SkipState(StateEvent):
    """A state was skipped."""


@dataclass(frozen=True, kw_only=True)
class TestResultEvent(StateEvent):
    """A state was compared against its reference image."""

    __test__ = False

    equal: bool | None = None
    reference_image: Path
    current_image: Path | None = None
    save_diff_to: DiffSaver


@dataclass(frozen=True, kw_only=True)
class RunnerError:
    """The runner failed, either for one state or for a whole suite.

    When ``state`` is None the error applies to every state of the suite.
    """

    suite: Suite
    state: State | None = None
    browser_id: str
    session_id: str
    message: str | None = None
    stack: str | None = None


RunnerEvent: TypeAlias = BeginState | SkipState | TestResultEvent | RunnerError
