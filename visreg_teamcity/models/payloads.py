"""Pydantic models for runner events recorded as JSON lines."""

from collections.abc import Sequence
from pathlib import Path
from typing import Annotated, Literal

from pydantic import Field, TypeAdapter, model_validator

from visreg_teamcity.models.base import Model
from visreg_teamcity.models.events import (
    BeginState,
    DiffSaver,
    RunnerError,
    SkipState,
    State,
    Suite,
    TestResultEvent,
)
from visreg_teamcity.screenshots import copy_file


class StatePayload(Model):
    """State as recorded by the runner."""

    name: str

    def to_state(self) -> State:
        """Convert to the runner event model."""
        return State(name=self.name)


class SuitePayload(Model):
    """Suite as recorded by the runner."""

    full_name: str = Field(..., alias="fullName")
    states: Sequence[StatePayload] = Field(default_factory=list)

    def to_suite(self) -> Suite:
        """Convert to the runner event model."""
        return Suite(
            full_name=self.full_name,
            states=tuple(state.to_state() for state in self.states),
        )


class ImagePayload(Model):
    """Reference to an image file written by the runner."""

    path: Path


class EventPayload(Model):
    """Fields shared by every recorded event."""

    suite: SuitePayload
    browser_id: str = Field(..., alias="browserId")
    session_id: str = Field(..., alias="sessionId")


class BeginStatePayload(EventPayload):
    """Recorded ``beginState`` event."""

    event: Literal["beginState"]
    state: StatePayload

    def to_event(self) -> BeginState:
        """Convert to the runner event model."""
        return BeginState(
            suite=self.suite.to_suite(),
            state=self.state.to_state(),
            browser_id=self.browser_id,
            session_id=self.session_id,
        )


class SkipStatePayload(EventPayload):
    """Recorded ``skipState`` event."""

    event: Literal["skipState"]
    state: StatePayload

    def to_event(self) -> SkipState:
        """Convert to the runner event model."""
        return SkipState(
            suite=self.suite.to_suite(),
            state=self.state.to_state(),
            browser_id=self.browser_id,
            session_id=self.session_id,
        )


class TestResultPayload(EventPayload):
    """Recorded ``testResult`` event.

    The runner saves the diff image itself when recording, so replaying the
    event copies ``diffImg`` instead of rendering a new diff. ``currImg`` is
    only required when the images were not equal.
    """

    __test__ = False

    event: Literal["testResult"]
    state: StatePayload
    equal: bool | None = None
    ref_img: ImagePayload = Field(..., alias="refImg")
    curr_img: ImagePayload | None = Field(default=None, alias="currImg")
    diff_img: ImagePayload | None = Field(default=None, alias="diffImg")

    @model_validator(mode="after")
    def check_current_image(self) -> "TestResultPayload":
        """Require the current image of results that differ."""
        if self.equal is not True and self.curr_img is None:
            raise ValueError("currImg is required unless equal is true")
        return self

    def to_event(self) -> TestResultEvent:
        """Convert to the runner event model."""
        return TestResultEvent(
            suite=self.suite.to_suite(),
            state=self.state.to_state(),
            browser_id=self.browser_id,
            session_id=self.session_id,
            equal=self.equal,
            reference_image=self.ref_img.path,
            current_image=self.curr_img.path if self.curr_img else None,
            save_diff_to=recorded_diff_saver(
                self.diff_img.path if self.diff_img else None
            ),
        )


class RunnerErrorPayload(EventPayload):
    """Recorded ``err`` event."""

    event: Literal["err"]
    state: StatePayload | None = None
    message: str | None = None
    stack: str | None = None

    def to_event(self) -> RunnerError:
        """Convert to the runner event model."""
        return RunnerError(
            suite=self.suite.to_suite(),
            state=self.state.to_state() if self.state else None,
            browser_id=self.browser_id,
            session_id=self.session_id,
            message=self.message,
            stack=self.stack,
        )


RunnerEventPayload = Annotated[
    BeginStatePayload | SkipStatePayload | TestResultPayload | RunnerErrorPayload,
    Field(discriminator="event"),
]

runner_event_adapter: TypeAdapter[RunnerEventPayload] = TypeAdapter(
    RunnerEventPayload
)


def recorded_diff_saver(source: Path | None) -> DiffSaver:
    """Build a diff saver that copies an already rendered diff image."""

    async def save_diff_to(destination: Path) -> None:
        if source is None:
            raise FileNotFoundError("No diff image was recorded for this result")
        await copy_file(source, destination)

    return save_diff_to
