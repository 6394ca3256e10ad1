"""Test names and screenshot paths derived from runner events."""

import re
from pathlib import Path

from visreg_teamcity.models.events import ImageKind, RunnerError, State, StateEvent

WHITESPACE = re.compile(r"\s")


def get_test_name(
    event: StateEvent | RunnerError, state: State | None = None
) -> str:
    """Build the TeamCity test name for a state in a browser.

    Suite and state names are trimmed and their inner whitespace becomes
    underscores; whitespace in the browser id is removed entirely.

    Args:
        event: Event carrying the suite, state and browser id
        state: State to name instead of the event's own state

    Returns:
        Name in the form ``suite.state.browser``

    Raises:
        ValueError: If no state is given and the event carries none

    """
    state = state or event.state
    if state is None:
        raise ValueError(
            f"Cannot name a test of suite '{event.suite.full_name}' without a state"
        )

    joined = ".".join(
        [
            event.suite.full_name.strip(),
            state.name.strip(),
            WHITESPACE.sub("", event.browser_id),
        ]
    )
    return WHITESPACE.sub("_", joined)


def get_image_path(base_dir: Path | str, event: StateEvent, kind: ImageKind) -> Path:
    """Return where a screenshot of the given kind is filed for the event."""
    return (
        Path(base_dir)
        / event.suite.full_name.strip()
        / event.state.name.strip()
        / event.browser_id.strip()
        / f"{kind}.png"
    )
