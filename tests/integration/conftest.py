"""Fixtures for integration tests."""

import json
from pathlib import Path
from typing import Protocol

import pytest


class RecordFn(Protocol):
    """Protocol for event recording function."""

    def __call__(self, event: str, **fields: object) -> None:
        """Append a runner event to the recording."""


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run from a temporary working directory holding runner images."""
    monkeypatch.chdir(tmp_path)
    for name, content in [
        ("ref.png", b"reference"),
        ("curr.png", b"current"),
        ("diff.png", b"diff"),
    ]:
        (tmp_path / "runner" / name).parent.mkdir(exist_ok=True)
        (tmp_path / "runner" / name).write_bytes(content)
    return tmp_path


@pytest.fixture
def events_file(workdir: Path) -> Path:
    """Path of the recorded runner events."""
    return workdir / "events.jsonl"


@pytest.fixture
def record(events_file: Path) -> RecordFn:
    """Return a function appending runner events to the recording."""

    def _record(event: str, **fields: object) -> None:
        payload = {
            "event": event,
            "suite": {
                "fullName": "root suite",
                "states": [{"name": "plain"}, {"name": "changed"}, {"name": "never"}],
            },
            "browserId": "chrome 41",
            "sessionId": "session-1",
            **fields,
        }
        with events_file.open("a") as handle:
            handle.write(json.dumps(payload) + "\n")

    return _record
