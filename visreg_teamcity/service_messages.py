"""TeamCity service messages written to the build log."""

import logging
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TextIO

log = logging.getLogger(__name__)

PREFIX = "##teamcity"

ESCAPES: Mapping[str, str] = {
    "|": "||",
    "'": "|'",
    "\n": "|n",
    "\r": "|r",
    "[": "|[",
    "]": "|]",
    "\u0085": "|x",
    "\u2028": "|l",
    "\u2029": "|p",
}


def escape_value(value: str) -> str:
    """Escape a value for use inside a service message."""
    return "".join(ESCAPES.get(char, char) for char in value)


@dataclass(frozen=True, kw_only=True)
class ServiceMessage:
    """A single service message.

    A message carries either one unnamed ``value`` or named ``attributes``.
    Attributes set to None are left out of the rendered line.
    """

    name: str
    value: str | None = None
    attributes: Mapping[str, str | None] = field(default_factory=dict)

    def render(self) -> str:
        """Render the message as one line of build log output."""
        if self.value is not None:
            return f"{PREFIX}[{self.name} '{escape_value(self.value)}']"

        parts = [self.name]
        parts.extend(
            f"{key}='{escape_value(value)}'"
            for key, value in self.attributes.items()
            if value is not None
        )
        return f"{PREFIX}[{' '.join(parts)}]"


@dataclass(frozen=True, kw_only=True)
class ServiceMessages:
    """Writes service messages to a text stream, one per line."""

    stream: TextIO = field(default_factory=lambda: sys.stdout)

    def emit(self, message: ServiceMessage) -> None:
        """Write a message and flush so the build server sees it immediately."""
        line = message.render()
        log.debug("Emitting service message: %s", line)
        self.stream.write(line + "\n")
        self.stream.flush()

    def test_started(self, name: str, flow_id: str) -> None:
        """Report that a test started."""
        self.emit(
            ServiceMessage(
                name="testStarted", attributes={"name": name, "flowId": flow_id}
            )
        )

    def test_ignored(self, name: str, flow_id: str) -> None:
        """Report that a test was skipped."""
        self.emit(
            ServiceMessage(
                name="testIgnored", attributes={"name": name, "flowId": flow_id}
            )
        )

    def test_failed(
        self,
        name: str,
        flow_id: str,
        message: str | None = None,
        details: str | None = None,
    ) -> None:
        """Report that a test failed, optionally with a message and details."""
        self.emit(
            ServiceMessage(
                name="testFailed",
                attributes={
                    "name": name,
                    "message": message,
                    "details": details,
                    "flowId": flow_id,
                },
            )
        )

    def test_finished(self, name: str, flow_id: str) -> None:
        """Report that a test finished."""
        self.emit(
            ServiceMessage(
                name="testFinished", attributes={"name": name, "flowId": flow_id}
            )
        )

    def publish_artifacts(self, path_spec: str) -> None:
        """Publish artifacts using a ``source => target`` path spec."""
        self.emit(ServiceMessage(name="publishArtifacts", value=path_spec))

    def test_metadata(self, test_name: str, metadata_type: str, value: str) -> None:
        """Attach metadata such as an image to a test."""
        self.emit(
            ServiceMessage(
                name="testMetadata",
                attributes={
                    "testName": test_name,
                    "type": metadata_type,
                    "value": value,
                },
            )
        )
