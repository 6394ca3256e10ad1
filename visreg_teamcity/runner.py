"""Runner event sources."""

import asyncio
import logging
from collections import defaultdict
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol, TypeAlias

from pydantic import ValidationError

from visreg_teamcity.models.payloads import runner_event_adapter

log = logging.getLogger(__name__)

RUNNER_EVENTS = ("beginState", "skipState", "testResult", "err")

Handler: TypeAlias = Callable[[Any], object]


class EventSource(Protocol):
    """Anything handlers can subscribe to by event name."""

    def on(self, event_name: str, handler: Handler) -> None:
        """Call handler with the payload of every event named event_name."""


@dataclass(kw_only=True)
class EventEmitter:
    """Calls subscribed handlers synchronously, in subscription order."""

    _handlers: defaultdict[str, list[Handler]] = field(
        default_factory=lambda: defaultdict(list), init=False, repr=False
    )

    def on(self, event_name: str, handler: Handler) -> None:
        """Subscribe handler to events named event_name."""
        self._handlers[event_name].append(handler)

    def emit(self, event_name: str, payload: Any) -> None:
        """Call every handler subscribed to event_name with payload."""
        for handler in list(self._handlers.get(event_name, ())):
            handler(payload)


@dataclass(kw_only=True)
class JsonLinesRunner(EventEmitter):
    """Replays runner events recorded one JSON object per line."""

    async def replay(self, lines: Iterable[str]) -> int:
        """Emit every recorded event and return how many were emitted.

        Control returns to the event loop after each event so that
        screenshot captures started by handlers make progress.

        Raises:
            pydantic.ValidationError: If a line is not a valid runner event

        """
        emitted = 0
        for line_number, line in enumerate(lines, start=1):
            if not line.strip():
                continue

            try:
                payload = runner_event_adapter.validate_json(line)
            except ValidationError:
                log.error("Invalid runner event on line %d", line_number)
                raise

            self.emit(payload.event, payload.to_event())
            emitted += 1
            await asyncio.sleep(0)

        return emitted
