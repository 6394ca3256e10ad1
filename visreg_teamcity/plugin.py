"""Reporter plugin wiring a runner's events to a translator."""

import asyncio
import logging
from dataclasses import dataclass, field

from visreg_teamcity.config import ReporterConfig, prepare_images_dir
from visreg_teamcity.runner import RUNNER_EVENTS, EventSource
from visreg_teamcity.service_messages import ServiceMessages
from visreg_teamcity.translator import EventTranslator

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class TeamCityPlugin:
    """Reports every runner started by the test tool to TeamCity."""

    config: ReporterConfig = field(default_factory=ReporterConfig)
    messages: ServiceMessages = field(default_factory=ServiceMessages)

    def register(self, tool: EventSource) -> None:
        """Start reporting whenever the tool starts a runner."""
        tool.on("startRunner", self.start_runner)

    def start_runner(self, runner: EventSource) -> EventTranslator:
        """Subscribe a fresh translator to the runner's events.

        Each runner gets its own images directory and finished-test set.
        Screenshot captures run on the event loop running this call, so
        events may later be emitted from synchronous code or other threads.

        Raises:
            RuntimeError: If called without a running event loop

        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as exc:
            raise RuntimeError(
                "TeamCity reporting must be started from a running event loop"
            ) from exc

        images_dir = prepare_images_dir(self.config)
        log.info("Filing screenshots under %s", images_dir)

        translator = EventTranslator(
            messages=self.messages, images_dir=images_dir, loop=loop
        )
        for event_name in RUNNER_EVENTS:
            runner.on(event_name, translator.handle)
        return translator
