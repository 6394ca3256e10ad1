"""Translation of runner lifecycle events into TeamCity service messages."""

import asyncio
import logging
from collections import Counter
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path

from visreg_teamcity.models.events import (
    BeginState,
    ImageKind,
    RunnerError,
    RunnerEvent,
    SkipState,
    TestResultEvent,
)
from visreg_teamcity.naming import get_image_path, get_test_name
from visreg_teamcity.screenshots import copy_file, report_screenshot
from visreg_teamcity.service_messages import ServiceMessages

log = logging.getLogger(__name__)


@dataclass(kw_only=True)
class EventTranslator:
    """Reports the events of one runner as TeamCity tests.

    Handlers run synchronously and may be called from any thread. Screenshot
    captures run as tasks on ``loop`` and report their image once the file is
    in place; captures are not ordered relative to each other or to the
    messages emitted by the handlers.
    """

    messages: ServiceMessages
    images_dir: Path
    loop: asyncio.AbstractEventLoop = field(repr=False)
    finished_tests: set[str] = field(default_factory=set, init=False)
    outcomes: Counter[str] = field(default_factory=Counter, init=False)
    _pending: set[asyncio.Task[None]] = field(
        default_factory=set, init=False, repr=False
    )

    def handle(self, event: RunnerEvent) -> None:
        """Dispatch an event to its handler."""
        match event:
            case BeginState():
                self.begin_state(event)
            case SkipState():
                self.skip_state(event)
            case TestResultEvent():
                self.test_result(event)
            case RunnerError():
                self.error(event)
            case _:
                raise TypeError(f"Unsupported runner event: {event!r}")

    def begin_state(self, event: BeginState) -> None:
        """Report that a state started."""
        name = get_test_name(event)
        log.debug("Test started: %s (session=%s)", name, event.session_id)
        self.messages.test_started(name, flow_id=event.session_id)
        self.outcomes["started"] += 1

    def skip_state(self, event: SkipState) -> None:
        """Report a skipped state and remember it as finished."""
        name = get_test_name(event)
        log.debug("Test ignored: %s", name)
        self.messages.test_ignored(name, flow_id=event.session_id)
        self.finished_tests.add(name)
        self.outcomes["ignored"] += 1

    def test_result(self, event: TestResultEvent) -> None:
        """Report a comparison result and capture its screenshots.

        The reference image is always captured. Unless the images were equal,
        the current and diff images are captured as well and the test fails.
        """
        name = get_test_name(event)
        failed = event.equal is not True

        if failed:
            log.debug("Test failed: %s (images differ)", name)
            self.messages.test_failed(name, flow_id=event.session_id)
            self.outcomes["failed"] += 1
        else:
            self.outcomes["passed"] += 1

        self.messages.test_finished(name, flow_id=event.session_id)
        self.finished_tests.add(name)

        reference_path = get_image_path(self.images_dir, event, ImageKind.REFERENCE)
        self._capture(
            name,
            reference_path,
            lambda: copy_file(event.reference_image, reference_path),
        )

        if not failed:
            return

        current_image = event.current_image
        if current_image is None:
            log.warning("No current image recorded for failed test %s", name)
        else:
            current_path = get_image_path(self.images_dir, event, ImageKind.CURRENT)
            self._capture(
                name, current_path, lambda: copy_file(current_image, current_path)
            )

        diff_path = get_image_path(self.images_dir, event, ImageKind.DIFF)
        self._capture(name, diff_path, lambda: self._save_diff(event, diff_path))

    def error(self, event: RunnerError) -> None:
        """Fail the erroring state, or every unfinished state of the suite.

        Failed tests are not added to ``finished_tests``.
        """
        if event.state is not None:
            self._fail_test(event, get_test_name(event))
            return

        log.debug(
            "Runner error without state, failing suite %s", event.suite.full_name
        )
        for state in event.suite.states:
            name = get_test_name(event, state)
            if name not in self.finished_tests:
                self._fail_test(event, name)

    async def wait_pending(self) -> None:
        """Wait until every started screenshot capture has settled."""
        # let captures scheduled from other threads start first
        await asyncio.sleep(0)
        while self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    def _fail_test(self, event: RunnerError, name: str) -> None:
        log.debug("Test errored: %s: %s", name, event.message)
        self.messages.test_failed(
            name,
            flow_id=event.session_id,
            message=event.message,
            details=event.stack,
        )
        self.messages.test_finished(name, flow_id=event.session_id)
        self.outcomes["errored"] += 1

    def _capture(
        self, name: str, image_path: Path, save: Callable[[], Awaitable[object]]
    ) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self.loop:
            self._start_capture(name, image_path, save)
        else:
            self.loop.call_soon_threadsafe(self._start_capture, name, image_path, save)

    def _start_capture(
        self, name: str, image_path: Path, save: Callable[[], Awaitable[object]]
    ) -> None:
        task = self.loop.create_task(self._save_and_report(name, image_path, save))
        self._pending.add(task)
        task.add_done_callback(self._capture_done)

    async def _save_and_report(
        self, name: str, image_path: Path, save: Callable[[], Awaitable[object]]
    ) -> None:
        await save()
        report_screenshot(self.messages, name, image_path)

    async def _save_diff(self, event: TestResultEvent, diff_path: Path) -> None:
        await asyncio.to_thread(diff_path.parent.mkdir, parents=True, exist_ok=True)
        await event.save_diff_to(diff_path)

    def _capture_done(self, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        if (exc := task.exception()) is not None:
            log.error("Screenshot capture failed: %s", exc, exc_info=exc)
