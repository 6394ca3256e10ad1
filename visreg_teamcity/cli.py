"""CLI entry point replaying recorded runner events as TeamCity messages."""

import argparse
import asyncio
import logging
import sys
from collections.abc import Iterable, Mapping
from contextlib import nullcontext
from pathlib import Path

from visreg_teamcity.config import ReporterConfig
from visreg_teamcity.plugin import TeamCityPlugin
from visreg_teamcity.runner import JsonLinesRunner

OUTCOMES = ("started", "passed", "failed", "ignored", "errored")


def log_run_summary(log: logging.Logger, outcomes: Mapping[str, int]) -> None:
    """Log how many tests ended in each outcome."""
    log.info("=" * 80)
    log.info("Run Summary:")
    log.info("=" * 80)

    for outcome in OUTCOMES:
        log.info("%s: %d", outcome, outcomes.get(outcome, 0))


async def run(events: Iterable[str], config: ReporterConfig) -> int:
    """Report recorded runner events and return exit code."""
    log = logging.getLogger("visreg_teamcity")

    runner = JsonLinesRunner()
    translator = TeamCityPlugin(config=config).start_runner(runner)

    emitted = await runner.replay(events)
    log.info("Replayed %d runner event(s), waiting for screenshots...", emitted)

    await translator.wait_pending()
    log_run_summary(log, translator.outcomes)

    return 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Report visual regression runner events to TeamCity"
    )
    parser.add_argument(
        "--events",
        type=Path,
        default=None,
        help="File of runner events, one JSON object per line (default: stdin)",
    )
    parser.add_argument(
        "--images-dir",
        type=Path,
        default=None,
        help="Directory screenshots are filed under (default: temporary directory)",
    )
    parser.add_argument(
        "--temp-prefix",
        default="visreg-",
        help="Prefix of the temporary images directory",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Log level of diagnostics written to stderr",
    )

    args = parser.parse_args()

    # stdout carries the service messages
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    config = ReporterConfig(images_dir=args.images_dir, temp_prefix=args.temp_prefix)

    with args.events.open() if args.events else nullcontext(sys.stdin) as events:
        exit_code = asyncio.run(run(events, config))
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
