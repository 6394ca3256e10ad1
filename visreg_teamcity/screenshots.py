"""Filing screenshots as hidden TeamCity artifacts."""

import asyncio
import logging
import shutil
from pathlib import Path, PurePath

from visreg_teamcity.service_messages import ServiceMessages

log = logging.getLogger(__name__)

HIDDEN_ARTIFACTS_ROOT = Path(".teamcity")


def under_hidden_root(path: PurePath) -> Path:
    """Join a path below the hidden artifacts root, dropping any anchor."""
    parts = path.parts[1:] if path.anchor else path.parts
    return HIDDEN_ARTIFACTS_ROOT.joinpath(*parts)


def report_screenshot(
    messages: ServiceMessages, test_name: str, image_path: Path
) -> None:
    """Publish a screenshot and attach it to the test as image metadata.

    The image is published into ``.teamcity/<image dir>`` and the metadata
    points at the published file, ``.teamcity/<image path>``.
    """
    source = image_path.resolve()
    target = under_hidden_root(image_path.parent)
    messages.publish_artifacts(f"{source} => {target}")
    messages.test_metadata(
        test_name=test_name,
        metadata_type="image",
        value=str(under_hidden_root(image_path)),
    )


def _copy(source: Path, destination: Path) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, destination)


async def copy_file(source: Path, destination: Path) -> None:
    """Copy a file, creating the destination directory if needed."""
    log.debug("Copying %s to %s", source, destination)
    await asyncio.to_thread(_copy, source, destination)
