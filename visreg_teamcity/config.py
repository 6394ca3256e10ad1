"""Configuration for the TeamCity reporter."""

import logging
import tempfile
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)


class ReporterConfig(BaseModel):
    """Configuration for the TeamCity reporter."""

    model_config = ConfigDict(frozen=True)

    images_dir: Path | None = Field(
        default=None,
        description="Directory screenshots are filed under (default: a fresh "
        "temporary directory in the working directory)",
    )
    temp_prefix: str = Field(
        default="visreg-", description="Prefix of the temporary images directory"
    )


def prepare_images_dir(config: ReporterConfig) -> Path:
    """Create the directory screenshots of a run are filed under.

    A configured directory is created if missing. Otherwise a fresh directory
    is created in the working directory and returned as a relative path, so
    published artifacts keep the same layout below the hidden artifacts root.
    """
    if config.images_dir is not None:
        config.images_dir.mkdir(parents=True, exist_ok=True)
        return config.images_dir

    cwd = Path.cwd()
    created = Path(tempfile.mkdtemp(prefix=config.temp_prefix, dir=cwd))
    log.debug("Created images directory %s", created)
    return created.relative_to(cwd)
