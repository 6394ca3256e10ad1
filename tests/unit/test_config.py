"""Tests for reporter configuration."""

from pathlib import Path

import pytest

from visreg_teamcity.config import ReporterConfig, prepare_images_dir


def test_creates_configured_directory(tmp_path: Path) -> None:
    """Creates the configured directory, parents included."""
    images_dir = tmp_path / "reports" / "images"

    result = prepare_images_dir(ReporterConfig(images_dir=images_dir))

    assert result == images_dir
    assert images_dir.is_dir()


def test_accepts_existing_directory(tmp_path: Path) -> None:
    """An existing directory is reused."""
    result = prepare_images_dir(ReporterConfig(images_dir=tmp_path))

    assert result == tmp_path


def test_creates_fresh_relative_directory(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Without configuration a fresh directory is made in the working dir."""
    monkeypatch.chdir(tmp_path)

    first = prepare_images_dir(ReporterConfig())
    second = prepare_images_dir(ReporterConfig())

    assert not first.is_absolute()
    assert first.name.startswith("visreg-")
    assert (tmp_path / first).is_dir()
    assert first != second


def test_uses_temp_prefix(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """The temporary directory name starts with the configured prefix."""
    monkeypatch.chdir(tmp_path)

    result = prepare_images_dir(ReporterConfig(temp_prefix="gemini-"))

    assert result.name.startswith("gemini-")
