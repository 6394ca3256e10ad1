"""Tests for screenshot reporting and copying."""

from pathlib import Path, PurePosixPath
from unittest.mock import Mock, call

import pytest

from visreg_teamcity.screenshots import copy_file, report_screenshot, under_hidden_root
from visreg_teamcity.service_messages import ServiceMessages


@pytest.fixture
def messages() -> Mock:
    """Create mock service messages."""
    return Mock(spec=ServiceMessages)


class TestReportScreenshot:
    """Tests for report_screenshot."""

    def test_publishes_artifact_into_hidden_directory(
        self,
        messages: Mock,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Publishes the absolute image path into the image's directory."""
        monkeypatch.chdir(tmp_path)

        report_screenshot(messages, "testName", Path("path/to/image.png"))

        messages.publish_artifacts.assert_called_once_with(
            f"{tmp_path.resolve() / 'path/to/image.png'} => .teamcity/path/to"
        )

    def test_reports_image_metadata(
        self,
        messages: Mock,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Points the metadata at the published image."""
        monkeypatch.chdir(tmp_path)

        report_screenshot(messages, "testName", Path("path/to/image.png"))

        messages.test_metadata.assert_called_once_with(
            test_name="testName",
            metadata_type="image",
            value=".teamcity/path/to/image.png",
        )

    def test_publishes_before_reporting_metadata(self, messages: Mock) -> None:
        """The artifact is published before the metadata refers to it."""
        report_screenshot(messages, "testName", Path("path/to/image.png"))

        assert [c[0] for c in messages.method_calls] == [
            "publish_artifacts",
            "test_metadata",
        ]

    def test_propagates_sink_errors(self, messages: Mock) -> None:
        """Sink failures reach the caller."""
        messages.publish_artifacts.side_effect = OSError("closed")

        with pytest.raises(OSError, match="closed"):
            report_screenshot(messages, "testName", Path("path/to/image.png"))

        messages.test_metadata.assert_not_called()


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        (PurePosixPath("path/to"), Path(".teamcity/path/to")),
        (PurePosixPath("/abs/images/a.png"), Path(".teamcity/abs/images/a.png")),
    ],
)
def test_under_hidden_root(path: PurePosixPath, expected: Path) -> None:
    """Paths, absolute ones included, are placed below the hidden root."""
    assert under_hidden_root(path) == expected


async def test_copy_file_creates_missing_directories(tmp_path: Path) -> None:
    """Copies the file contents, creating parent directories."""
    source = tmp_path / "source.png"
    source.write_bytes(b"\x89PNG")
    destination = tmp_path / "images" / "suite" / "state" / "Reference.png"

    await copy_file(source, destination)

    assert destination.read_bytes() == b"\x89PNG"


async def test_copy_file_raises_for_missing_source(tmp_path: Path) -> None:
    """Raises FileNotFoundError when the source does not exist."""
    with pytest.raises(FileNotFoundError):
        await copy_file(tmp_path / "missing.png", tmp_path / "out" / "a.png")


def test_report_screenshot_call_sequence(messages: Mock, tmp_path: Path) -> None:
    """Absolute image paths keep their layout below the hidden root."""
    image = tmp_path / "images" / "Diff.png"

    report_screenshot(messages, "name", image)

    assert messages.method_calls == [
        call.publish_artifacts(
            f"{image.resolve()} => {under_hidden_root(image.parent)}"
        ),
        call.test_metadata(
            test_name="name",
            metadata_type="image",
            value=str(under_hidden_root(image)),
        ),
    ]
