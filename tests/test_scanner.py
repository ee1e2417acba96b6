"""Tests for local build discovery."""

from pathlib import Path
from unittest.mock import patch

import pytest

from reactor.context import RuntimeContext
from reactor.errors import FileOperationError
from reactor.models import VersionTag
from reactor.scanner import LocalVersionScanner, parse_build_version


def touch(directory: Path, *names: str) -> None:
    for name in names:
        (directory / name).write_bytes(b"binary")


class TestParseBuildVersion:
    """Tests for parse_build_version()."""

    def test_versioned_name(self, make_context) -> None:
        """A <name>-<version> file yields its version."""
        assert parse_build_version("app", "app-1.2.3", make_context()) == VersionTag(1, 2, 3)

    def test_canonical_name(self, make_context) -> None:
        """The canonical executable has no version."""
        assert parse_build_version("app", "app", make_context()) is None

    def test_other_program(self, make_context) -> None:
        """Builds of other programs are ignored."""
        assert parse_build_version("app", "other-1.0.0", make_context()) is None
        assert parse_build_version("app", "application-1.0.0", make_context()) is None

    def test_hyphenated_program_name(self, make_context) -> None:
        """The version is taken after the last hyphen."""
        assert parse_build_version("my-app", "my-app-2.0.0", make_context()) == VersionTag(2, 0, 0)
        assert parse_build_version("my-app", "my-app", make_context()) is None

    def test_windows_extension_stripped(self, make_context) -> None:
        """On Windows the .exe extension is not part of the version."""
        context = make_context("app.exe", platform="win32")
        assert parse_build_version("app", "app-1.0.0.exe", context) == VersionTag(1, 0, 0)
        assert parse_build_version("app", "app-1.0.0.EXE", context) == VersionTag(1, 0, 0)

    def test_posix_keeps_extension(self, make_context) -> None:
        """Only the platform's own extension is stripped."""
        assert parse_build_version("app", "app-1.0.0.exe", make_context()) is None


class TestLocalVersionScanner:
    """Tests for LocalVersionScanner.scan()."""

    def test_finds_versioned_builds(self, install_dir: Path, make_context) -> None:
        """Only well-formed builds of the program are returned."""
        touch(install_dir, "app", "app-1.0.0", "app-1.2.0", "app-bogus", "other-1.0.0")

        builds = LocalVersionScanner("app", make_context()).scan()

        assert {b.version: b.path for b in builds} == {
            VersionTag(1, 0, 0): install_dir / "app-1.0.0",
            VersionTag(1, 2, 0): install_dir / "app-1.2.0",
        }

    def test_sorted_ascending(self, install_dir: Path, make_context) -> None:
        """Builds come back in ascending version order."""
        touch(install_dir, "app-1.10.0", "app-1.9.0", "app-0.1.0")

        builds = LocalVersionScanner("app", make_context()).scan()

        assert [str(b.version) for b in builds] == ["0.1.0", "1.9.0", "1.10.0"]

    def test_empty_directory(self, make_context) -> None:
        """An empty installation has no builds."""
        assert LocalVersionScanner("app", make_context()).scan() == []

    def test_skips_directories(self, install_dir: Path, make_context) -> None:
        """A directory named like a build is not an executable."""
        (install_dir / "app-1.0.0").mkdir()

        assert LocalVersionScanner("app", make_context()).scan() == []

    def test_windows_builds(self, install_dir: Path, make_context) -> None:
        """Windows builds carry the .exe extension."""
        touch(install_dir, "app.exe", "app-1.1.0.exe")

        builds = LocalVersionScanner("app", make_context("app.exe", platform="win32")).scan()

        assert [(b.version, b.path.name) for b in builds] == [(VersionTag(1, 1, 0), "app-1.1.0.exe")]

    def test_missing_directory_reports_context(self, tmp_path: Path) -> None:
        """A directory read failure is surfaced with the directory path."""
        missing = tmp_path / "missing"
        context = RuntimeContext(executable_path=missing / "app", install_dir=missing, platform="linux")

        with pytest.raises(FileOperationError) as excinfo:
            LocalVersionScanner("app", context).scan()

        assert excinfo.value.path == missing
        assert "failed to read installation directory" in str(excinfo.value)

    def test_permission_error_not_swallowed(self, install_dir: Path, make_context) -> None:
        """Errors other than a missing directory propagate too."""
        with patch.object(Path, "iterdir", side_effect=PermissionError("denied")):
            with pytest.raises(FileOperationError) as excinfo:
                LocalVersionScanner("app", make_context()).scan()

        assert isinstance(excinfo.value.__cause__, PermissionError)
