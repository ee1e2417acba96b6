"""Pytest configuration and fixtures."""

import io
import zipfile
from collections.abc import Callable, Sequence
from pathlib import Path

import httpx
import pytest

from reactor.config import ReactorConfig
from reactor.context import RuntimeContext


class HandoffCalled(Exception):
    """Raised by RecordingLauncher so a handoff stops the caller like a real exec."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"handoff to {path}")


class RecordingLauncher:
    """Launcher double that records handoffs instead of replacing the process."""

    def __init__(self, stop: bool = True):
        self.stop = stop
        self.calls: list[tuple[Path, Sequence[str] | None]] = []

    def transfer(self, path: Path, args: Sequence[str] | None = None) -> None:
        self.calls.append((path, args))
        if self.stop:
            raise HandoffCalled(path)


def build_zip(files: dict[str, bytes | str]) -> bytes:
    """Return the bytes of a zip archive holding ``files``."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, content in files.items():
            if name.endswith("/"):
                archive.writestr(zipfile.ZipInfo(name), "")
            else:
                archive.writestr(name, content)
    return buffer.getvalue()


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.fixture
def install_dir(tmp_path: Path) -> Path:
    """An empty installation directory."""
    path = tmp_path / "install"
    path.mkdir()
    return path


@pytest.fixture
def make_context(install_dir: Path) -> Callable[..., RuntimeContext]:
    """Build a POSIX runtime context for an executable inside ``install_dir``."""

    def _make(executable: str = "app", platform: str = "linux") -> RuntimeContext:
        return RuntimeContext(
            executable_path=install_dir / executable,
            install_dir=install_dir,
            platform=platform,
        )

    return _make


@pytest.fixture
def quiet_config() -> ReactorConfig:
    """Configuration without promotion delay or progress rendering."""
    return ReactorConfig(promotion_delay=0, show_progress=False)


@pytest.fixture
def launcher() -> RecordingLauncher:
    return RecordingLauncher()
