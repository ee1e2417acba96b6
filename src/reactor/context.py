"""Process-level facts the update engine depends on.

The running executable's location and the platform identity are gathered
once into a :class:`RuntimeContext` and passed explicitly to the scanner,
promotion engine and applier, so tests can point them at a fake
installation directory.
"""

import sys
from dataclasses import dataclass, field
from pathlib import Path

from reactor.errors import SelfLocationError, UnsupportedPlatformError

WINDOWS_EXECUTABLE_EXTENSION = ".exe"

_WINDOWS_PLATFORMS = ("win32", "cygwin")
_POSIX_PLATFORMS = ("linux", "darwin", "freebsd", "openbsd", "netbsd", "dragonfly", "sunos", "aix")


def is_windows_platform(platform: str) -> bool:
    return platform.startswith(_WINDOWS_PLATFORMS)


def executable_extension(platform: str) -> str:
    """Return the executable file extension used on ``platform``.

    Raises:
        UnsupportedPlatformError: If the platform has no known naming rule.
    """
    if is_windows_platform(platform):
        return WINDOWS_EXECUTABLE_EXTENSION
    if platform.startswith(_POSIX_PLATFORMS):
        return ""
    raise UnsupportedPlatformError(platform)


def locate_current_executable() -> Path:
    """Return the resolved path of the running program.

    Frozen builds (PyInstaller, Nuitka, ...) report themselves through
    ``sys.executable``; otherwise the launched script in ``sys.argv[0]`` is used.
    """
    if getattr(sys, "frozen", False):
        candidate = sys.executable
    else:
        candidate = sys.argv[0] if sys.argv else ""
    if not candidate:
        raise SelfLocationError("interpreter did not report a program path")
    try:
        return Path(candidate).resolve(strict=True)
    except OSError as err:
        raise SelfLocationError(str(err)) from err


@dataclass(frozen=True)
class RuntimeContext:
    """Location of the running executable and the platform it runs on."""

    executable_path: Path
    install_dir: Path | None = None
    platform: str = field(default_factory=lambda: sys.platform)

    def __post_init__(self) -> None:
        if self.install_dir is None:
            object.__setattr__(self, "install_dir", self.executable_path.parent)

    @classmethod
    def current(cls, install_dir: Path | None = None) -> "RuntimeContext":
        """Describe the running process."""
        executable = locate_current_executable()
        return cls(executable_path=executable, install_dir=install_dir or executable.parent)

    @property
    def is_windows(self) -> bool:
        return is_windows_platform(self.platform)

    def executable_name(self, name: str) -> str:
        """Return the canonical executable filename for program ``name``."""
        return name + executable_extension(self.platform)

    def canonical_executable(self, name: str) -> Path:
        """Return the canonical (unversioned) executable path next to the running one."""
        return self.executable_path.parent / self.executable_name(name)

    def strip_executable_extension(self, filename: str) -> str:
        extension = executable_extension(self.platform)
        if extension and filename.lower().endswith(extension):
            return filename[: -len(extension)]
        return filename
