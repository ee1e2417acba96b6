"""Error taxonomy for the update engine.

Every failure raised by the core derives from :class:`ReactorError` so that
embedders can decide in one place whether to log, retry or exit.
"""

from pathlib import Path


class ReactorError(Exception):
    """Base class for all update engine failures."""

    pass


class UnsupportedPlatformError(ReactorError):
    """Raised when no executable naming rule exists for the platform."""

    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(f"this os `{platform}` is not supported")


class InvalidVersionError(ReactorError, ValueError):
    """Raised when a version string is not `major.minor.patch`."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"invalid version `{value}`: expected major.minor.patch")


class FileOperationError(ReactorError):
    """Raised when a filesystem operation fails.

    Carries a description of the operation and the path it touched.
    """

    def __init__(self, message: str, path: Path | None = None):
        self.message = message
        self.path = path
        if path is None:
            super().__init__(f"failed to execute IO operation: {message}")
        else:
            super().__init__(f"failed to execute IO operation: {message} `{path}`")


class PermissionChangeError(FileOperationError):
    """Raised when the executable bit cannot be set on a build."""

    def __init__(self, path: Path):
        super().__init__("failed to set permission on", path)


class SelfLocationError(ReactorError):
    """Raised when the path of the running executable cannot be determined."""

    def __init__(self, reason: str = ""):
        self.reason = reason
        message = "failed to locate path of current executable"
        super().__init__(f"{message}: {reason}" if reason else message)


class NetworkError(ReactorError):
    """Raised when the publisher cannot be reached or answers with an error."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(f"failed to fetch data from the publisher: {message}")


class ManifestParseError(ReactorError):
    """Raised when the publisher's manifest cannot be parsed."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"failed to parse data from the publisher: {reason}")


class ArchiveError(ReactorError):
    """Raised when a downloaded package is corrupt or unsafe to extract."""

    pass


class VersionMismatchError(ReactorError):
    """Raised when the executable's filename disagrees with its compiled-in version."""

    def __init__(self, expected: str, found: str, path: Path):
        self.expected = expected
        self.found = found
        self.path = path
        super().__init__(
            f"executable {path.name} is named for version {found} but reports version {expected}"
        )
