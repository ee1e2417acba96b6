"""Self-updating application runtime.

Embedded into an executable, it can:
- Hand off to a newer build already installed next to the running one
- Check a publisher endpoint for a newer release manifest
- Download, extract and install that release in place
"""

__version__ = "0.1.0"

from reactor.config import ReactorConfig  # noqa: E402
from reactor.context import RuntimeContext  # noqa: E402
from reactor.errors import (  # noqa: E402
    ArchiveError,
    FileOperationError,
    InvalidVersionError,
    ManifestParseError,
    NetworkError,
    PermissionChangeError,
    ReactorError,
    SelfLocationError,
    UnsupportedPlatformError,
    VersionMismatchError,
)
from reactor.models import (  # noqa: E402
    CheckUpdateResult,
    LocalBuildEntry,
    PackageManifest,
    UpdateStatus,
    VersionTag,
)
from reactor.promotion import Continue, Handoff, HandoffReason  # noqa: E402
from reactor.reactor import Reactor, ReactorBuilder  # noqa: E402

__all__ = [
    "__version__",
    "Reactor",
    "ReactorBuilder",
    "ReactorConfig",
    "RuntimeContext",
    "VersionTag",
    "PackageManifest",
    "LocalBuildEntry",
    "CheckUpdateResult",
    "UpdateStatus",
    "Handoff",
    "HandoffReason",
    "Continue",
    "ReactorError",
    "UnsupportedPlatformError",
    "InvalidVersionError",
    "FileOperationError",
    "PermissionChangeError",
    "SelfLocationError",
    "NetworkError",
    "ManifestParseError",
    "ArchiveError",
    "VersionMismatchError",
]
