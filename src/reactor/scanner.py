"""Discovery of versioned builds installed next to the running executable."""

import logging

from reactor.context import RuntimeContext
from reactor.errors import FileOperationError, InvalidVersionError
from reactor.models import LocalBuildEntry, VersionTag

logger = logging.getLogger(__name__)


def parse_build_version(name: str, filename: str, context: RuntimeContext) -> VersionTag | None:
    """Return the version embedded in ``filename`` if it is a build of ``name``.

    Versioned builds are named ``<name>-<major.minor.patch>`` plus the
    platform executable extension. Anything else yields None.
    """
    if not filename.startswith(f"{name}-"):
        return None
    stem = context.strip_executable_extension(filename)
    suffix = stem.rsplit("-", 1)[-1]
    try:
        return VersionTag.parse(suffix)
    except InvalidVersionError:
        return None


class LocalVersionScanner:
    """Enumerate ``<name>-<version>`` builds in the installation directory."""

    def __init__(self, name: str, context: RuntimeContext):
        self.name = name
        self.context = context

    def scan(self) -> list[LocalBuildEntry]:
        """List the versioned builds found in the installation directory.

        Returns:
            Entries sorted by ascending version.

        Raises:
            FileOperationError: If the directory cannot be read.
        """
        install_dir = self.context.install_dir
        try:
            paths = list(install_dir.iterdir())
        except OSError as err:
            raise FileOperationError("failed to read installation directory", install_dir) from err

        entries: list[LocalBuildEntry] = []
        for path in paths:
            version = parse_build_version(self.name, path.name, self.context)
            if version is None:
                continue
            if not path.is_file():
                logger.debug("Skipping non-file entry %s", path)
                continue
            entries.append(LocalBuildEntry(version=version, path=path))

        entries.sort()
        logger.debug("Found %d local build(s) of %s in %s", len(entries), self.name, install_dir)
        return entries
