"""Self-promotion: deciding which local build should keep running.

Each pass ends in exactly one of three outcomes, checked in order:

1. A local build newer than the running version exists: mark it
   executable and hand off to it.
2. The running executable is itself a versioned build: copy it over the
   canonical name and hand off to the canonical path.
3. Otherwise prune every local build that is not newer than the running
   version.

The engine never transfers control itself. It returns a :class:`Handoff`
and leaves the process replacement to the caller, so the decision logic
can be exercised without touching real process state.
"""

import logging
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from reactor.context import RuntimeContext
from reactor.errors import FileOperationError, PermissionChangeError
from reactor.models import LocalBuildEntry, VersionTag
from reactor.scanner import LocalVersionScanner, parse_build_version

logger = logging.getLogger(__name__)

EXECUTABLE_MODE = 0o755


class HandoffReason(Enum):
    """Why the running process should give way to another executable."""

    NEWER_BUILD = "newer_build"
    CANONICALIZE = "canonicalize"


@dataclass(frozen=True)
class Handoff:
    """Control should be transferred to ``path``."""

    path: Path
    reason: HandoffReason
    version: VersionTag | None = None


@dataclass(frozen=True)
class Continue:
    """The running process stays; ``pruned`` lists the builds removed."""

    pruned: list[LocalBuildEntry] = field(default_factory=list)


PromotionResult = Handoff | Continue


class SelfPromotionEngine:
    """Run one self-promotion pass over the installation directory."""

    def __init__(
        self,
        name: str,
        version: VersionTag,
        context: RuntimeContext,
        scanner: LocalVersionScanner | None = None,
    ):
        self.name = name
        self.version = version
        self.context = context
        self.scanner = scanner or LocalVersionScanner(name, context)

    def run(self) -> PromotionResult:
        builds = self.scanner.scan()

        newest = max(builds, default=None)
        if newest is not None and newest.version > self.version:
            return self._promote_newer_build(newest)

        if self.is_running_versioned_build():
            return self._canonicalize_self()

        return Continue(pruned=self._prune(builds))

    def is_running_versioned_build(self) -> bool:
        """Check whether the running executable carries a version suffix."""
        return parse_build_version(self.name, self.context.executable_path.name, self.context) is not None

    def _promote_newer_build(self, build: LocalBuildEntry) -> Handoff:
        if not self.context.is_windows:
            try:
                build.path.chmod(EXECUTABLE_MODE)
            except OSError as err:
                raise PermissionChangeError(build.path) from err
        logger.warning("found new local version: %s. restarting...", build.version)
        return Handoff(path=build.path, reason=HandoffReason.NEWER_BUILD, version=build.version)

    def _canonicalize_self(self) -> Handoff:
        current = self.context.executable_path
        canonical = self.context.canonical_executable(self.name)
        try:
            shutil.copy2(current, canonical)
        except OSError as err:
            raise FileOperationError("failed to set current version as default executable", canonical) from err
        logger.warning("replaced default version with %s. restarting...", self.version)
        return Handoff(path=canonical, reason=HandoffReason.CANONICALIZE, version=self.version)

    def _prune(self, builds: list[LocalBuildEntry]) -> list[LocalBuildEntry]:
        # Fail fast: the first build that cannot be removed aborts the pass
        pruned: list[LocalBuildEntry] = []
        for build in sorted(builds):
            if build.version > self.version:
                continue
            try:
                build.path.unlink()
            except OSError as err:
                raise FileOperationError("failed to remove old version", build.path) from err
            logger.info("removed old version: %s", build.version)
            pruned.append(build)
        return pruned
