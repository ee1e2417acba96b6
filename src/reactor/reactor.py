"""Update orchestration.

A :class:`Reactor` is created once by the embedding program with its name,
compiled-in version and publishing URL. ``oneclick()`` runs the full cycle:

1. Promote a newer local build if one exists (may restart the process)
2. Check the publisher and apply a newer package when available
3. Promote again, since the package may have dropped a new versioned build

Any failure stops the cycle and propagates to the caller.
"""

import logging
import time
from collections.abc import Sequence

import httpx

from reactor.applier import PackageApplier, ProgressCallback
from reactor.checker import RemoteUpdateChecker
from reactor.config import ReactorConfig
from reactor.context import RuntimeContext
from reactor.errors import ReactorError, VersionMismatchError
from reactor.handoff import Launcher, ProcessLauncher
from reactor.models import CheckUpdateResult, PackageManifest, VersionTag, coerce_version
from reactor.promotion import Handoff, PromotionResult, SelfPromotionEngine
from reactor.scanner import LocalVersionScanner, parse_build_version

logger = logging.getLogger(__name__)


class Reactor:
    """Self-update orchestrator embedded in an executable."""

    def __init__(
        self,
        name: str,
        version: str | VersionTag,
        publishing_url: str,
        *,
        context: RuntimeContext | None = None,
        config: ReactorConfig | None = None,
        client: httpx.Client | None = None,
        launcher: Launcher | None = None,
        on_progress: ProgressCallback | None = None,
        handoff_args: Sequence[str] | None = None,
    ):
        """Create an orchestrator for the running program.

        Args:
            name: Program name; the canonical executable is named after it.
            version: The program's own version, as a tag or ``major.minor.patch``.
            publishing_url: URL serving the latest release manifest.
            context: Running executable location; detected when omitted.
            config: Tunables; read from the environment when omitted.
            client: HTTP client to reuse for all requests.
            launcher: Performs process handoff; replaces the process when omitted.
            on_progress: Receives (received, total) while downloading packages.
            handoff_args: Arguments for the executable taking over; defaults to ours.

        Raises:
            InvalidVersionError: If ``version`` is not ``major.minor.patch``.
            VersionMismatchError: If the executable's filename encodes a different version.
        """
        self.name = name
        self.version = coerce_version(version)
        self.publishing_url = publishing_url
        self.context = context or RuntimeContext.current()
        self.config = config or ReactorConfig.from_env()
        self._client = client
        self._launcher = launcher or ProcessLauncher(windows=self.context.is_windows)
        self._on_progress = on_progress
        self._handoff_args = handoff_args

        file_version = parse_build_version(name, self.context.executable_path.name, self.context)
        if file_version is not None and file_version != self.version:
            raise VersionMismatchError(str(self.version), str(file_version), self.context.executable_path)

    def oneclick(self) -> None:
        """Run promote, then check and apply, then promote again."""
        logger.info("starting checking update")
        self.self_update_if_available()
        self.check_update_and_update()
        self.self_update_if_available()
        logger.info("finished checking update")

    def self_update_if_available(self) -> PromotionResult:
        """Run a self-promotion pass, handing off to another executable if required.

        Returns:
            The pass result when the current process keeps running. When a
            handoff is required this call does not return.
        """
        if self.config.promotion_delay > 0:
            time.sleep(self.config.promotion_delay)
        result = self.promote()
        if isinstance(result, Handoff):
            self._launcher.transfer(result.path, self._handoff_args)
        return result

    def promote(self) -> PromotionResult:
        """Run a self-promotion pass without transferring control."""
        engine = SelfPromotionEngine(
            self.name,
            self.version,
            self.context,
            LocalVersionScanner(self.name, self.context),
        )
        return engine.run()

    def check_update(self) -> CheckUpdateResult:
        return self._checker().check_update()

    def check_update_and_update(self) -> CheckUpdateResult:
        """Check the publisher and apply the package when it is newer."""
        result = self.check_update()
        if result.update_available and result.manifest is not None:
            self.update(result.manifest)
        else:
            logger.info("%s is up to date", self.name)
        return result

    def update(self, manifest: PackageManifest) -> None:
        """Download and install ``manifest``'s package into the install directory."""
        PackageApplier(
            self.name,
            self.context,
            client=self._client,
            config=self.config,
            on_progress=self._on_progress,
        ).apply(manifest)

    def _checker(self) -> RemoteUpdateChecker:
        return RemoteUpdateChecker(
            self.version,
            self.publishing_url,
            client=self._client,
            config=self.config,
        )


class ReactorBuilder:
    """Fluent construction of a :class:`Reactor`."""

    def __init__(self) -> None:
        self._name: str | None = None
        self._version: VersionTag | None = None
        self._publishing_url: str | None = None
        self._options: dict = {}

    def name(self, name: str) -> "ReactorBuilder":
        self._name = name
        return self

    def version(self, version: str | VersionTag) -> "ReactorBuilder":
        self._version = coerce_version(version)
        return self

    def publishing_url(self, publishing_url: str) -> "ReactorBuilder":
        self._publishing_url = publishing_url
        return self

    def context(self, context: RuntimeContext) -> "ReactorBuilder":
        self._options["context"] = context
        return self

    def config(self, config: ReactorConfig) -> "ReactorBuilder":
        self._options["config"] = config
        return self

    def client(self, client: httpx.Client) -> "ReactorBuilder":
        self._options["client"] = client
        return self

    def launcher(self, launcher: Launcher) -> "ReactorBuilder":
        self._options["launcher"] = launcher
        return self

    def on_progress(self, on_progress: ProgressCallback) -> "ReactorBuilder":
        self._options["on_progress"] = on_progress
        return self

    def handoff_args(self, handoff_args: Sequence[str]) -> "ReactorBuilder":
        self._options["handoff_args"] = list(handoff_args)
        return self

    def finish(self) -> Reactor:
        missing = [
            field
            for field, value in (
                ("name", self._name),
                ("version", self._version),
                ("publishing_url", self._publishing_url),
            )
            if value is None
        ]
        if missing:
            raise ReactorError(f"cannot build reactor, missing: {', '.join(missing)}")
        return Reactor(self._name, self._version, self._publishing_url, **self._options)  # type: ignore[arg-type]
