"""Applying a published package to the installation directory.

The update flow is:
1. Stream the package archive next to the installation
2. Clear any staging directory left behind by an earlier failed attempt
3. Extract the archive into the staging directory
4. Merge the staged files into the installation root
5. Remove the staging directory and the archive

Each step completes before the next one starts and none is retried. The
running executable is never overwritten by the merge; new builds arrive as
``<name>-<version>`` siblings and take over through self-promotion.
"""

import logging
import shutil
import zipfile
import zlib
from collections.abc import Callable
from pathlib import Path, PurePosixPath, PureWindowsPath

import httpx
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

from reactor.config import ReactorConfig
from reactor.context import RuntimeContext
from reactor.errors import ArchiveError, FileOperationError, NetworkError
from reactor.models import PackageManifest
from reactor.transport import client_session

logger = logging.getLogger(__name__)

# Called with (bytes received, expected total or None when unknown)
ProgressCallback = Callable[[int, int | None], None]


def _content_length(response: httpx.Response) -> int | None:
    raw = response.headers.get("Content-Length")
    if raw is None:
        return None
    try:
        size = int(raw)
    except ValueError:
        return None
    return size if size > 0 else None


def _is_unsafe_name(name: str) -> bool:
    posix = PurePosixPath(name)
    windows = PureWindowsPath(name)
    return posix.is_absolute() or windows.is_absolute() or bool(windows.drive)


class PackageApplier:
    """Download, extract and merge a release package into the install root."""

    def __init__(
        self,
        name: str,
        context: RuntimeContext,
        client: httpx.Client | None = None,
        config: ReactorConfig | None = None,
        on_progress: ProgressCallback | None = None,
    ):
        self.name = name
        self.context = context
        self._client = client
        self._config = config or ReactorConfig()
        self._on_progress = on_progress

    @property
    def install_dir(self) -> Path:
        return self.context.install_dir

    @property
    def archive_path(self) -> Path:
        return self.install_dir / f".{self.name}.update.zip"

    @property
    def staging_dir(self) -> Path:
        return self.install_dir / f".{self.name}.update"

    def apply(self, manifest: PackageManifest) -> None:
        """Install the package described by ``manifest``.

        Raises:
            NetworkError: If the archive cannot be downloaded.
            ArchiveError: If the archive is corrupt or contains unsafe paths.
            FileOperationError: If any filesystem step fails.
        """
        logger.info("Applying version %s from %s", manifest.version, manifest.download_url)
        # The manifest hash is informational only; content is not verified against it
        logger.debug("Manifest hash for %s: %s", manifest.version, manifest.hash)

        self.download(manifest.download_url, self.archive_path)

        staging = self.staging_dir
        if staging.exists():
            logger.debug("Clearing leftover staging directory %s", staging)
            try:
                shutil.rmtree(staging)
            except OSError as err:
                raise FileOperationError("failed to clear staging directory", staging) from err

        self.extract(self.archive_path, staging)
        logger.info("extracted remote package")

        self.merge(staging, self.install_dir)
        logger.info("replaced old data with new data")

        self.cleanup()
        logger.info("finish file updates")

    def download(self, url: str, destination: Path) -> None:
        """Stream ``url`` to ``destination`` while reporting progress."""
        logger.debug("start downloading file from %s to %s", url, destination)
        try:
            with client_session(self._client, self._config) as client, client.stream("GET", url) as response:
                if not response.is_success:
                    raise NetworkError(
                        f"request failed with status: {response.status_code}",
                        status_code=response.status_code,
                    )
                self._write_stream(response, destination)
        except httpx.HTTPError as err:
            raise NetworkError(f"{type(err).__name__}: {err}") from err

    def _write_stream(self, response: httpx.Response, destination: Path) -> None:
        total = _content_length(response)
        received = 0
        try:
            target = destination.open("wb")
        except OSError as err:
            raise FileOperationError("failed to create file", destination) from err

        progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            disable=not self._config.show_progress,
            transient=True,
        )
        with target, progress:
            task = progress.add_task(f"{self.name} update", total=total)
            for chunk in response.iter_bytes(self._config.chunk_size):
                try:
                    target.write(chunk)
                except OSError as err:
                    raise FileOperationError("failed to write file", destination) from err
                received += len(chunk)
                if total is not None:
                    received = min(received, total)
                progress.update(task, completed=received)
                if self._on_progress is not None:
                    self._on_progress(received, total)
        logger.debug("Downloaded %d bytes to %s", received, destination)

    def extract(self, archive_path: Path, staging: Path) -> None:
        """Extract ``archive_path`` into ``staging``.

        All entries are validated before anything is written, so an archive
        with a single unsafe entry leaves nothing behind.
        """
        try:
            staging.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            raise FileOperationError("failed to create directories", staging) from err

        try:
            archive = zipfile.ZipFile(archive_path)
        except zipfile.BadZipFile as err:
            raise ArchiveError(f"failed to extract data: {archive_path.name} is not a zip archive") from err
        except OSError as err:
            raise FileOperationError("failed to open downloaded file", archive_path) from err

        with archive:
            plan = self._plan_extraction(archive, staging.resolve())
            for member, destination in plan:
                try:
                    destination.parent.mkdir(parents=True, exist_ok=True)
                except OSError as err:
                    raise FileOperationError("failed to extract directories", destination.parent) from err
                try:
                    with archive.open(member) as source, destination.open("wb") as target:
                        shutil.copyfileobj(source, target)
                except (zipfile.BadZipFile, zlib.error) as err:
                    raise ArchiveError(f"failed to extract data: corrupt entry {member.filename}") from err
                except OSError as err:
                    raise FileOperationError("failed to extract file", destination) from err
                logger.debug("unzipped %s", destination)

    def _plan_extraction(
        self, archive: zipfile.ZipFile, root: Path
    ) -> list[tuple[zipfile.ZipInfo, Path]]:
        plan: list[tuple[zipfile.ZipInfo, Path]] = []
        for member in archive.infolist():
            name = member.filename
            if not name or member.is_dir():
                continue
            if _is_unsafe_name(name):
                raise ArchiveError(f"archive entry {name!r} is an absolute path")
            destination = (root / name).resolve()
            if destination == root or not destination.is_relative_to(root):
                raise ArchiveError(f"archive entry {name!r} escapes the staging directory")
            plan.append((member, destination))
        return plan

    def merge(self, staging: Path, root: Path) -> None:
        """Copy every staged file into ``root``, overwriting existing files.

        Directories present in ``root`` but absent from ``staging`` are left
        alone.
        """
        running = self.context.executable_path.resolve()
        try:
            sources = sorted(path for path in staging.rglob("*") if path.is_file())
        except OSError as err:
            raise FileOperationError("failed to read staging directory", staging) from err

        for source in sources:
            relative = source.relative_to(staging)
            target = root / relative
            if target.resolve() == running:
                logger.warning("Skipping %s: it is the running executable", target)
                continue
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
            except OSError as err:
                raise FileOperationError("failed to create directories", target.parent) from err
            try:
                shutil.copy2(source, target)
            except OSError as err:
                raise FileOperationError("failed to copy file", target) from err
            logger.debug("copy: %s -> %s", source, target)

    def cleanup(self) -> None:
        """Remove the staging directory and the downloaded archive."""
        try:
            shutil.rmtree(self.staging_dir)
        except FileNotFoundError:
            pass
        except OSError as err:
            raise FileOperationError("failed to remove staging directory", self.staging_dir) from err
        try:
            self.archive_path.unlink(missing_ok=True)
        except OSError as err:
            raise FileOperationError("failed to remove temp file", self.archive_path) from err
