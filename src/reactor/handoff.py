"""Transferring control to another executable.

On POSIX the process image is replaced in place with ``os.execv`` so only
the target keeps running. On Windows, where there is no exec, the target is
spawned detached and the current process exits immediately.
"""

import logging
import os
import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any, NoReturn, Protocol

from reactor.errors import FileOperationError

logger = logging.getLogger(__name__)


class Launcher(Protocol):
    """Protocol describing how the orchestrator hands off to an executable."""

    def transfer(self, path: Path, args: Sequence[str] | None = None) -> NoReturn:
        """Start ``path`` in place of the current process. Never returns."""


class ProcessLauncher:
    """Replace or restart the current process with another executable."""

    def __init__(self, *, windows: bool | None = None):
        self._windows = os.name == "nt" if windows is None else windows

    def transfer(self, path: Path, args: Sequence[str] | None = None) -> NoReturn:
        """Run ``path`` with ``args`` (default: this process's arguments) and stop.

        Args:
            path: Executable to hand off to.
            args: Command line arguments for the target, excluding argv[0].

        Raises:
            FileOperationError: If the target could not be started at all.
        """
        if args is None:
            args = sys.argv[1:]
        target = str(path.resolve())
        argv = [target, *args]
        logger.info("Handing off to %s", target)

        if not self._windows:
            _flush_output()
            try:
                os.execv(target, argv)
            except OSError as err:
                # Fall back to spawning when exec is refused
                logger.debug("Failed to exec %s, falling back to spawn: %s: %s", target, type(err).__name__, err)

        self._spawn(argv, Path(target))
        logging.shutdown()
        _flush_output()
        os._exit(0)

    def _spawn(self, argv: list[str], target: Path) -> None:
        popen_kwargs: dict[str, Any] = {
            "cwd": str(target.parent),
            "stdin": subprocess.DEVNULL,
        }
        if self._windows:
            popen_kwargs["creationflags"] = getattr(subprocess, "DETACHED_PROCESS", 0) | getattr(
                subprocess, "CREATE_NEW_PROCESS_GROUP", 0
            )
        else:
            popen_kwargs["start_new_session"] = True
        try:
            subprocess.Popen(argv, **popen_kwargs)
        except OSError as err:
            raise FileOperationError("failed to start executable", target) from err


def _flush_output() -> None:
    # Neither exec nor _exit flushes Python-level buffers
    for handler in logging.getLogger().handlers:
        handler.flush()
    for stream in (sys.stdout, sys.stderr):
        if stream is not None:
            stream.flush()
