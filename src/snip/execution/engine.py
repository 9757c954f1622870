"""
Snippet execution engine.

Materializes snippet content into a private temporary file, runs it with the
resolved interpreter and maps the outcome to a process exit status.

The temporary directory lives only for the duration of the interpreter call.
It is tracked in a single-slot registry so that the SIGINT/SIGTERM handlers
can remove it if the user interrupts a running snippet.
"""

import os
import shutil
import signal
import subprocess
import sys
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, List, Optional

import click
from loguru import logger

from snip.errors import InterpreterNotFound, SnipError, SpawnFailure
from snip.execution.runners import Runner, resolve_runner
from snip.taxonomy import ExitStatus

DRY_RUN_MARKER = "--- DRY RUN ---"
TEMP_PREFIX = "snip-"

# Launches ``argv`` with inherited stdio and returns an object with ``returncode``.
# Raises OSError (FileNotFoundError for a missing binary) when it cannot spawn.
Spawner = Callable[[List[str]], Any]


def default_spawn(argv: List[str]) -> subprocess.CompletedProcess:
    """Run ``argv`` attached to the caller's terminal and wait for it."""
    return subprocess.run(argv, check=False)


class TempDirRegistry:
    """
    Single slot holding the currently live execution directory.

    Shared between the main flow and the signal handlers. The lock is
    re-entrant because handlers run on the main thread, possibly while the
    main flow already holds it.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._path: Optional[Path] = None

    @property
    def active(self) -> Optional[Path]:
        with self._lock:
            return self._path

    def register(self, path: Path) -> None:
        with self._lock:
            self._path = Path(path)

    def clear(self) -> Optional[Path]:
        """Forget the live directory without touching the filesystem."""
        with self._lock:
            path, self._path = self._path, None
            return path

    def cleanup(self) -> None:
        """Remove the live directory, if any. Safe to call repeatedly."""
        path = self.clear()
        if path is not None:
            shutil.rmtree(path, ignore_errors=True)
            logger.debug(f"Removed execution directory {path}")


active_tempdir = TempDirRegistry()

_handlers_installed = False


def _handle_signal(signum: int, frame: Any) -> None:
    active_tempdir.cleanup()
    sys.exit(128 + signum)


def install_signal_handlers() -> bool:
    """
    Install SIGINT/SIGTERM cleanup handlers once per process.

    Handlers can only be installed from the main thread; elsewhere this is a
    no-op and the scoped cleanup in run_snippet_content still applies.

    Returns:
        True if the handlers are in place
    """
    global _handlers_installed
    if _handlers_installed:
        return True
    if threading.current_thread() is not threading.main_thread():
        logger.debug("Not on the main thread, signal cleanup handlers not installed")
        return False

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)
    _handlers_installed = True
    return True


def _write_script(directory: Path, runner: Runner, content: str) -> Path:
    path = directory / f"snippet.{runner.extension}"
    # Owner-only from creation: the content may hold secrets
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o700)
    with os.fdopen(fd, "w", encoding="utf-8") as fh:
        fh.write(content)
    return path


def _report(error: SnipError) -> int:
    click.echo(str(error), err=True)
    return error.exit_code


def run_snippet_content(
    content: str,
    dry_run: bool = False,
    language: Optional[str] = None,
    shell: Optional[str] = None,
    spawn: Optional[Spawner] = None,
) -> int:
    """
    Execute snippet content with the interpreter for its language.

    Args:
        content: Snippet text, already interpolated
        dry_run: Print the content instead of running it
        language: Declared snippet language
        shell: Fallback shell for unrecognized languages
        spawn: Process launcher, defaults to :func:`default_spawn`

    Returns:
        0 on success, 127 if the interpreter is missing, 1 on other launch
        failures, otherwise the interpreter's own exit status
    """
    if dry_run:
        click.echo(DRY_RUN_MARKER)
        click.echo(content)
        return ExitStatus.OK

    runner = resolve_runner(language, shell)
    spawn = spawn or default_spawn
    install_signal_handlers()

    directory = Path(tempfile.mkdtemp(prefix=TEMP_PREFIX))
    active_tempdir.register(directory)
    try:
        script = _write_script(directory, runner, content)
        logger.debug(f"Running {runner.label} snippet via {runner.command} ({script})")

        try:
            result = spawn([runner.command, str(script)])
        except FileNotFoundError:
            return _report(InterpreterNotFound(runner.command, language))
        except OSError as e:
            return _report(SpawnFailure(e.strerror or str(e)))

        status = result.returncode
        if status is None:
            return ExitStatus.OK
        if status < 0:
            # Killed by a signal; report it the way shells do
            return 128 + abs(status)
        return status
    finally:
        active_tempdir.clear()
        shutil.rmtree(directory, ignore_errors=True)
