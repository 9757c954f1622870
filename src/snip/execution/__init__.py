"""
Execution module exports.
"""

from snip.execution.runners import Runner, normalize_language, resolve_runner, supported_languages
from snip.execution.engine import (
    DRY_RUN_MARKER,
    TempDirRegistry,
    active_tempdir,
    install_signal_handlers,
    run_snippet_content,
)

__all__ = [
    "Runner",
    "normalize_language",
    "resolve_runner",
    "supported_languages",
    "DRY_RUN_MARKER",
    "TempDirRegistry",
    "active_tempdir",
    "install_signal_handlers",
    "run_snippet_content",
]
