"""
Shared vocabulary for snip.

This module defines the enumerations used across the execution, detection
and CLI layers: interpreter kinds, danger categories and the exit status
conventions surfaced to the shell.
"""

from enum import Enum, IntEnum


class RunnerKind(str, Enum):
    """Interpreter families a snippet can be executed with."""

    SHELL = "shell"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    PYTHON = "python"
    RUBY = "ruby"
    PHP = "php"
    PERL = "perl"
    POWERSHELL = "powershell"

    # Unrecognized language, executed with the fallback shell
    FALLBACK = "fallback"


class DangerCategory(str, Enum):
    """
    Categories of destructive idioms recognized by the danger classifier.

    Categories are informational only: the classifier verdict is a plain
    boolean and every category blocks execution the same way.
    """

    DESTRUCTIVE_DELETE = "destructive_delete"
    PRIVILEGED_DELETE = "privileged_delete"
    DEVICE_OVERWRITE = "device_overwrite"
    RAW_DISK_WRITE = "raw_disk_write"
    FILESYSTEM_FORMAT = "filesystem_format"
    POWER_STATE = "power_state"
    FORK_BOMB = "fork_bomb"
    ACCOUNT_MUTATION = "account_mutation"
    PROCESS_KILL = "process_kill"
    CONTAINER_REMOVAL = "container_removal"
    DESTRUCTIVE_SQL = "destructive_sql"
    PERMISSION_WIDENING = "permission_widening"
    REMOTE_CODE_PIPE = "remote_code_pipe"
    DYNAMIC_EVAL = "dynamic_eval"


class ExitStatus(IntEnum):
    """Process exit statuses reported by snip."""

    OK = 0
    FAILURE = 1         # Generic launch failure or aborted operation
    BLOCKED = 2         # Dangerous snippet intentionally not executed
    NOT_FOUND = 127     # Interpreter binary missing from PATH
    SIGINT = 130        # 128 + SIGINT
    SIGTERM = 143       # 128 + SIGTERM
