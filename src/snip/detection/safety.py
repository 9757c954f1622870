"""
Danger classifier for snippet content.

A line-oriented pattern scan that flags common catastrophic shell idioms
(recursive deletes, raw disk writes, fork bombs, piping downloads into a
shell, ...). It is a speed bump before execution, not a sandbox: false
negatives are expected.
"""

import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from loguru import logger
from rich.console import Console, Group
from rich.panel import Panel
from rich.prompt import Prompt
from rich.text import Text

from snip.taxonomy import DangerCategory

_console = Console(stderr=True)

# Both orders of -r and -f inside a single short-option cluster (-rf, -fr, -Rfv, ...)
_RF = r"-[a-z]*(?:r[a-z]*f|f[a-z]*r)[a-z]*"
_SHELL_SINK = r"\|\s*(?:sudo\s+)?(?:ba|z|k|da)?sh\b"


class DangerClassifier:
    """Flags content matching any rule of an ordered, case-insensitive pattern table."""

    PATTERNS: List[Tuple[str, str, DangerCategory]] = [
        # Deletes
        (rf"\bsudo\s+rm\s+{_RF}\s+", "sudo_rm_rf", DangerCategory.PRIVILEGED_DELETE),
        (rf"\brm\s+{_RF}\s+[~/]", "rm_rf_root_or_home", DangerCategory.DESTRUCTIVE_DELETE),
        (rf"\brm\s+{_RF}\s+", "rm_rf", DangerCategory.DESTRUCTIVE_DELETE),
        (r"\brm\s+.*--no-preserve-root", "rm_no_preserve_root", DangerCategory.DESTRUCTIVE_DELETE),

        # Devices and disks
        (r":>\s*/", "truncate_root_path", DangerCategory.DEVICE_OVERWRITE),
        (r">\s*/dev/(?:sd|hd|vd|xvd|nvme|disk|mmcblk)", "overwrite_block_device", DangerCategory.DEVICE_OVERWRITE),
        (r"\bdd\s+.*\bof=/", "dd_to_device", DangerCategory.RAW_DISK_WRITE),
        (r"\bmkfs\b", "mkfs", DangerCategory.FILESYSTEM_FORMAT),

        # System state
        (r"\b(?:shutdown|reboot|poweroff)\b", "shutdown_reboot", DangerCategory.POWER_STATE),
        (r"(\w+|:)\s*\(\s*\)\s*\{\s*\1\s*\|\s*\1\s*&\s*\}\s*;", "fork_bomb", DangerCategory.FORK_BOMB),
        (r"\b(?:killall|pkill)\s+-(?:9|kill)\b", "force_kill_all", DangerCategory.PROCESS_KILL),
        (r"\bkill\s+-(?:9|kill)\s+-1\b", "kill_every_process", DangerCategory.PROCESS_KILL),

        # Accounts
        (r"(?:^\s*|[;&|(]\s*|\bsudo\s+)(?:g|ch)?passwd\b", "passwd_command", DangerCategory.ACCOUNT_MUTATION),
        (r"\b(?:userdel|groupdel|usermod|groupmod)\b", "account_command", DangerCategory.ACCOUNT_MUTATION),
        (r">>?\s*/etc/(?:passwd|shadow|group|gshadow|sudoers)\b", "account_file_write", DangerCategory.ACCOUNT_MUTATION),

        # Containers and databases
        (r"\bdocker\s+(?:container\s+)?rm\s+(?:\S+\s+)*?(?:-[a-z]*f[a-z]*|--force)\b", "docker_rm_force", DangerCategory.CONTAINER_REMOVAL),
        (r"\bdrop\s+(?:table|database)\b", "drop_table", DangerCategory.DESTRUCTIVE_SQL),

        # Permissions
        (r"\bchmod\s+(?:-[a-z]+\s+)*(?:0?777|[ugoa]*\+rwx)\s+/", "chmod_777_absolute", DangerCategory.PERMISSION_WIDENING),

        # Remote code piped into a shell
        (rf"\bcurl\b.*{_SHELL_SINK}", "curl_pipe_shell", DangerCategory.REMOTE_CODE_PIPE),
        (rf"\bwget\b.*{_SHELL_SINK}", "wget_pipe_shell", DangerCategory.REMOTE_CODE_PIPE),
        (rf"\bbase64\s+(?:-d|--decode)\b.*{_SHELL_SINK}", "base64_pipe_shell", DangerCategory.REMOTE_CODE_PIPE),
        (r"\beval\s*[\"']?\$\s*\(", "eval_command_substitution", DangerCategory.DYNAMIC_EVAL),
    ]

    _COMPILED: List[Tuple[re.Pattern, str, DangerCategory]] = [
        (re.compile(pattern, re.IGNORECASE), name, category)
        for pattern, name, category in PATTERNS
    ]

    def detect(self, content: Optional[str]) -> List[Dict[str, Any]]:
        """Report every rule hit, line by line."""
        findings = []
        if not content:
            return findings

        for line_number, line in enumerate(content.splitlines(), start=1):
            for regex, name, category in self._COMPILED:
                match = regex.search(line)
                if match:
                    findings.append({
                        "pattern": name,
                        "category": category.value,
                        "match": match.group(),
                        "line": line_number,
                    })
        return findings

    def is_dangerous(self, content: Optional[str]) -> bool:
        if not content:
            return False

        for line in content.splitlines():
            for regex, name, _ in self._COMPILED:
                if regex.search(line):
                    logger.debug(f"Dangerous pattern {name} matched: {line.strip()[:80]}")
                    return True
        return False


_classifier = DangerClassifier()


def is_dangerous(content: Optional[str]) -> bool:
    """True if any line of ``content`` matches a destructive pattern."""
    return _classifier.is_dangerous(content)


def find_dangerous_lines(content: Optional[str]) -> List[Dict[str, Any]]:
    """Every rule hit in ``content`` as ``{pattern, category, match, line}`` dicts."""
    return _classifier.detect(content)


def _ask_confirmation(console: Console) -> str:
    try:
        return Prompt.ask(
            '  Type "yes" to confirm execution (anything else aborts)',
            console=console,
            default="",
            show_default=False,
        )
    except EOFError:
        # Closed stdin counts as no answer
        return ""


def confirm_dangerous(
    content: str,
    ask: Optional[Callable[[], str]] = None,
    console: Optional[Console] = None,
    preview_lines: int = 5,
) -> bool:
    """
    Interactive gate for flagged content.

    Shows a boxed warning and a short preview, then requires the user to type
    ``yes``. Any other answer, including an empty one, aborts.

    Returns:
        True only if the user typed "yes" (case-insensitive)
    """
    console = console or _console
    preview = "\n".join(content.splitlines()[:preview_lines])

    console.print()
    console.print(Panel(
        Group(
            Text("This snippet contains potentially destructive commands.\n"),
            Text("Preview:", style="bold"),
            Text(preview, style="dim"),
        ),
        title="[bold red]DANGEROUS COMMAND DETECTED[/bold red]",
        border_style="red",
        expand=False,
    ))

    answer = ask() if ask else _ask_confirmation(console)
    confirmed = (answer or "").strip().lower() == "yes"
    logger.debug(f"Dangerous snippet confirmation: {'accepted' if confirmed else 'declined'}")
    return confirmed
