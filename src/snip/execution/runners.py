"""
Runner resolution: map a snippet's declared language to an interpreter.

Lookup is an exact match on the normalized language tag. Anything that is
not recognized degrades to shell execution instead of failing.
"""

import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from loguru import logger

from snip.taxonomy import RunnerKind


SHELLS = ("sh", "bash", "zsh", "ksh", "fish")

# alias -> (command, extension, kind)
RUNNER_TABLE: Dict[str, Tuple[str, str, RunnerKind]] = {
    **{shell: (shell, shell, RunnerKind.SHELL) for shell in SHELLS},
    "js": ("node", "js", RunnerKind.JAVASCRIPT),
    "javascript": ("node", "js", RunnerKind.JAVASCRIPT),
    "node": ("node", "js", RunnerKind.JAVASCRIPT),
    "mjs": ("node", "js", RunnerKind.JAVASCRIPT),
    "cjs": ("node", "js", RunnerKind.JAVASCRIPT),
    "ts": ("tsx", "ts", RunnerKind.TYPESCRIPT),
    "typescript": ("tsx", "ts", RunnerKind.TYPESCRIPT),
    "tsx": ("tsx", "ts", RunnerKind.TYPESCRIPT),
    "python": ("python3", "py", RunnerKind.PYTHON),
    "py": ("python3", "py", RunnerKind.PYTHON),
    "ruby": ("ruby", "rb", RunnerKind.RUBY),
    "rb": ("ruby", "rb", RunnerKind.RUBY),
    "php": ("php", "php", RunnerKind.PHP),
    "perl": ("perl", "pl", RunnerKind.PERL),
    "pl": ("perl", "pl", RunnerKind.PERL),
    "powershell": ("pwsh", "ps1", RunnerKind.POWERSHELL),
    "ps1": ("pwsh", "ps1", RunnerKind.POWERSHELL),
}


@dataclass(frozen=True)
class Runner:
    """Interpreter command and file extension used to execute a snippet."""

    command: str
    extension: str
    kind: RunnerKind
    requested: Optional[str] = None  # unrecognized language, for fallback runners

    @property
    def label(self) -> str:
        if self.kind == RunnerKind.FALLBACK:
            return f"fallback({self.requested})"
        return self.kind.value

    @property
    def is_fallback(self) -> bool:
        return self.kind == RunnerKind.FALLBACK


def normalize_language(language: Optional[str]) -> str:
    return str(language or "").strip().lower()


def supported_languages() -> List[str]:
    """All recognized language aliases."""
    return sorted(RUNNER_TABLE)


def resolve_runner(language: Optional[str], shell: Optional[str] = None) -> Runner:
    """
    Resolve the interpreter for a language tag.

    Args:
        language: Declared snippet language (case and surrounding whitespace ignored)
        shell: Fallback shell for unknown languages; defaults to $SHELL, then ``sh``

    Returns:
        A usable Runner. Never raises.
    """
    lang = normalize_language(language)

    if lang in RUNNER_TABLE:
        command, extension, kind = RUNNER_TABLE[lang]
        return Runner(command=command, extension=extension, kind=kind)

    command = shell or os.environ.get("SHELL") or "sh"
    if not lang:
        return Runner(command=command, extension="sh", kind=RunnerKind.SHELL)

    logger.debug(f"Unknown language {lang!r}, falling back to {command}")
    return Runner(command=command, extension="sh", kind=RunnerKind.FALLBACK, requested=lang)
