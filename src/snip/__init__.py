"""
snip - A terminal snippet manager.

Stores small pieces of code tagged by language and labels, and runs them
through the matching interpreter behind template prompts and a danger gate.
"""

__version__ = "0.1.0"
__author__ = "snip contributors"

# Core components
from snip.core.snippet import Snippet
from snip.core.storage import JsonSnippetStore, SnippetStore
from snip.core.launcher import LaunchConfig, SnippetLauncher

# Taxonomy and errors
from snip.taxonomy import DangerCategory, ExitStatus, RunnerKind
from snip.errors import (
    SnipError,
    SnippetNotFound,
    EmptySnippet,
    InterpreterNotFound,
    SpawnFailure,
    DangerousContentBlocked,
    RequiredVariableMissing,
)

# Execution
from snip.execution.runners import Runner, resolve_runner
from snip.execution.engine import run_snippet_content

# Safety
from snip.detection.safety import DangerClassifier, is_dangerous, confirm_dangerous

# Templates
from snip.templating.template import (
    TemplateVariable,
    extract_variables,
    has_variables,
    interpolate,
    prompt_and_interpolate,
)

# Configuration
from snip.config import Settings, get_settings

__all__ = [
    # Version
    "__version__",

    # Core
    "Snippet",
    "SnippetStore",
    "JsonSnippetStore",
    "LaunchConfig",
    "SnippetLauncher",

    # Taxonomy and errors
    "DangerCategory",
    "ExitStatus",
    "RunnerKind",
    "SnipError",
    "SnippetNotFound",
    "EmptySnippet",
    "InterpreterNotFound",
    "SpawnFailure",
    "DangerousContentBlocked",
    "RequiredVariableMissing",

    # Execution
    "Runner",
    "resolve_runner",
    "run_snippet_content",

    # Safety
    "DangerClassifier",
    "is_dangerous",
    "confirm_dangerous",

    # Templates
    "TemplateVariable",
    "extract_variables",
    "has_variables",
    "interpolate",
    "prompt_and_interpolate",

    # Config
    "Settings",
    "get_settings",
]
