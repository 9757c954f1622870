"""
Template engine for parameterized snippets.

Syntax:
    {{name}}            required variable, prompted for
    {{name:default}}    variable with a default value
    {{name:$ENV_VAR}}   default taken from the environment

Defaults may contain colons, so ``{{image:ubuntu:24.04}}`` keeps the
``ubuntu:24.04`` default intact.
"""

import os
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Union

from loguru import logger
from rich.console import Console
from rich.prompt import Prompt
from rich.text import Text

from snip.errors import RequiredVariableMissing

# Compiled once; re patterns keep no match cursor between calls
VARIABLE_PATTERN = re.compile(r"\{\{([A-Za-z_][A-Za-z0-9_]*)(?::([^}]*))?\}\}")

_console = Console(stderr=True)


@dataclass(frozen=True)
class LiteralDefault:
    """Default used verbatim."""

    text: str

    def resolve(self) -> str:
        return self.text


@dataclass(frozen=True)
class EnvDefault:
    """Default read from an environment variable (``$NAME`` syntax)."""

    name: str

    @property
    def text(self) -> str:
        return f"${self.name}"

    def resolve(self) -> str:
        # Unset or empty variables fall back to the literal "$NAME"
        return os.environ.get(self.name) or self.text


DefaultValue = Union[LiteralDefault, EnvDefault]


def parse_default(text: Optional[str]) -> Optional[DefaultValue]:
    if text is None:
        return None
    if text.startswith("$"):
        return EnvDefault(text[1:])
    return LiteralDefault(text)


@dataclass(frozen=True)
class TemplateVariable:
    """A ``{{name[:default]}}`` placeholder found in snippet content."""

    name: str
    default_value: Optional[str]
    raw: str

    @property
    def required(self) -> bool:
        return self.default_value is None


def extract_variables(content: Optional[str]) -> List[TemplateVariable]:
    """
    Extract template variables in order of first appearance.

    Variables are deduplicated by name; the first occurrence's default wins.
    ``$ENV`` defaults are resolved against the current environment.
    """
    if not content:
        return []

    seen = set()
    variables = []
    for match in VARIABLE_PATTERN.finditer(content):
        name = match.group(1)
        if name in seen:
            continue
        seen.add(name)

        default = parse_default(match.group(2))
        variables.append(TemplateVariable(
            name=name,
            default_value=default.resolve() if default else None,
            raw=match.group(0),
        ))
    return variables


def has_variables(content: Optional[str]) -> bool:
    if not content:
        return False
    return VARIABLE_PATTERN.search(content) is not None


def interpolate(content: Optional[str], values: Optional[Dict[str, str]] = None) -> str:
    """
    Substitute variables in ``content``.

    Each token takes, in order: a non-empty value from ``values``, its own
    default (resolving ``$ENV``), or is left untouched when neither exists.
    """
    if not content:
        return ""
    values = values or {}

    def replace(match: re.Match) -> str:
        name = match.group(1)
        value = values.get(name)
        if value:
            return value
        default = parse_default(match.group(2))
        if default is not None:
            return default.resolve()
        return match.group(0)

    return VARIABLE_PATTERN.sub(replace, content)


def _prompt_label(variable: TemplateVariable) -> str:
    if variable.default_value is not None:
        return f"  {variable.name} [{variable.default_value}]"
    return f"  {variable.name}"


def _ask_value(label: str) -> str:
    # Text keeps "[default]" from being parsed as console markup
    try:
        return Prompt.ask(Text(label), console=_console, default="", show_default=False)
    except EOFError:
        return ""


def prompt_and_interpolate(
    content: str,
    ask: Optional[Callable[[str], str]] = None,
    console: Optional[Console] = None,
) -> str:
    """
    Prompt for every variable in ``content`` and return the resolved text.

    An empty answer takes the variable's default. A required variable left
    empty is asked for once more; a second empty answer aborts.

    Raises:
        RequiredVariableMissing: a required variable was not provided
    """
    variables = extract_variables(content)
    if not variables:
        return content

    ask = ask or _ask_value
    console = console or _console
    values: Dict[str, str] = {}

    for variable in variables:
        label = _prompt_label(variable)
        answer = ask(label)

        if not (answer and answer.strip()) and variable.required:
            console.print(
                f'  ("{variable.name}" is required, enter a value or press Ctrl+C to abort)',
                markup=False,
            )
            answer = ask(label)
            if not (answer and answer.strip()):
                raise RequiredVariableMissing(variable.name)

        if answer and answer.strip():
            values[variable.name] = answer
        elif variable.default_value is not None:
            values[variable.name] = variable.default_value

    logger.debug(f"Resolved {len(values)} template variable(s)")
    return interpolate(content, values)
