"""Template variable handling."""

from snip.templating.template import (
    TemplateVariable,
    extract_variables,
    has_variables,
    interpolate,
    prompt_and_interpolate,
)

__all__ = [
    "TemplateVariable",
    "extract_variables",
    "has_variables",
    "interpolate",
    "prompt_and_interpolate",
]
