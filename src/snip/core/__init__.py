"""
Core module exports.
"""

from snip.core.snippet import Snippet
from snip.core.storage import JsonSnippetStore, SnippetStore
from snip.core.launcher import LaunchConfig, SnippetLauncher

__all__ = [
    "Snippet",
    "SnippetStore",
    "JsonSnippetStore",
    "LaunchConfig",
    "SnippetLauncher",
]
