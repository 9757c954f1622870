"""
Detection module exports.
"""

from snip.detection.safety import (
    DangerClassifier,
    confirm_dangerous,
    find_dangerous_lines,
    is_dangerous,
)

__all__ = [
    "DangerClassifier",
    "confirm_dangerous",
    "find_dangerous_lines",
    "is_dangerous",
]
