"""
Utility functions for sidekick.
"""
import json
import sys
from typing import Any


def truncate_string(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    Truncate a string to a maximum length.

    Args:
        text: The string to truncate
        max_length: Maximum length of the output string
        suffix: Suffix to append when truncating

    Returns:
        Truncated string
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix


def format_arguments(arguments: Any) -> str:
    """Render tool arguments compactly for display."""
    try:
        return json.dumps(arguments, ensure_ascii=False, sort_keys=True)
    except (TypeError, ValueError):
        return repr(arguments)


def is_windows() -> bool:
    """Check if running on Windows."""
    return sys.platform == 'win32'
