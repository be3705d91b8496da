"""Console utilities for safe character output.

This module provides utilities for handling console output with proper encoding.
"""
import sys
from typing import Any


def safe_echo(message: Any, **kwargs) -> None:
    """
    Print a message, degrading gracefully when the console cannot encode it.

    Args:
        message: message to print
        **kwargs: extra arguments passed to print
    """
    try:
        print(message, **kwargs)
    except UnicodeEncodeError:
        if isinstance(message, str):
            safe_message = message.encode("ascii", "replace").decode("ascii")
            print(f"[ENCODING_ISSUE] {safe_message}", **kwargs)
        else:
            print(f"[OUTPUT] {message!r}", **kwargs)


def echo_with_prefix(prefix: str, message: str) -> None:
    """Print a message tagged with a prefix such as CHECK or ERROR."""
    safe_echo(f"[{prefix}] {message}")


def setup_console_encoding() -> None:
    """Switch stdout/stderr to UTF-8 where the platform allows it."""
    if sys.platform != "win32":
        return

    for stream in (sys.stdout, sys.stderr):
        if hasattr(stream, "reconfigure"):
            stream.reconfigure(encoding="utf-8")
