"""Diagnostic channel

Human-readable notices go to stderr, never to stdout: stdout carries only
response lines.
"""

import sys
from typing import Any

PREFIX = "[plugin]"


def log(*parts: Any) -> None:
    """Print a prefixed notice to stderr immediately."""
    print(PREFIX, *parts, file=sys.stderr, flush=True)
