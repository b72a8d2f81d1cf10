"""Console output helpers shared by the renderer and the CLIs."""

from __future__ import annotations

import sys

VERBOSE = False


def set_verbose(enabled: bool) -> None:
    global VERBOSE
    VERBOSE = bool(enabled)


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


def error(message: str) -> None:
    print(message, file=sys.stderr)
