# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Root logger setup for simflow.

Modules log through ``logging.getLogger(__name__)``; the CLI calls
:func:`setup_logging` once the verbosity is known. Records are rendered by
Rich on stderr, without time or path columns, so they sit cleanly next to
the tool output echoed on stdout.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

# CLI verbosity names and plain level names both map onto stdlib levels
LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "verbose": logging.INFO,
    "debug": logging.DEBUG,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
}


def _make_handler(level: int) -> logging.Handler:
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=level <= logging.DEBUG,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def setup_logging(level: str = "normal") -> None:
    """Set the root level, installing the Rich handler on first use.

    Unknown names fall back to WARNING. Repeat calls only change levels.
    """
    numeric = LEVELS.get(level.lower(), logging.WARNING)
    root = logging.getLogger()

    # Handlers owned by others (pytest capture, embedding apps) are left alone
    ours = [h for h in root.handlers if isinstance(h, RichHandler)]
    if not ours:
        ours = [_make_handler(numeric)]
        root.addHandler(ours[0])

    root.setLevel(numeric)
    for handler in ours:
        handler.setLevel(numeric)
