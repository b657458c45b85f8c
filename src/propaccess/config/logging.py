"""Logging setup for the propaccess command line."""

from __future__ import annotations

import logging
import sys


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Send log records to stderr so stdout only carries resolved values.

    ``force=True`` replaces handlers installed by an earlier call, which is how
    ``--verbose`` switches to DEBUG after the defaults were applied.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
        force=force,
    )
