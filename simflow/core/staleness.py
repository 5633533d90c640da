# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Staleness decisions for a resolved target chain.

Two passes: TargetGraph materializes the chain, then StalenessResolver walks
it upstream-first. A link is stale when its output is missing or not strictly
newer than its dependency's output. Once a link is stale, every link below it
is stale too, regardless of what its own timestamps say; a fast rebuild can
leave an intermediate artifact with a timestamp equal to or older than the
downstream output.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from .targets import Target, TargetKind

logger = logging.getLogger(__name__)


def _mtime_ns(path: Path) -> Optional[int]:
    try:
        return path.stat().st_mtime_ns
    except FileNotFoundError:
        return None


class StalenessResolver:
    """Decide which links of a chain must have their recipes run."""

    def is_stale(self, target: Target) -> bool:
        """Check a single link against its direct dependency only."""
        if target.phony:
            return True

        if target.kind is TargetKind.CLEAN:
            return target.output.exists()

        output_time = _mtime_ns(target.output)
        if output_time is None:
            logger.debug("%s: output %s missing", target.kind.value, target.output)
            return True

        dependency = target.dependency_output
        if dependency is None:
            return False

        dependency_time = _mtime_ns(dependency)
        if dependency_time is None:
            logger.debug("%s: dependency %s missing", target.kind.value, dependency)
            return True

        # Ties count as stale: coarse filesystem timestamps make equal times
        # plausible on back-to-back builds.
        if dependency_time >= output_time:
            logger.debug(
                "%s: dependency %s is not older than %s",
                target.kind.value, dependency, target.output
            )
            return True

        return False

    def plan(self, chain: Iterable[Target]) -> List[Target]:
        """Return the links to execute, upstream recipes first."""
        plan: List[Target] = []
        ancestor_stale = False

        for target in chain:
            if ancestor_stale:
                logger.debug("%s: stale because an upstream link is rebuilt", target.kind.value)
                plan.append(target)
            elif self.is_stale(target):
                plan.append(target)
                ancestor_stale = True
            else:
                logger.debug("%s: up to date", target.kind.value)

        return plan
