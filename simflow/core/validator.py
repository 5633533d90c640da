# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

import logging
from enum import Enum
from pathlib import Path

from .exceptions import MissingArtifactError

logger = logging.getLogger(__name__)


class CheckResult(str, Enum):
    OK = "ok"
    MISSING = "missing"


class DumpValidator:
    """Confirm that a non-interactive simulation produced its waveform dump.

    A zero exit status from the simulator does not mean a dump was written:
    the testbench has to request one itself. Nothing is ever deleted here.
    """

    def __init__(self, dump_macro: str = "DUMP_FILE"):
        self.dump_macro = dump_macro

    def check(self, dump_path: Path) -> CheckResult:
        if dump_path.is_file():
            return CheckResult.OK
        return CheckResult.MISSING

    def require(self, dump_path: Path) -> None:
        """Raise MissingArtifactError if the dump was not generated."""
        if self.check(dump_path) is CheckResult.OK:
            logger.debug("Dump file present: %s", dump_path)
            return

        raise MissingArtifactError(
            f"Simulation did not generate dump file '{dump_path}'",
            details=[
                "Did you include the following at the start of the testbench's initial block?",
                f"    $dumpfile(`{self.dump_macro});",
                "    $dumpvars();",
            ],
        )
