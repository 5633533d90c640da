# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Global pytest configuration and fixtures.

Tests never run the real iverilog/vvp/gtkwave. The RecordingDispatcher keeps
the real dispatch and file actions but replaces the external tools with
stand-ins that record the call and write their outputs. Every file the tests
produce gets an explicit modification time from a Clock, so staleness
decisions never depend on filesystem timestamp resolution.
"""

import io
import logging
import os
from pathlib import Path

import pytest
from rich.console import Console
from rich.logging import RichHandler

from simflow.core.exceptions import BuildError, SimulationError
from simflow.core.pipeline import Pipeline
from simflow.core.targets import ActionKind, BuildLayout, TargetGraph, UnitUnderTest
from simflow.platform import CommandDispatcher, PosixProfile

TESTBENCH = "counter/counter_tb"

TESTBENCH_SOURCE = """\
module counter_tb;
    initial begin
        $dumpfile(`DUMP_FILE);
        $dumpvars();
        #10 $finish;
    end
endmodule
"""

SECOND = 1_000_000_000

TOOL_ACTIONS = (
    ActionKind.COMPILE,
    ActionKind.SIMULATE,
    ActionKind.SIMULATE_INTERACTIVE,
    ActionKind.VIEW,
)


class Clock:
    """Monotonic fake time for file modification stamps (nanoseconds)."""

    def __init__(self, start: int = 1_700_000_000 * SECOND):
        self.now = start

    def tick(self) -> int:
        self.now += SECOND
        return self.now

    def touch(self, path: Path, content: str | None = None, mtime: int | None = None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        if content is not None:
            path.write_text(content)
        elif not path.exists():
            path.touch()
        stamp = self.tick() if mtime is None else mtime
        os.utime(path, ns=(stamp, stamp))
        return path


class RecordingDispatcher(CommandDispatcher):
    """CommandDispatcher whose external tools are simulated in-process.

    Attributes:
        actions: Every action kind run, in order
        write_dump: Whether the simulator stand-in writes the dump file
        fail: Tool action kinds that exit with status 1
        interrupt: Tool action kinds that raise KeyboardInterrupt
        image_mtime: Fixed mtime for compiled images (None = clock time)
    """

    def __init__(self, clock: Clock, dry_run: bool = False):
        super().__init__(PosixProfile(), console=Console(file=io.StringIO()), dry_run=dry_run)
        self.clock = clock
        self.actions: list[ActionKind] = []
        self.write_dump = True
        self.fail: set[ActionKind] = set()
        self.interrupt: set[ActionKind] = set()
        self.image_mtime: int | None = None

    @property
    def tools_run(self) -> list[ActionKind]:
        return [kind for kind in self.actions if kind in TOOL_ACTIONS]

    @property
    def output(self) -> str:
        return self.console.file.getvalue()

    def run(self, action):
        self.actions.append(action.kind)
        super().run(action)

    def _tool(self, kind: ActionKind, error_cls=SimulationError) -> bool:
        if self.dry_run:
            return False
        if kind in self.interrupt:
            raise KeyboardInterrupt
        if kind in self.fail:
            raise error_cls(f"{kind.value} failed (exit code 1)", argv=[kind.value], returncode=1)
        return True

    def compile(self, source, image, dump, include_dir):
        if self._tool(ActionKind.COMPILE, BuildError):
            self.clock.touch(image, "image", mtime=self.image_mtime)

    def simulate(self, image, log):
        dump = image.with_suffix(".vcd")
        cut_short = ActionKind.SIMULATE in self.interrupt | self.fail
        if cut_short and not self.dry_run:
            # Partial dump from a run that was killed or crashed
            self.clock.touch(dump, "partial")
        if self._tool(ActionKind.SIMULATE):
            self.clock.touch(log, "log")
            if self.write_dump:
                self.clock.touch(dump, "dump")

    def simulate_interactive(self, image, log):
        if self._tool(ActionKind.SIMULATE_INTERACTIVE):
            self.clock.touch(log, "log")

    def view(self, dump):
        self._tool(ActionKind.VIEW)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove SIMFLOW_* variables so host settings never leak into tests."""
    for key in list(os.environ):
        if key.startswith("SIMFLOW_"):
            monkeypatch.delenv(key)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop the Rich handler and root level simflow installs, around each test."""
    root = logging.getLogger()
    level = root.level

    def drop_rich_handlers():
        for handler in root.handlers[:]:
            if isinstance(handler, RichHandler):
                root.removeHandler(handler)

    drop_rich_handlers()
    yield
    drop_rich_handlers()
    root.setLevel(level)


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def project(tmp_path, monkeypatch, clean_env, clock):
    """Temporary project with one testbench under source/, used as CWD."""
    clock.touch(tmp_path / "source" / f"{TESTBENCH}.v", TESTBENCH_SOURCE)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def layout(project):
    return BuildLayout(source_dir=project / "source", build_dir=project / "build")


@pytest.fixture
def unit():
    return UnitUnderTest.parse(TESTBENCH)


@pytest.fixture
def graph(unit, layout):
    return TargetGraph(unit, layout)


@pytest.fixture
def dispatcher(clock):
    return RecordingDispatcher(clock)


@pytest.fixture
def pipeline(graph, dispatcher):
    return Pipeline(graph, dispatcher)
