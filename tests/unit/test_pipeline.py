# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Pipeline operations end to end, with the external tools stubbed out."""

import pytest

from simflow.core.exceptions import BuildError, MissingArtifactError, SimulationError
from simflow.core.pipeline import Pipeline, build_pipeline
from simflow.core.targets import ActionKind, TargetKind
from simflow.settings import load_config, resolve_unit

from tests.conftest import TESTBENCH, RecordingDispatcher

COMPILE = ActionKind.COMPILE
SIMULATE = ActionKind.SIMULATE


# ---------------------------------------------------------------------------
# compile
# ---------------------------------------------------------------------------

def test_first_compile_runs_compiler_once(pipeline, dispatcher, graph):
    result = pipeline.compile()

    assert dispatcher.tools_run == [COMPILE]
    assert result.executed == [TargetKind.COMPILED_IMAGE]
    assert graph.image.output.is_file()


def test_compile_creates_output_directory(pipeline, graph):
    assert not graph.image.output.parent.exists()
    pipeline.compile()
    assert graph.image.output.parent.is_dir()


def test_second_compile_runs_nothing(pipeline, dispatcher):
    pipeline.compile()
    dispatcher.actions.clear()

    result = pipeline.compile()

    assert dispatcher.actions == []
    assert result.up_to_date
    assert result.output == pipeline.graph.image.output


def test_compile_prints_recipe_headers(pipeline, dispatcher):
    pipeline.compile()
    assert "# Compiling testbench:" in dispatcher.output


def test_compile_failure_aborts(pipeline, dispatcher, graph):
    dispatcher.fail.add(COMPILE)

    with pytest.raises(BuildError) as excinfo:
        pipeline.compile()

    assert excinfo.value.returncode == 1
    assert not graph.image.output.exists()


# ---------------------------------------------------------------------------
# simulate
# ---------------------------------------------------------------------------

def test_simulate_builds_whole_chain(pipeline, dispatcher, graph):
    result = pipeline.simulate()

    assert dispatcher.tools_run == [COMPILE, SIMULATE]
    assert result.executed == [TargetKind.COMPILED_IMAGE, TargetKind.WAVEFORM_DUMP]
    assert graph.dump.output.is_file()
    assert graph.log.output.is_file()


def test_touched_source_rebuilds_image_then_dump(pipeline, dispatcher, graph, clock):
    pipeline.simulate()
    clock.touch(graph.source)
    dispatcher.actions.clear()

    pipeline.simulate()

    assert dispatcher.tools_run == [COMPILE, SIMULATE]


def test_simulate_up_to_date_runs_nothing(pipeline, dispatcher):
    pipeline.simulate()
    dispatcher.actions.clear()

    result = pipeline.simulate()

    assert result.up_to_date
    assert dispatcher.actions == []


def test_simulate_after_compile_only_simulates(pipeline, dispatcher):
    pipeline.compile()
    dispatcher.actions.clear()

    pipeline.simulate()

    assert dispatcher.tools_run == [SIMULATE]


def test_regenerated_image_restales_dump_even_with_older_timestamp(
    pipeline, dispatcher, graph, clock
):
    pipeline.simulate()
    old_stamp = graph.image.output.stat().st_mtime_ns - 10 * 1_000_000_000
    clock.touch(graph.source)
    dispatcher.image_mtime = old_stamp
    dispatcher.actions.clear()

    pipeline.simulate()

    assert dispatcher.tools_run == [COMPILE, SIMULATE]


def test_missing_dump_is_fatal_and_stale_dump_is_removed(pipeline, dispatcher, graph, clock):
    # A dump from an earlier run sits on disk, older than the image
    clock.touch(graph.dump.output, "stale dump")
    dispatcher.write_dump = False

    with pytest.raises(MissingArtifactError):
        pipeline.simulate()

    assert not graph.dump.output.exists()
    assert graph.log.output.exists()


def test_missing_dump_stops_before_viewer(pipeline, dispatcher, graph, clock):
    clock.touch(graph.dump.output, "stale dump")
    dispatcher.write_dump = False

    with pytest.raises(MissingArtifactError):
        pipeline.view()

    assert ActionKind.VIEW not in dispatcher.actions
    assert not graph.dump.output.exists()


def test_simulation_failure_is_fatal(pipeline, dispatcher):
    dispatcher.fail.add(SIMULATE)
    with pytest.raises(SimulationError):
        pipeline.simulate()


def test_interrupted_simulation_removes_partial_dump(pipeline, dispatcher, graph):
    dispatcher.interrupt.add(SIMULATE)

    with pytest.raises(KeyboardInterrupt):
        pipeline.simulate()

    assert graph.image.output.exists()
    assert not graph.dump.output.exists()


def test_killed_simulation_leaves_no_dump_and_reruns(pipeline, dispatcher, graph):
    pipeline.compile()
    dispatcher.fail.add(SIMULATE)

    with pytest.raises(SimulationError):
        pipeline.simulate()
    assert not graph.dump.output.exists()

    dispatcher.fail.clear()
    dispatcher.actions.clear()
    result = pipeline.simulate()

    assert dispatcher.tools_run == [SIMULATE]
    assert not result.up_to_date
    assert graph.dump.output.read_text() == "dump"


# ---------------------------------------------------------------------------
# simulate_interactive
# ---------------------------------------------------------------------------

def test_interactive_never_validates_dump(pipeline, dispatcher, graph):
    dispatcher.write_dump = False

    result = pipeline.simulate_interactive()

    assert dispatcher.tools_run == [COMPILE, ActionKind.SIMULATE_INTERACTIVE]
    assert result.executed == [TargetKind.COMPILED_IMAGE]
    assert not graph.dump.output.exists()


def test_interactive_runs_even_when_image_is_fresh(pipeline, dispatcher):
    pipeline.compile()
    dispatcher.actions.clear()

    pipeline.simulate_interactive()

    assert dispatcher.tools_run == [ActionKind.SIMULATE_INTERACTIVE]
    assert "# Running interactive simulation:" in dispatcher.output


def test_interactive_failure_is_fatal(pipeline, dispatcher):
    dispatcher.fail.add(ActionKind.SIMULATE_INTERACTIVE)
    with pytest.raises(SimulationError):
        pipeline.simulate_interactive()


# ---------------------------------------------------------------------------
# view
# ---------------------------------------------------------------------------

def test_view_simulates_first_then_opens_viewer(pipeline, dispatcher):
    result = pipeline.view()

    assert dispatcher.tools_run == [COMPILE, SIMULATE, ActionKind.VIEW]
    assert result.executed[-1] is TargetKind.VIEW
    assert "# Opening dump file in GTKWave:" in dispatcher.output


def test_view_with_fresh_dump_only_opens_viewer(pipeline, dispatcher):
    pipeline.simulate()
    dispatcher.actions.clear()

    pipeline.view()

    assert dispatcher.tools_run == [ActionKind.VIEW]


# ---------------------------------------------------------------------------
# clean
# ---------------------------------------------------------------------------

def test_clean_removes_build_directory(pipeline, layout):
    pipeline.simulate()
    assert layout.build_dir.is_dir()

    result = pipeline.clean()

    assert result.executed == [TargetKind.CLEAN]
    assert not layout.build_dir.exists()


def test_clean_without_build_directory_succeeds(pipeline, layout):
    pipeline.clean()
    pipeline.clean()
    assert not layout.build_dir.exists()


def test_compile_after_clean_rebuilds_only_image(pipeline, dispatcher, graph):
    pipeline.simulate()
    pipeline.clean()
    dispatcher.actions.clear()

    pipeline.compile()

    assert dispatcher.tools_run == [COMPILE]
    assert graph.image.output.exists()
    assert not graph.dump.output.exists()
    assert not graph.log.output.exists()


# ---------------------------------------------------------------------------
# dry run
# ---------------------------------------------------------------------------

def test_dry_run_touches_nothing(graph, clock, layout):
    dispatcher = RecordingDispatcher(clock, dry_run=True)
    pipeline = Pipeline(graph, dispatcher)

    result = pipeline.simulate()

    assert result.executed == [TargetKind.COMPILED_IMAGE, TargetKind.WAVEFORM_DUMP]
    assert not layout.build_dir.exists()


# ---------------------------------------------------------------------------
# wiring
# ---------------------------------------------------------------------------

def test_build_pipeline_threads_configuration(project):
    config = load_config(testbench=TESTBENCH, build_dir="out", platform="posix", dump_macro="WAVES")
    pipeline = build_pipeline(config, resolve_unit(config))

    assert pipeline.graph.layout.build_dir == project / "out"
    assert pipeline.graph.image.output == project / "out" / f"{TESTBENCH}.vvp"
    assert pipeline.dispatcher.profile.name == "posix"
    assert pipeline.dispatcher.profile.tools.dump_macro == "WAVES"
    assert pipeline.validator.dump_macro == "WAVES"
