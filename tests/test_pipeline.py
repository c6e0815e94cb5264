from __future__ import annotations

import sys
import zipfile
from contextlib import contextmanager
from pathlib import Path

from buildgrader import pipeline
from buildgrader.config_loader import GraderConfig
from buildgrader.models import PipelineStage, TestStatus
from buildgrader.pipeline import GradingPipeline
from buildgrader.reporter import ConsoleReporter
from buildgrader.results_aggregator import load_report

from .conftest import BUILD_FAILS, BUILD_PRODUCES_NOTHING, write_zip


def run(config: GraderConfig, archive: Path, reporter: ConsoleReporter | None = None):
    return GradingPipeline(config, reporter=reporter).run(archive)


def test_scenario_a_single_passing_test(config, make_archive, valid_entries, add_official) -> None:
    add_official("TEST_1", "int x := 1;", "INT X := 1;")

    report = run(config, make_archive(valid_entries))

    official, unofficial = report.suites
    assert (official.passed, official.total) == (1, 1)
    assert (unofficial.passed, unofficial.total) == (0, 0)
    assert report.identifiers == ("123456789", "987654321")
    assert report.stage == PipelineStage.REPORTED
    assert report.exit_code == 0


def test_scenario_b_mismatch_is_listed_as_failed(config, make_archive, valid_entries, add_official) -> None:
    add_official("TEST_1", "int x := 1;", "ERROR(1)")

    report = run(config, make_archive(valid_entries))

    official = report.suites[0]
    assert (official.passed, official.total) == (0, 1)
    assert [(r.case.test_id, r.status) for r in official.failures] == [("TEST_1", TestStatus.FAILED)]
    assert report.exit_code == 1


def test_scenario_c_missing_build_root_halts_before_testing(config, make_archive, valid_entries, add_official) -> None:
    add_official("TEST_1", "ok", "OK")
    entries = {name: content for name, content in valid_entries.items() if not name.startswith("ex3/")}

    report = run(config, make_archive(entries))

    assert report.error is not None
    assert report.error.kind == "StructuralError"
    assert report.stage == PipelineStage.EXTRACTED
    assert [s.total for s in report.suites] == [0, 0]
    assert report.exit_code == 1


def test_scenario_d_missing_output_does_not_stop_the_run(config, make_archive, valid_entries, add_official) -> None:
    add_official("TEST_1", "NO_OUTPUT", "NO_OUTPUT")
    add_official("TEST_2", "ok", "OK")

    report = run(config, make_archive(valid_entries))

    official = report.suites[0]
    assert official.total == 2
    assert official.passed == 1
    assert [(r.case.name, r.status) for r in official.failures] == [("TEST_1", TestStatus.MISSING_OUTPUT)]


def test_build_failure_runs_no_tests(config, make_archive, valid_entries, add_official, add_unofficial) -> None:
    add_official("TEST_1", "ok", "OK")
    add_unofficial("arrays", "bounds", "x", "X")
    config = config.model_copy(update={"build_command": BUILD_FAILS})

    report = run(config, make_archive(valid_entries))

    assert report.error is not None
    assert report.error.kind == "BuildError"
    assert "missing semicolon" in report.error.log
    assert report.stage == PipelineStage.VALIDATED
    assert (report.total, report.passed, report.failed) == (0, 0, 0)
    assert all(not s.failures for s in report.suites)
    assert report.exit_code == 1


def test_artifact_missing_aborts_before_enumeration(config, make_archive, valid_entries, add_official) -> None:
    add_official("TEST_1", "ok", "OK")
    config = config.model_copy(update={"build_command": BUILD_PRODUCES_NOTHING})

    report = run(config, make_archive(valid_entries))

    assert report.error is not None
    assert report.error.kind == "ArtifactMissingError"
    assert report.total == 0
    assert report.exit_code == 1


def test_both_suites_are_combined(config, make_archive, valid_entries, add_official, add_unofficial) -> None:
    add_official("TEST_1", "a", "A")
    add_official("TEST_2", "b", "nope")
    add_unofficial("arrays", "bounds", "x", "X")
    add_unofficial("scoping", "shadow", "y", None)

    report = run(config, make_archive(valid_entries))

    assert [s.name for s in report.suites] == ["official", "unofficial"]
    assert (report.total, report.passed, report.failed) == (4, 2, 2)
    assert report.total == sum(s.total for s in report.suites)
    unofficial_failures = report.suites[1].failures
    assert [(r.case.test_id, r.status) for r in unofficial_failures] == [("scoping/shadow", TestStatus.MISSING_GOLDEN)]


def test_rerun_is_deterministic(config, make_archive, valid_entries, add_official, add_unofficial) -> None:
    add_official("TEST_1", "a", "A")
    add_official("TEST_2", "b", "wrong")
    add_unofficial("classes", "inherit", "c", "C")
    archive = make_archive(valid_entries)

    first = run(config, archive)
    second = run(config.model_copy(update={"jobs": 3}), archive)

    assert first.model_dump() == second.model_dump()
    assert first.exit_code == second.exit_code


def test_report_is_saved_when_configured(config, make_archive, valid_entries, add_official, tmp_path: Path) -> None:
    add_official("TEST_1", "a", "A")
    report_path = tmp_path / "out" / "report.json"
    config = config.model_copy(update={"report_path": report_path})

    report = run(config, make_archive(valid_entries))

    assert load_report(report_path).model_dump() == report.model_dump()


def test_console_output(config, make_archive, valid_entries, add_official, add_unofficial, capsys) -> None:
    add_official("TEST_1", "a", "A")
    add_official("TEST_2", "b", "expected b")
    add_unofficial("arrays", "bounds", "x", None)

    run(config, make_archive(valid_entries), reporter=ConsoleReporter())
    out = capsys.readouterr().out

    assert "  - 123456789" in out
    assert "✓  TEST_1" in out
    assert "   Expected: expected b" in out
    assert "   Got:      B" in out
    assert "⚠  [arrays] bounds - No expected output" in out
    assert "Official Tests: 1/2 passed" in out
    assert "  Pass rate: 33%" in out
    assert "  ✗ TEST_2 - Failed" in out
    assert "  ✗ arrays/bounds - MissingGolden" in out
    assert "2 test(s) failed." in out


def test_console_output_shows_build_log(config, make_archive, valid_entries, capsys) -> None:
    config = config.model_copy(update={"build_command": BUILD_FAILS})

    run(config, make_archive(valid_entries), reporter=ConsoleReporter())
    out = capsys.readouterr().out

    assert "ERROR (BuildError): Build failed (exit code 2)" in out
    assert "Parser.java:12: error: missing semicolon" in out
    assert "Grading aborted: BuildError" in out


def test_executable_helper_script_in_archive_can_build(config, add_official, valid_entries, tmp_path: Path) -> None:
    add_official("TEST_1", "a", "A")
    archive = write_zip(tmp_path / "scripted.zip", valid_entries)
    with zipfile.ZipFile(archive, "a") as zf:
        script = zipfile.ZipInfo("ex3/build.sh")
        script.external_attr = 0o755 << 16
        zf.writestr(script, f"#!{sys.executable}\nimport shutil\nshutil.copy('artifact_src.py', 'SEMANT')\n")
    config = config.model_copy(update={"build_command": ["./build.sh"]})

    report = run(config, archive)

    assert report.error is None
    assert report.exit_code == 0


def record_workspaces(monkeypatch) -> list[Path]:
    seen: list[Path] = []
    original = pipeline.open_workspace

    @contextmanager
    def recording():
        with original() as workspace:
            seen.append(workspace)
            yield workspace

    monkeypatch.setattr(pipeline, "open_workspace", recording)
    return seen


def test_workspace_is_removed_after_graded_run(monkeypatch, config, make_archive, valid_entries, add_official) -> None:
    add_official("TEST_1", "a", "A")
    seen = record_workspaces(monkeypatch)

    report = run(config, make_archive(valid_entries))

    assert report.exit_code == 0
    assert len(seen) == 1
    assert not seen[0].exists()


def test_workspace_is_removed_after_fatal_error(monkeypatch, config, make_archive, valid_entries) -> None:
    config = config.model_copy(update={"build_command": BUILD_FAILS})
    seen = record_workspaces(monkeypatch)

    report = run(config, make_archive(valid_entries))

    assert report.error is not None
    assert len(seen) == 1
    assert not seen[0].exists()
