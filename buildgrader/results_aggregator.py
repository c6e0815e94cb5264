"""
Results aggregation for a grading run.

Folds per-test results into suite reports, combines the suites into
an overall report, and optionally saves that report as JSON.
"""

import json
from collections.abc import Iterable
from pathlib import Path

from .errors import BuildError, GraderError
from .models import FatalError, GradingReport, PipelineStage, SuiteReport, TestResult


def summarize_suite(name: str, results: Iterable[TestResult]) -> SuiteReport:
    """
    Fold a suite's results into a SuiteReport.

    Args:
        name: Suite name.
        results: Results in execution order.

    Returns:
        SuiteReport with totals and the ordered failure list.
    """
    total = 0
    passed = 0
    failures: list[TestResult] = []

    for result in results:
        total += 1
        if result.passed:
            passed += 1
        else:
            failures.append(result)

    return SuiteReport(
        name=name,
        total=total,
        passed=passed,
        failed=len(failures),
        failures=tuple(failures),
    )


def empty_suite(name: str) -> SuiteReport:
    """Report for a suite that never ran."""
    return SuiteReport(name=name)


def fatal_error_from(error: GraderError) -> FatalError:
    """Record a fatal pipeline exception in report form."""
    log = error.log if isinstance(error, BuildError) else ""
    return FatalError(kind=error.kind, message=str(error), log=log)


def combine_reports(
    suites: Iterable[SuiteReport],
    identifiers: Iterable[str] = (),
    stage: PipelineStage = PipelineStage.TERMINAL,
    error: FatalError | None = None,
) -> GradingReport:
    """
    Combine suite reports into the overall report.

    Args:
        suites: Suite reports, official first.
        identifiers: Identifiers read from the submission manifest.
        stage: Last pipeline stage reached.
        error: Fatal error that aborted the run, if any.

    Returns:
        GradingReport whose totals are the sums over the suites.
    """
    return GradingReport(
        identifiers=tuple(identifiers),
        suites=tuple(suites),
        stage=stage,
        error=error,
    )


def save_report(report: GradingReport, report_path: Path) -> Path:
    """
    Save a grading report as JSON, replacing any previous file.

    Args:
        report: Report to save.
        report_path: Destination file.

    Returns:
        The path written.
    """
    report_path.parent.mkdir(parents=True, exist_ok=True)
    with open(report_path, "w", encoding="utf-8") as f:
        f.write(report.model_dump_json(indent=2))
    return report_path


def load_report(report_path: Path) -> GradingReport:
    """
    Load a grading report saved by save_report.

    Args:
        report_path: JSON report file.

    Returns:
        GradingReport object.
    """
    with open(report_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return GradingReport(**data)
