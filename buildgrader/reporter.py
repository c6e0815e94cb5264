"""
Console presentation of a grading run.

The pipeline emits events; this module is the only place that turns
them into terminal output.
"""

from pathlib import Path

from .models import BuildResult, FatalError, GradingReport, SuiteReport, TestResult, TestStatus

RULE = "=" * 42
TOTAL_STAGES = 5


def _status_line(result: TestResult) -> str:
    label = result.case.name
    if result.case.category:
        label = f"[{result.case.category}] {result.case.name}"

    if result.status == TestStatus.PASSED:
        return f"✓  {label}"
    if result.status == TestStatus.MISSING_GOLDEN:
        return f"⚠  {label} - No expected output"
    if result.status == TestStatus.MISSING_OUTPUT:
        return f"✗  {label} - No output file created"
    if result.status == TestStatus.TIMEOUT:
        return f"✗  {label} - Timed out"
    return f"✗  {label}"


def describe_failure(result: TestResult) -> str:
    """One-line failure listing entry: test id plus its classification."""
    return f"{result.case.test_id} - {result.status.value}"


class ConsoleReporter:
    """
    Prints pipeline progress and the final summary.
    """

    def __init__(self, verbose: bool = False) -> None:
        """
        Initialize the reporter.

        Args:
            verbose: Also print artifact diagnostics for failing tests.
        """
        self.verbose = verbose

    def start(self, archive_path: Path) -> None:
        print(RULE)
        print("Build Grader - Combined Test Runner")
        print(RULE)
        print(f"Submission: {archive_path}")
        print(RULE)
        print()

    def stage(self, number: int, title: str) -> None:
        print(f"[{number}/{TOTAL_STAGES}] {title}")

    def submission_ready(self, identifiers: tuple[str, ...]) -> None:
        print("✓ Submission structure is valid")
        print("Student IDs:")
        for identifier in identifiers:
            print(f"  - {identifier}")
        print()

    def build_succeeded(self, build: BuildResult) -> None:
        print("✓ Build successful")
        print(f"✓ {build.artifact_path.name} created successfully")
        print()

    def fatal(self, error: FatalError) -> None:
        print(f"ERROR ({error.kind}): {error.message}")
        if error.log:
            print("Build output:")
            print(error.log.rstrip())

    def suite_started(self, name: str) -> None:
        print(RULE)
        print(f"Running {name.capitalize()} Tests")
        print(RULE)
        print()

    def test_finished(self, result: TestResult) -> None:
        print(_status_line(result))
        if result.status == TestStatus.FAILED and result.case.category is None:
            print(f"   Expected: {result.expected_content}")
            print(f"   Got:      {result.actual_content}")
        if self.verbose and not result.passed and result.diagnostics:
            for line in result.diagnostics.splitlines()[:20]:
                print(f"   | {line}")

    def suite_finished(self, suite: SuiteReport) -> None:
        print()
        print(f"{suite.name.capitalize()} Tests: {suite.passed}/{suite.total} passed")
        print()

    def _print_totals(self, title: str, total: int, passed: int, failed: int, rate: int | None) -> None:
        print(f"{title}:")
        print(f"  Total:  {total}")
        print(f"  Passed: {passed}")
        print(f"  Failed: {failed}")
        if rate is not None:
            print(f"  Pass rate: {rate}%")

    def summary(self, report: GradingReport) -> None:
        """
        Print per-suite and combined totals, the failure listing and the verdict.

        Args:
            report: Final grading report.
        """
        print(RULE)
        print(f"[{TOTAL_STAGES}/{TOTAL_STAGES}] Final Summary")
        print(RULE)
        print()

        for suite in report.suites:
            self._print_totals(f"{suite.name.capitalize()} Tests", suite.total, suite.passed, suite.failed, suite.pass_rate)
            print()

        self._print_totals("Combined Results", report.total, report.passed, report.failed, report.pass_rate)
        print(RULE)

        if report.failed > 0:
            print()
            for suite in report.suites:
                if not suite.failures:
                    continue
                print(f"Failed {suite.name.capitalize()} Tests:")
                for result in suite.failures:
                    print(f"  ✗ {describe_failure(result)}")
                print()

        print()
        if report.error is not None:
            print(f"Grading aborted: {report.error.kind}")
        elif report.failed == 0:
            print("All tests passed!")
        else:
            print(f"{report.failed} test(s) failed.")
