"""
Runs the built artifact once per test case.

Each invocation is `launcher + [artifact, input, output]`, bounded by a
per-test timeout. The artifact's exit status is ignored: only the
output file it leaves behind is graded.
"""

import os
import subprocess
from collections.abc import Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from .comparator import compare_output
from .config import ARTIFACT_LAUNCHER, DEFAULT_JOBS, INPUT_SUFFIX, TEST_TIMEOUT_SECONDS
from .models import TestCase, TestResult, TestStatus


class TestExecutor:
    """
    Executes test cases against a built artifact.

    Sequential by default. With more than one job, cases run on a
    thread pool and results are handed back in enumeration order.
    """

    __test__ = False

    def __init__(
        self,
        artifact_path: Path,
        launcher: list[str] | None = None,
        timeout_seconds: float | None = TEST_TIMEOUT_SECONDS,
        jobs: int = DEFAULT_JOBS,
    ) -> None:
        """
        Initialize the executor.

        Args:
            artifact_path: Path to the built artifact.
            launcher: Command prefix used to run the artifact (default: java -jar).
                An empty list runs the artifact directly.
            timeout_seconds: Maximum time per test, or None for no limit.
            jobs: Number of parallel workers; 0 means one per CPU.
        """
        self.artifact_path = artifact_path
        self.launcher = list(ARTIFACT_LAUNCHER if launcher is None else launcher)
        self.timeout_seconds = timeout_seconds
        self.jobs = jobs or os.cpu_count() or 1

    @staticmethod
    def output_path_for(case: TestCase, output_dir: Path) -> Path:
        """Output file for a case; categorized cases get their own subdirectory."""
        if case.category:
            return output_dir / case.category / f"{case.name}{INPUT_SUFFIX}"
        return output_dir / f"{case.name}{INPUT_SUFFIX}"

    def command_for(self, case: TestCase, output_path: Path) -> list[str]:
        return [*self.launcher, str(self.artifact_path), str(case.input_path), str(output_path)]

    def run_case(self, case: TestCase, output_dir: Path) -> TestResult:
        """
        Run the artifact on one test case and classify the result.

        Args:
            case: Test case to run.
            output_dir: Per-suite output directory.

        Returns:
            TestResult for the case. Never raises for per-test problems.
        """
        output_path = self.output_path_for(case, output_dir)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            process = subprocess.run(
                self.command_for(case, output_path),
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired:
            return TestResult(
                case=case,
                status=TestStatus.TIMEOUT,
                output_path=output_path,
                diagnostics=f"Timed out after {self.timeout_seconds} seconds",
            )
        except OSError as e:
            return TestResult(
                case=case,
                status=TestStatus.MISSING_OUTPUT,
                diagnostics=f"Could not launch artifact: {e}",
            )

        diagnostics = process.stdout + process.stderr
        return compare_output(case, output_path, diagnostics=diagnostics)

    def run_suite(self, cases: Iterable[TestCase], output_dir: Path) -> Iterator[TestResult]:
        """
        Run every case of a suite.

        Args:
            cases: Test cases, typically a corpus.
            output_dir: Directory that receives this suite's outputs.

        Yields:
            One TestResult per case, in the order the cases were given.
        """
        output_dir.mkdir(parents=True, exist_ok=True)

        if self.jobs <= 1:
            for case in cases:
                yield self.run_case(case, output_dir)
            return

        pool = ThreadPoolExecutor(max_workers=self.jobs)
        try:
            futures = [pool.submit(self.run_case, case, output_dir) for case in cases]
            for future in futures:
                yield future.result()
        finally:
            # Stopping early (close, Ctrl-C) drops queued cases; running ones finish within their timeout
            pool.shutdown(wait=True, cancel_futures=True)
