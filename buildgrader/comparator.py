"""
Byte-exact comparison of produced output against golden files.
"""

from pathlib import Path

from .models import TestCase, TestResult, TestStatus


def compare_output(case: TestCase, output_path: Path, diagnostics: str = "") -> TestResult:
    """
    Classify a test by comparing its output with its golden file.

    No whitespace, line ending or encoding normalization is applied.

    Args:
        case: The executed test case.
        output_path: Where the artifact was asked to write its output.
        diagnostics: Artifact stdout/stderr to attach to the result.

    Returns:
        TestResult with MissingOutput, MissingGolden, Passed or Failed.
    """
    if not output_path.is_file():
        return TestResult(case=case, status=TestStatus.MISSING_OUTPUT, diagnostics=diagnostics)

    golden_path = case.golden_path
    if not golden_path.is_file():
        return TestResult(
            case=case,
            status=TestStatus.MISSING_GOLDEN,
            output_path=output_path,
            diagnostics=diagnostics,
        )

    actual = output_path.read_bytes()
    expected = golden_path.read_bytes()
    if actual == expected:
        return TestResult(case=case, status=TestStatus.PASSED, output_path=output_path, diagnostics=diagnostics)

    return TestResult(
        case=case,
        status=TestStatus.FAILED,
        output_path=output_path,
        expected_content=expected.decode("utf-8", errors="replace"),
        actual_content=actual.decode("utf-8", errors="replace"),
        diagnostics=diagnostics,
    )
