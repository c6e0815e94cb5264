"""
Pydantic models for the Build Grader system.

Defines the structured data that flows through the grading pipeline:
the unpacked submission, the build outcome, test cases and their
verdicts, and the per-suite and overall reports.
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from .config import GOLDEN_SUFFIX


def golden_path_for(name: str, expected_dir: Path) -> Path:
    """
    Locate the golden output for a test.

    Args:
        name: Bare test id (input filename without extension, no category).
        expected_dir: The suite's expected output directory.

    Returns:
        <expected_dir>/<name>_Expected_Output.txt
    """
    return expected_dir / f"{name}{GOLDEN_SUFFIX}"


class TestStatus(str, Enum):
    """Verdict for a single test case."""

    __test__ = False

    PASSED = "Passed"
    FAILED = "Failed"
    MISSING_OUTPUT = "MissingOutput"
    MISSING_GOLDEN = "MissingGolden"
    TIMEOUT = "Timeout"


class PipelineStage(str, Enum):
    """Stages of a grading run, in the order they are entered."""

    INIT = "Init"
    EXTRACTED = "Extracted"
    VALIDATED = "Validated"
    BUILT = "Built"
    ENUMERATED = "Enumerated"
    EXECUTING = "Executing"
    AGGREGATED = "Aggregated"
    REPORTED = "Reported"
    TERMINAL = "Terminal"


class Submission(BaseModel):
    """
    An extracted and validated submission.

    Attributes:
        archive_path: Path to the submitted zip archive.
        workspace_root: Temporary directory the archive was extracted into.
        build_root: Directory inside the workspace that holds the sources.
        identifiers: Team/student identifiers read from the manifest.
    """

    model_config = ConfigDict(frozen=True)

    archive_path: Path = Field(..., description="Submitted archive")
    workspace_root: Path = Field(..., description="Extraction directory")
    build_root: Path = Field(..., description="Build root inside the workspace")
    identifiers: tuple[str, ...] = Field(default=(), description="Identifiers from the manifest")


class BuildResult(BaseModel):
    """
    Outcome of a successful build.

    Attributes:
        exit_code: Build process exit status.
        log: Combined stdout/stderr of the build.
        artifact_path: Resolved path of the produced artifact.
    """

    model_config = ConfigDict(frozen=True)

    exit_code: int = Field(..., description="Build exit status")
    log: str = Field(default="", description="Combined build output")
    artifact_path: Path = Field(..., description="Path of the built artifact")


class TestCase(BaseModel):
    """
    One input file of a corpus.

    Attributes:
        name: Input filename without its extension.
        category: Subdirectory the input lives in (unofficial suite only).
        input_path: Path to the input file.
        expected_dir: Directory holding the golden files for this suite.
    """

    __test__ = False
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Bare test id")
    category: str | None = Field(default=None, description="Category subdirectory")
    input_path: Path = Field(..., description="Input file")
    expected_dir: Path = Field(..., description="Golden directory")

    @property
    def test_id(self) -> str:
        if self.category:
            return f"{self.category}/{self.name}"
        return self.name

    @property
    def golden_path(self) -> Path:
        return golden_path_for(self.name, self.expected_dir)


class TestResult(BaseModel):
    """
    Verdict for one executed test case.

    Attributes:
        case: The test case that was run.
        status: Comparator verdict.
        output_path: File the artifact was asked to write.
        expected_content: Golden contents (Failed only).
        actual_content: Produced contents (Failed only).
        diagnostics: Anything the artifact printed, for display only.
    """

    __test__ = False
    model_config = ConfigDict(frozen=True)

    case: TestCase = Field(..., description="Executed test case")
    status: TestStatus = Field(..., description="Verdict")
    # Lives in a temporary workspace, so it is left out of serialized reports
    output_path: Path | None = Field(default=None, exclude=True, description="Produced output file")
    expected_content: str | None = Field(default=None, description="Golden contents on mismatch")
    actual_content: str | None = Field(default=None, description="Produced contents on mismatch")
    diagnostics: str = Field(default="", description="Artifact stdout/stderr")

    @property
    def passed(self) -> bool:
        return self.status == TestStatus.PASSED


def pass_rate(passed: int, total: int) -> int | None:
    """Integer percentage of passed tests, truncated, or None for an empty run."""
    if total == 0:
        return None
    return passed * 100 // total


class SuiteReport(BaseModel):
    """
    Totals for one test suite.

    Attributes:
        name: Suite name ("official" or "unofficial").
        total: Number of executed tests.
        passed: Number of tests with a Passed verdict.
        failed: Number of tests with any other verdict.
        failures: Failing results, in execution order.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Suite name")
    total: int = Field(default=0, ge=0, description="Executed tests")
    passed: int = Field(default=0, ge=0, description="Passed tests")
    failed: int = Field(default=0, ge=0, description="Failed tests")
    failures: tuple[TestResult, ...] = Field(default=(), description="Failing results")

    @model_validator(mode="after")
    def _check_counts(self) -> "SuiteReport":
        if self.passed + self.failed != self.total:
            raise ValueError(f"passed ({self.passed}) + failed ({self.failed}) != total ({self.total})")
        if self.failed != len(self.failures):
            raise ValueError(f"failed ({self.failed}) does not match {len(self.failures)} listed failures")
        return self

    @property
    def pass_rate(self) -> int | None:
        return pass_rate(self.passed, self.total)


class FatalError(BaseModel):
    """
    A fatal error that stopped the pipeline before testing.

    Attributes:
        kind: Error class name (StructuralError, BuildError, ArtifactMissingError).
        message: Human readable description.
        log: Full build log for BuildError.
    """

    model_config = ConfigDict(frozen=True)

    kind: str = Field(..., description="Error kind")
    message: str = Field(..., description="Error description")
    log: str = Field(default="", description="Build log, if any")


class GradingReport(BaseModel):
    """
    Overall result of a grading run.

    Attributes:
        identifiers: Identifiers read from the submission manifest.
        suites: Per-suite reports, official first.
        stage: Last stage the pipeline reached before terminating.
        error: Fatal error that aborted the run, if any.
    """

    model_config = ConfigDict(frozen=True)

    identifiers: tuple[str, ...] = Field(default=(), description="Submission identifiers")
    suites: tuple[SuiteReport, ...] = Field(default=(), description="Suite reports")
    stage: PipelineStage = Field(default=PipelineStage.INIT, description="Last stage reached")
    error: FatalError | None = Field(default=None, description="Fatal error, if any")

    @computed_field
    @property
    def total(self) -> int:
        return sum(s.total for s in self.suites)

    @computed_field
    @property
    def passed(self) -> int:
        return sum(s.passed for s in self.suites)

    @computed_field
    @property
    def failed(self) -> int:
        return sum(s.failed for s in self.suites)

    @property
    def pass_rate(self) -> int | None:
        return pass_rate(self.passed, self.total)

    @computed_field
    @property
    def exit_code(self) -> int:
        return 0 if self.error is None and self.failed == 0 else 1
