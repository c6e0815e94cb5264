"""
Fatal pipeline errors.

Any of these aborts grading before a single test runs.
"""

from pathlib import Path


class GraderError(Exception):
    """Base class for fatal grading errors."""

    kind: str = "GraderError"


class StructuralError(GraderError):
    """The submission is missing its manifest, build root or build descriptor."""

    kind = "StructuralError"


class BuildError(GraderError):
    """
    The build command failed.

    Attributes:
        log: Full combined build output, surfaced verbatim to the operator.
        exit_code: Build exit status, or None if the build never finished.
    """

    kind = "BuildError"

    def __init__(self, message: str, log: str = "", exit_code: int | None = None) -> None:
        super().__init__(message)
        self.log = log
        self.exit_code = exit_code


class ArtifactMissingError(GraderError):
    """The build reported success but did not produce the artifact."""

    kind = "ArtifactMissingError"

    def __init__(self, expected_path: Path) -> None:
        super().__init__(f"{expected_path.name} not found after build (expected location: {expected_path})")
        self.expected_path = expected_path
