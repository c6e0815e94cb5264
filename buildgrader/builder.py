"""
Build invocation for extracted submissions.

Runs the submission's build command inside its build root, capturing
the full log, and confirms the expected artifact was produced.
"""

import subprocess
from pathlib import Path

from .config import ARTIFACT_NAME, BUILD_COMMAND, BUILD_TIMEOUT_SECONDS
from .errors import ArtifactMissingError, BuildError
from .models import BuildResult


class BuildInvoker:
    """
    Builds a submission and locates its artifact.

    Uses subprocess to run the build command and captures combined output.
    """

    def __init__(
        self,
        build_command: list[str] | None = None,
        artifact_name: str = ARTIFACT_NAME,
        timeout_seconds: float | None = BUILD_TIMEOUT_SECONDS,
    ) -> None:
        """
        Initialize the build invoker.

        Args:
            build_command: Command run in the build root (default: make).
            artifact_name: File the build must leave in the build root.
            timeout_seconds: Maximum build time, or None for no limit.
        """
        self.build_command = list(build_command or BUILD_COMMAND)
        self.artifact_name = artifact_name
        self.timeout_seconds = timeout_seconds

    def build(self, build_root: Path) -> BuildResult:
        """
        Build the submission in build_root.

        Args:
            build_root: Directory containing the build descriptor.

        Returns:
            BuildResult with the exit code, log and artifact path.

        Raises:
            BuildError: If the build fails, times out or cannot be started.
            ArtifactMissingError: If the build succeeds without producing the artifact.
        """
        try:
            process = subprocess.run(
                self.build_command,
                cwd=str(build_root.resolve()),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired as e:
            log = _decode(e.stdout)
            raise BuildError(f"Build timed out after {self.timeout_seconds} seconds", log=log) from e
        except OSError as e:
            raise BuildError(f"Could not run build command {' '.join(self.build_command)}: {e}", log=str(e)) from e

        if process.returncode != 0:
            raise BuildError(
                f"Build failed (exit code {process.returncode})",
                log=process.stdout,
                exit_code=process.returncode,
            )

        artifact_path = build_root / self.artifact_name
        if not artifact_path.is_file():
            raise ArtifactMissingError(artifact_path)

        return BuildResult(
            exit_code=process.returncode,
            log=process.stdout,
            artifact_path=artifact_path.resolve(),
        )


def _decode(output: bytes | str | None) -> str:
    # TimeoutExpired carries raw bytes even when text=True was requested
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output
