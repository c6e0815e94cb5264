"""
Submission packaging.

Assembles <student_id>.zip from a source tree: the identifier manifest
plus the build root. The sources are built once to prove the Makefile
works, then the build outputs are stripped so grading rebuilds from
scratch.
"""

import re
import shutil
import subprocess
import zipfile
from pathlib import Path

from pydantic import BaseModel, Field

from .builder import BuildInvoker
from .config import STUDENT_ID_PATTERN
from .config_loader import GraderConfig
from .errors import StructuralError
from .workspace import open_workspace


class PackageResult(BaseModel):
    """
    Outcome of packaging a submission.

    Attributes:
        archive_path: The zip file written.
        identifiers: Identifiers written to the manifest.
        entries: Names stored in the archive.
        issues: Structural problems found when inspecting the archive.
        warnings: Non-fatal problems met while packaging.
    """

    archive_path: Path = Field(..., description="Written archive")
    identifiers: list[str] = Field(default_factory=list, description="Manifest identifiers")
    entries: list[str] = Field(default_factory=list, description="Archive member names")
    issues: list[str] = Field(default_factory=list, description="Structure problems")
    warnings: list[str] = Field(default_factory=list, description="Non-fatal warnings")


def parse_team_ids(team_ids: str | None, student_id: str) -> list[str]:
    """Split a comma-separated id list, defaulting to the student id."""
    if not team_ids:
        return [student_id]
    return [part.strip() for part in team_ids.split(",") if part.strip()]


class SubmissionPackager:
    """
    Builds submission archives in the layout the grader expects.
    """

    def __init__(self, config: GraderConfig | None = None) -> None:
        self.config = config or GraderConfig()

    def create(
        self,
        student_id: str,
        source_dir: Path,
        output_dir: Path,
        team_ids: list[str] | None = None,
        clean: bool = False,
        skip_build: bool = False,
    ) -> PackageResult:
        """
        Create <output_dir>/<student_id>.zip from source_dir.

        Args:
            student_id: Student ID used for the archive name.
            source_dir: Directory holding the Makefile and sources.
            output_dir: Directory that receives the archive.
            team_ids: Identifiers for the manifest (default: [student_id]).
            clean: Run the clean command before the pre-flight build.
            skip_build: Skip the pre-flight build.

        Returns:
            PackageResult describing the archive.

        Raises:
            StructuralError: If the source directory or its Makefile is missing.
            BuildError: If the pre-flight build fails.
            ArtifactMissingError: If the pre-flight build produces no artifact.
        """
        config = self.config
        warnings: list[str] = []

        if not re.match(STUDENT_ID_PATTERN, student_id):
            warnings.append(f"Student ID should be 9 digits, got: {student_id}")

        if not source_dir.is_dir():
            raise StructuralError(f"Source directory does not exist: {source_dir}")
        if not (source_dir / config.build_descriptor).is_file():
            raise StructuralError(f"{config.build_descriptor} not found in source directory: {source_dir}")

        identifiers = team_ids or [student_id]

        with open_workspace() as staging:
            (staging / config.manifest_filename).write_text(
                "".join(f"{identifier}\n" for identifier in identifiers), encoding="utf-8"
            )

            build_root = staging / config.build_root
            build_root.mkdir()
            for item in config.package_items:
                source = source_dir / item
                if source.is_dir():
                    shutil.copytree(source, build_root / item)
                elif source.exists():
                    shutil.copy2(source, build_root / item)

            if clean:
                warning = self._clean(build_root)
                if warning:
                    warnings.append(warning)

            if not skip_build:
                BuildInvoker(
                    build_command=config.build_command,
                    artifact_name=config.artifact_name,
                    timeout_seconds=config.build_timeout_seconds,
                ).build(build_root)
            else:
                warnings.append("Skipping build verification")

            self._strip_build_outputs(build_root)

            output_dir.mkdir(parents=True, exist_ok=True)
            archive_path = output_dir / f"{student_id}.zip"
            if archive_path.exists():
                warnings.append(f"Removing existing zip file: {archive_path}")
                archive_path.unlink()
            entries = _write_zip(archive_path, staging, [config.manifest_filename, config.build_root])

        return PackageResult(
            archive_path=archive_path,
            identifiers=identifiers,
            entries=entries,
            issues=self.check_archive(entries),
            warnings=warnings,
        )

    def _clean(self, build_root: Path) -> str | None:
        try:
            process = subprocess.run(
                self.config.clean_command,
                cwd=str(build_root),
                capture_output=True,
                text=True,
                timeout=self.config.build_timeout_seconds,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            return f"Clean command failed or not supported: {e}"
        if process.returncode != 0:
            return "Clean command failed or not supported"
        return None

    def _strip_build_outputs(self, build_root: Path) -> None:
        for relative in [self.config.artifact_name, *self.config.generated_paths]:
            target = build_root / relative
            if target.is_dir():
                shutil.rmtree(target)
            elif target.exists():
                target.unlink()

    def check_archive(self, entries: list[str]) -> list[str]:
        """
        Inspect archive member names for common packaging mistakes.

        Args:
            entries: Member names as stored in the zip.

        Returns:
            List of problems; empty when the structure is right.
        """
        config = self.config
        names = set(entries)
        root = f"{config.build_root}/"
        issues: list[str] = []

        if config.manifest_filename not in names:
            issues.append(f"{config.manifest_filename} not found at root level of zip")
        if not any(name.startswith(root) for name in names):
            issues.append(f"{root} directory not found in zip")
        if f"{root}{config.build_descriptor}" not in names:
            issues.append(f"{root}{config.build_descriptor} not found in zip")
        if not any(name.startswith(f"{root}src/") for name in names):
            issues.append(f"{root}src/ directory not found in zip")
        if f"{root}{config.artifact_name}" in names:
            issues.append(f"{root}{config.artifact_name} found in zip - it should be built from source")
        return issues


def _write_zip(archive_path: Path, base_dir: Path, items: list[str]) -> list[str]:
    entries: list[str] = []
    with zipfile.ZipFile(archive_path, "w", zipfile.ZIP_DEFLATED) as zf:
        for item in items:
            path = base_dir / item
            paths = [path, *sorted(path.rglob("*"))] if path.is_dir() else [path]
            for member in paths:
                arcname = member.relative_to(base_dir).as_posix()
                if member.is_dir():
                    arcname += "/"
                zf.write(member, arcname)
                entries.append(arcname)
    return entries
