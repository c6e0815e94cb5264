"""
Submission extraction and structure validation.

Unpacks a submission archive into a throwaway workspace and checks
that the manifest, build root and build descriptor are present before
anything is built.
"""

import tempfile
import zipfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .config import WORKSPACE_PREFIX
from .config_loader import GraderConfig
from .errors import StructuralError
from .models import Submission


def read_identifiers(manifest_path: Path) -> tuple[str, ...]:
    """
    Read team/student identifiers, one per line.

    Blank lines are skipped and surrounding whitespace is trimmed.
    """
    content = manifest_path.read_text(encoding="utf-8", errors="replace")
    return tuple(line.strip() for line in content.splitlines() if line.strip())


def extract_archive(archive_path: Path, destination: Path) -> None:
    """
    Extract a zip archive into destination.

    Unix permission bits stored in the archive are restored, so shipped
    helper scripts stay executable.

    Raises:
        StructuralError: If the archive is missing, is not a valid zip file,
            or cannot be extracted (encrypted or unsupported members, I/O errors).
    """
    if not archive_path.is_file():
        raise StructuralError(f"Zip file not found: {archive_path}")

    try:
        with zipfile.ZipFile(archive_path) as zf:
            zf.extractall(destination)
            _restore_permissions(zf, destination)
    except zipfile.BadZipFile as e:
        raise StructuralError(f"Not a valid zip archive: {archive_path} ({e})") from e
    except (RuntimeError, NotImplementedError, OSError) as e:
        raise StructuralError(f"Could not extract {archive_path}: {e}") from e


def _restore_permissions(zf: zipfile.ZipFile, destination: Path) -> None:
    root = destination.resolve()
    for info in zf.infolist():
        mode = (info.external_attr >> 16) & 0o777
        if not mode:
            continue
        # extractall rewrites unsafe member names, skip anything outside the workspace
        target = destination / info.filename
        if not target.resolve().is_relative_to(root):
            continue
        if target.exists() and not target.is_symlink():
            target.chmod(mode)


def validate_structure(archive_path: Path, workspace_root: Path, config: GraderConfig) -> Submission:
    """
    Check the extracted submission layout.

    Checks, in order: the manifest at the workspace root, the build root
    directory, and the build descriptor inside the build root.

    Args:
        archive_path: Archive the workspace was extracted from.
        workspace_root: Directory the archive was extracted into.
        config: Grader configuration naming the expected files.

    Returns:
        Submission describing the validated workspace.

    Raises:
        StructuralError: On the first missing item.
    """
    manifest_path = workspace_root / config.manifest_filename
    if not manifest_path.is_file():
        raise StructuralError(f"{config.manifest_filename} not found in submission")

    build_root = workspace_root / config.build_root
    if not build_root.is_dir():
        raise StructuralError(f"{config.build_root}/ directory not found in submission")

    if not (build_root / config.build_descriptor).is_file():
        raise StructuralError(f"{config.build_descriptor} not found in {config.build_root}/ directory")

    return Submission(
        archive_path=archive_path,
        workspace_root=workspace_root,
        build_root=build_root,
        identifiers=read_identifiers(manifest_path),
    )


@contextmanager
def open_workspace() -> Iterator[Path]:
    """Create a uniquely named workspace that is removed on exit."""
    with tempfile.TemporaryDirectory(prefix=WORKSPACE_PREFIX) as tmp:
        yield Path(tmp)
