"""
Configuration loader for the Build Grader system.

Handles parsing and validation of YAML configuration files.
"""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from .config import (
    ARTIFACT_LAUNCHER,
    ARTIFACT_NAME,
    BUILD_COMMAND,
    BUILD_DESCRIPTOR_FILENAME,
    BUILD_ROOT_DIRNAME,
    BUILD_TIMEOUT_SECONDS,
    CLEAN_COMMAND,
    DEFAULT_CORPUS_DIR,
    DEFAULT_JOBS,
    GENERATED_PATHS,
    MANIFEST_FILENAME,
    PACKAGE_ITEMS,
    TEST_TIMEOUT_SECONDS,
)


class GraderConfig(BaseModel):
    """
    Configuration model for the grader.
    """
    corpus_dir: Path = Field(DEFAULT_CORPUS_DIR, description="Directory holding the official/ and unofficial/ corpora")
    report_path: Optional[Path] = Field(None, description="Where to write the JSON report of this run")

    # Submission layout
    manifest_filename: str = Field(MANIFEST_FILENAME, description="Identifier manifest at the archive root")
    build_root: str = Field(BUILD_ROOT_DIRNAME, description="Directory inside the archive that holds the sources")
    build_descriptor: str = Field(BUILD_DESCRIPTOR_FILENAME, description="Build descriptor inside the build root")
    artifact_name: str = Field(ARTIFACT_NAME, description="Artifact the build must leave in the build root")

    # Build and execution
    build_command: list[str] = Field(default_factory=lambda: list(BUILD_COMMAND), description="Command that builds the artifact")
    clean_command: list[str] = Field(default_factory=lambda: list(CLEAN_COMMAND), description="Command that cleans the build root")
    artifact_launcher: list[str] = Field(
        default_factory=lambda: list(ARTIFACT_LAUNCHER), description="Prefix used to run the artifact"
    )
    build_timeout_seconds: Optional[float] = Field(BUILD_TIMEOUT_SECONDS, gt=0, description="Build timeout, null disables")
    test_timeout_seconds: Optional[float] = Field(TEST_TIMEOUT_SECONDS, gt=0, description="Per-test timeout, null disables")
    jobs: int = Field(DEFAULT_JOBS, ge=0, description="Parallel test workers, 0 means one per CPU")

    # Packaging
    package_items: list[str] = Field(default_factory=lambda: list(PACKAGE_ITEMS), description="Items copied into the archive")
    generated_paths: list[str] = Field(
        default_factory=lambda: list(GENERATED_PATHS), description="Build outputs stripped before zipping"
    )

    verbose: bool = Field(False, description="Enable verbose output")


def load_config(config_path: Path) -> GraderConfig:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        GraderConfig object with loaded values.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        yaml.YAMLError: If config file is invalid YAML.
        ValidationError: If config data is invalid.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_data = yaml.safe_load(f)

    # An empty file is valid, every field has a default
    if not config_data:
        return GraderConfig()

    # Resolve relative paths relative to the config file location
    config_dir = config_path.parent
    for path_field in ["corpus_dir", "report_path"]:
        if path_field in config_data and config_data[path_field]:
            path = Path(config_data[path_field])
            if not path.is_absolute():
                config_data[path_field] = config_dir / path

    return GraderConfig(**config_data)
