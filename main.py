"""
Build Grader: build a submission archive and grade it against the test corpora

Usage:
  main.py package --id=ID [--team=IDS] [--source=DIR] [--output=DIR] [--clean] [--no-build] [--config=PATH]
  main.py <archive> [--config=PATH] [--corpus=DIR] [--jobs=N] [--timeout=SECONDS] [--report=PATH] [--verbose]
  main.py (-h | --help)

Options:
  --config=PATH        Path to YAML configuration file [default: grader_config.yml].
  --corpus=DIR         Directory holding the official/ and unofficial/ corpora.
  --jobs=N             Number of tests to run in parallel (0 = one per CPU).
  --timeout=SECONDS    Per-test timeout in seconds.
  --report=PATH        Write a JSON report of this run.
  --verbose            Show artifact diagnostics for failing tests.
  --id=ID              Student ID used for the zip filename.
  --team=IDS           Comma-separated team member IDs (default: same as --id).
  --source=DIR         Source directory containing the Makefile [default: ../ex3].
  --output=DIR         Output directory for the zip file [default: .].
  --clean              Run make clean before the verification build.
  --no-build           Skip the verification build.
  -h --help            Show this screen.
"""

import sys
from pathlib import Path

from docopt import docopt
from pydantic import ValidationError

from buildgrader.config import DEFAULT_CONFIG_FILENAME
from buildgrader.config_loader import GraderConfig, load_config
from buildgrader.errors import BuildError, GraderError
from buildgrader.packager import SubmissionPackager, parse_team_ids
from buildgrader.pipeline import GradingPipeline
from buildgrader.reporter import ConsoleReporter


def resolve_config(config_path: Path) -> GraderConfig:
    """
    Load the configuration file, falling back to defaults.

    A missing file is only an error when it was named explicitly.

    Args:
        config_path: Value of --config.

    Returns:
        GraderConfig object.
    """
    if not config_path.exists():
        if config_path.name == DEFAULT_CONFIG_FILENAME:
            return GraderConfig()
        raise FileNotFoundError(f"Configuration file not found at {config_path}")
    config = load_config(config_path)
    print(f"Loaded configuration from {config_path}")
    return config


def apply_overrides(config: GraderConfig, arguments: dict) -> GraderConfig:
    """
    Apply command-line overrides on top of the file configuration.

    Args:
        config: Configuration loaded from file.
        arguments: Parsed docopt arguments.

    Returns:
        A validated GraderConfig with the overrides applied.
    """
    data = config.model_dump()
    if arguments["--corpus"]:
        data["corpus_dir"] = Path(arguments["--corpus"])
    if arguments["--jobs"] is not None:
        data["jobs"] = int(arguments["--jobs"])
    if arguments["--timeout"] is not None:
        data["test_timeout_seconds"] = float(arguments["--timeout"])
    if arguments["--report"]:
        data["report_path"] = Path(arguments["--report"])
    if arguments["--verbose"]:
        data["verbose"] = True
    return GraderConfig(**data)


def run_package(arguments: dict, config: GraderConfig) -> int:
    """
    Handle the package command.

    Args:
        arguments: Parsed docopt arguments.
        config: Grader configuration.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    student_id = arguments["--id"]
    team = arguments["--team"]
    source_dir = Path(arguments["--source"]).resolve()
    output_dir = Path(arguments["--output"]).resolve()

    print(f"Student ID:     {student_id}")
    print(f"Source Dir:     {source_dir}")
    print(f"Output Dir:     {output_dir}")
    print()

    try:
        result = SubmissionPackager(config).create(
            student_id=student_id,
            source_dir=source_dir,
            output_dir=output_dir,
            team_ids=parse_team_ids(team, student_id),
            clean=arguments["--clean"],
            skip_build=arguments["--no-build"],
        )
    except GraderError as e:
        print(f"ERROR: {e}")
        if isinstance(e, BuildError) and e.log:
            print(e.log.rstrip())
        return 1

    for warning in result.warnings:
        print(f"Warning: {warning}")
    print(f"Team Members:   {', '.join(result.identifiers)}")
    print(f"Zip file created: {result.archive_path}")
    print(f"Entries: {len(result.entries)}")

    if result.issues:
        for issue in result.issues:
            print(f"Warning: {issue}")
    else:
        print("All structure checks passed")
    return 0


def main() -> int:
    """
    Main CLI entrypoint.

    Returns:
        Exit code (0 if all tests passed, 1 for any failure or error).
    """
    arguments = docopt(__doc__)

    try:
        config = resolve_config(Path(arguments["--config"]))
    except Exception as e:
        print(f"Error loading config: {e}")
        return 1

    if arguments["package"]:
        return run_package(arguments, config)

    try:
        config = apply_overrides(config, arguments)
    except (ValueError, ValidationError) as e:
        print(f"Error: invalid option: {e}")
        return 1

    archive_path = Path(arguments["<archive>"])
    pipeline = GradingPipeline(config, reporter=ConsoleReporter(verbose=config.verbose))
    try:
        report = pipeline.run(archive_path)
    except KeyboardInterrupt:
        print("\nGrading interrupted by user.")
        return 1

    return report.exit_code


if __name__ == "__main__":
    sys.exit(main())
