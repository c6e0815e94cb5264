"""
Configuration constants for the Build Grader system.
"""

from pathlib import Path


# Submission archive layout
MANIFEST_FILENAME: str = "ids.txt"
BUILD_ROOT_DIRNAME: str = "ex3"
BUILD_DESCRIPTOR_FILENAME: str = "Makefile"
ARTIFACT_NAME: str = "SEMANT"
WORKSPACE_PREFIX: str = "buildgrader-"

# Build configuration
BUILD_COMMAND: list[str] = ["make"]
CLEAN_COMMAND: list[str] = ["make", "clean"]
BUILD_TIMEOUT_SECONDS: int = 600

# Artifact invocation: launcher + [artifact, input, output]
ARTIFACT_LAUNCHER: list[str] = ["java", "-jar"]
TEST_TIMEOUT_SECONDS: int = 30
DEFAULT_JOBS: int = 1

# Test corpora layout
DEFAULT_CORPUS_DIR: Path = Path(".")
OFFICIAL_SUITE_NAME: str = "official"
UNOFFICIAL_SUITE_NAME: str = "unofficial"
INPUT_DIRNAME: str = "input"
EXPECTED_DIRNAME: str = "expected_output"
OFFICIAL_INPUT_PATTERN: str = "TEST_*.txt"
UNOFFICIAL_INPUT_PATTERN: str = "*.txt"
INPUT_SUFFIX: str = ".txt"
GOLDEN_SUFFIX: str = "_Expected_Output.txt"
OUTPUT_DIR_SUFFIX: str = "_test_output"

# Config file picked up when --config is not given
DEFAULT_CONFIG_FILENAME: str = "grader_config.yml"

# Submission packaging
# bin/ is not shipped: compiled classes end up inside the artifact jar
PACKAGE_ITEMS: list[str] = ["Makefile", "src", "jflex", "cup", "external_jars", "manifest"]
GENERATED_PATHS: list[str] = ["bin", "src/Lexer.java", "src/Parser.java", "src/TokenNames.java"]
STUDENT_ID_PATTERN: str = r"^[0-9]{9}$"
