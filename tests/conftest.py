from __future__ import annotations

import sys
import zipfile
from pathlib import Path

import pytest

from buildgrader.config_loader import GraderConfig

# Stand-in for the compiled artifact: upper-cases its input into the output
# file. Inputs starting with NO_OUTPUT or SLEEP exercise the failure paths.
ARTIFACT_SOURCE = """\
import sys
import time

src, dst = sys.argv[1], sys.argv[2]
with open(src, "rb") as f:
    data = f.read()
if data.startswith(b"NO_OUTPUT"):
    sys.stderr.write("refusing to write output\\n")
    sys.exit(3)
if data.startswith(b"SLEEP"):
    time.sleep(30)
with open(dst, "wb") as f:
    f.write(data.upper())
"""

BUILD_COPIES_ARTIFACT = [sys.executable, "-c", "import shutil; shutil.copy('artifact_src.py', 'SEMANT'); print('built SEMANT')"]
BUILD_FAILS = [sys.executable, "-c", "import sys; print('Parser.java:12: error: missing semicolon'); sys.exit(2)"]
BUILD_PRODUCES_NOTHING = [sys.executable, "-c", "print('nothing to be done')"]


def write_zip(archive_path: Path, entries: dict[str, str]) -> Path:
    with zipfile.ZipFile(archive_path, "w") as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return archive_path


@pytest.fixture
def valid_entries() -> dict[str, str]:
    return {
        "ids.txt": "123456789\n987654321\n",
        "ex3/Makefile": "all:\n\tcp artifact_src.py SEMANT\n",
        "ex3/artifact_src.py": ARTIFACT_SOURCE,
        "ex3/src/Main.java": "class Main {}\n",
    }


@pytest.fixture
def make_archive(tmp_path: Path):
    def _make(entries: dict[str, str], name: str = "submission.zip") -> Path:
        return write_zip(tmp_path / name, entries)

    return _make


@pytest.fixture
def corpus_dir(tmp_path: Path) -> Path:
    root = tmp_path / "corpus"
    for suite in ("official", "unofficial"):
        (root / suite / "input").mkdir(parents=True)
        (root / suite / "expected_output").mkdir(parents=True)
    return root


@pytest.fixture
def add_official(corpus_dir: Path):
    def _add(name: str, content: str, golden: str | None) -> Path:
        input_path = corpus_dir / "official" / "input" / f"{name}.txt"
        input_path.write_text(content)
        if golden is not None:
            (corpus_dir / "official" / "expected_output" / f"{name}_Expected_Output.txt").write_text(golden)
        return input_path

    return _add


@pytest.fixture
def add_unofficial(corpus_dir: Path):
    def _add(category: str, name: str, content: str, golden: str | None) -> Path:
        category_dir = corpus_dir / "unofficial" / "input" / category
        category_dir.mkdir(exist_ok=True)
        input_path = category_dir / f"{name}.txt"
        input_path.write_text(content)
        if golden is not None:
            (corpus_dir / "unofficial" / "expected_output" / f"{name}_Expected_Output.txt").write_text(golden)
        return input_path

    return _add


@pytest.fixture
def config(corpus_dir: Path) -> GraderConfig:
    return GraderConfig(
        corpus_dir=corpus_dir,
        build_command=BUILD_COPIES_ARTIFACT,
        artifact_launcher=[sys.executable],
        build_timeout_seconds=60,
        test_timeout_seconds=10,
    )


@pytest.fixture
def artifact(tmp_path: Path) -> Path:
    path = tmp_path / "SEMANT"
    path.write_text(ARTIFACT_SOURCE)
    return path
