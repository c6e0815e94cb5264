"""
Test corpus discovery.

The official suite is a flat directory of TEST_<n>.txt inputs; the
unofficial suite groups its inputs into category subdirectories. Both
keep their goldens in one flat expected_output directory, keyed by the
bare test name.
"""

from collections.abc import Iterator
from pathlib import Path

from .config import (
    EXPECTED_DIRNAME,
    INPUT_DIRNAME,
    INPUT_SUFFIX,
    OFFICIAL_INPUT_PATTERN,
    OFFICIAL_SUITE_NAME,
    UNOFFICIAL_INPUT_PATTERN,
    UNOFFICIAL_SUITE_NAME,
)
from .models import TestCase, golden_path_for

__all__ = ["CategorizedCorpus", "FlatCorpus", "default_corpora", "golden_path_for"]


def _test_name(input_path: Path) -> str:
    if input_path.name.endswith(INPUT_SUFFIX):
        return input_path.name[: -len(INPUT_SUFFIX)]
    return input_path.stem


def _input_files(directory: Path, pattern: str) -> list[Path]:
    return sorted(p for p in directory.glob(pattern) if p.is_file())


class FlatCorpus:
    """
    Corpus whose inputs sit directly in one directory.

    Iterating re-reads the directory, so the sequence can be walked
    any number of times.
    """

    def __init__(
        self,
        name: str,
        input_dir: Path,
        expected_dir: Path,
        pattern: str = OFFICIAL_INPUT_PATTERN,
    ) -> None:
        self.name = name
        self.input_dir = input_dir
        self.expected_dir = expected_dir
        self.pattern = pattern

    def __iter__(self) -> Iterator[TestCase]:
        if not self.input_dir.is_dir():
            return
        for input_path in _input_files(self.input_dir, self.pattern):
            yield TestCase(
                name=_test_name(input_path),
                input_path=input_path,
                expected_dir=self.expected_dir,
            )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, {str(self.input_dir)!r})"


class CategorizedCorpus(FlatCorpus):
    """
    Corpus whose inputs are grouped one level deep by category.

    The category only organizes inputs; goldens are looked up by bare
    test name in the single expected directory.
    """

    def __init__(
        self,
        name: str,
        input_dir: Path,
        expected_dir: Path,
        pattern: str = UNOFFICIAL_INPUT_PATTERN,
    ) -> None:
        super().__init__(name, input_dir, expected_dir, pattern)

    def __iter__(self) -> Iterator[TestCase]:
        if not self.input_dir.is_dir():
            return
        categories = sorted(p for p in self.input_dir.iterdir() if p.is_dir())
        for category_dir in categories:
            for input_path in _input_files(category_dir, self.pattern):
                yield TestCase(
                    name=_test_name(input_path),
                    category=category_dir.name,
                    input_path=input_path,
                    expected_dir=self.expected_dir,
                )


def default_corpora(corpus_dir: Path) -> list[FlatCorpus]:
    """
    Build the official and unofficial corpora under corpus_dir.

    Args:
        corpus_dir: Directory containing official/ and unofficial/.

    Returns:
        [official corpus, unofficial corpus]
    """
    official = corpus_dir / OFFICIAL_SUITE_NAME
    unofficial = corpus_dir / UNOFFICIAL_SUITE_NAME
    return [
        FlatCorpus(
            OFFICIAL_SUITE_NAME,
            official / INPUT_DIRNAME,
            official / EXPECTED_DIRNAME,
        ),
        CategorizedCorpus(
            UNOFFICIAL_SUITE_NAME,
            unofficial / INPUT_DIRNAME,
            unofficial / EXPECTED_DIRNAME,
        ),
    ]
