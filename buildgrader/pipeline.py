"""
The build-and-grade pipeline.

Extract -> validate -> build -> enumerate -> execute -> aggregate -> report.
A fatal error in the first three stages ends the run with both suites
empty; per-test problems are recorded and the run continues.
"""

from pathlib import Path
from typing import Optional

from .builder import BuildInvoker
from .config import OUTPUT_DIR_SUFFIX
from .config_loader import GraderConfig
from .corpus import FlatCorpus, default_corpora
from .errors import GraderError
from .executor import TestExecutor
from .models import GradingReport, PipelineStage, SuiteReport
from .reporter import ConsoleReporter
from .results_aggregator import combine_reports, empty_suite, fatal_error_from, save_report, summarize_suite
from .workspace import extract_archive, open_workspace, validate_structure


class GradingPipeline:
    """
    Grades one submission archive against the configured corpora.
    """

    def __init__(
        self,
        config: GraderConfig,
        reporter: Optional[ConsoleReporter] = None,
        corpora: Optional[list[FlatCorpus]] = None,
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            config: Grader configuration.
            reporter: Receives progress events; None runs silently.
            corpora: Suites to run, defaulting to official and unofficial under config.corpus_dir.
        """
        self.config = config
        self.reporter = reporter
        self.corpora = corpora if corpora is not None else default_corpora(config.corpus_dir)
        self.stage = PipelineStage.INIT

    def _emit(self, event: str, *args) -> None:
        if self.reporter is not None:
            getattr(self.reporter, event)(*args)

    def run(self, archive_path: Path) -> GradingReport:
        """
        Run the full pipeline on a submission archive.

        Args:
            archive_path: Path to the submission zip file.

        Returns:
            GradingReport; its exit_code is 0 iff every test passed.
        """
        self.stage = PipelineStage.INIT
        archive_path = archive_path.resolve()
        identifiers: tuple[str, ...] = ()
        self._emit("start", archive_path)

        with open_workspace() as workspace_root:
            try:
                self._emit("stage", 1, "Extracting submission...")
                extract_archive(archive_path, workspace_root)
                self.stage = PipelineStage.EXTRACTED

                submission = validate_structure(archive_path, workspace_root, self.config)
                identifiers = submission.identifiers
                self.stage = PipelineStage.VALIDATED
                self._emit("submission_ready", identifiers)

                self._emit("stage", 2, f"Building project with {' '.join(self.config.build_command)}...")
                builder = BuildInvoker(
                    build_command=self.config.build_command,
                    artifact_name=self.config.artifact_name,
                    timeout_seconds=self.config.build_timeout_seconds,
                )
                build = builder.build(submission.build_root)
                self.stage = PipelineStage.BUILT
                self._emit("build_succeeded", build)
            except GraderError as e:
                error = fatal_error_from(e)
                self._emit("fatal", error)
                report = combine_reports(
                    [empty_suite(corpus.name) for corpus in self.corpora],
                    identifiers=identifiers,
                    stage=self.stage,
                    error=error,
                )
                return self._finish(report)

            self.stage = PipelineStage.ENUMERATED
            executor = TestExecutor(
                artifact_path=build.artifact_path,
                launcher=self.config.artifact_launcher,
                timeout_seconds=self.config.test_timeout_seconds,
                jobs=self.config.jobs,
            )

            suites: list[SuiteReport] = []
            for number, corpus in enumerate(self.corpora, 3):
                self.stage = PipelineStage.EXECUTING
                self._emit("stage", number, f"Running {corpus.name.capitalize()} Tests")
                self._emit("suite_started", corpus.name)
                output_dir = workspace_root / f"{corpus.name}{OUTPUT_DIR_SUFFIX}"
                suite = summarize_suite(corpus.name, self._run_suite(executor, corpus, output_dir))
                self._emit("suite_finished", suite)
                suites.append(suite)

            self.stage = PipelineStage.AGGREGATED
            report = combine_reports(suites, identifiers=identifiers, stage=self.stage)
            return self._finish(report)

    def _run_suite(self, executor: TestExecutor, corpus: FlatCorpus, output_dir: Path):
        for result in executor.run_suite(corpus, output_dir):
            self._emit("test_finished", result)
            yield result

    def _finish(self, report: GradingReport) -> GradingReport:
        if report.error is None:
            self.stage = PipelineStage.REPORTED
        report = report.model_copy(update={"stage": self.stage})
        self._emit("summary", report)
        if self.config.report_path is not None:
            save_report(report, self.config.report_path)
        self.stage = PipelineStage.TERMINAL
        return report
