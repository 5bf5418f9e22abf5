"""End-to-end summary pipeline: collect, analyze, enrich, report."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .analyzers import AnalyzerRegistry, discover_analyzers
from .config import SummaryConfig
from .enrichment import Enricher, Summarizer
from .errors import FolderSummaryError
from .llm import build_runner
from .logging import get_logger, timed
from .manifests import parse_package_files
from .models import StructuralFacts
from .orchestrator import Orchestrator, OrchestratorSettings, ProgressCallback
from .repo_scanner import RepoScanner
from .report import SummaryReport
from .stores import AnalysisCache

_AUTO_SUMMARIZER = object()


@dataclass
class PipelineResult:
    """Outcome of a pipeline run."""

    directory: Path
    analysis: Dict[str, StructuralFacts]
    docs: List[str] = field(default_factory=list)
    package_info: Dict[str, str] = field(default_factory=dict)
    report_path: Optional[Path] = None


class SummaryPipeline:
    """Wires configuration, scanning, analysis and reporting for one project."""

    def __init__(
        self,
        config: SummaryConfig,
        *,
        summarizer: Summarizer | None | object = _AUTO_SUMMARIZER,
        registry: AnalyzerRegistry | None = None,
        cache: AnalysisCache | None = None,
        scanner: RepoScanner | None = None,
        report: SummaryReport | None = None,
    ) -> None:
        self.config = config
        self.logger = get_logger("pipeline")
        if summarizer is _AUTO_SUMMARIZER:
            summarizer = build_runner(config.llm)
        self.summarizer: Summarizer | None = summarizer  # type: ignore[assignment]
        self.registry = registry or AnalyzerRegistry(discover_analyzers(config.analysis.enabled))
        self.cache = cache if cache is not None else AnalysisCache(config.cache_path())
        self.scanner = scanner or RepoScanner(config)
        self.report = report or SummaryReport(config)

    @property
    def model_name(self) -> Optional[str]:
        return getattr(self.summarizer, "model_name", None)

    def collect_code_files(self, directory: str | Path) -> List[str]:
        return self.scanner.collect_code_files(directory, self.registry.supported_suffixes())

    def analyze(
        self,
        directory: str | Path,
        *,
        files: Sequence[str] | None = None,
        progress: ProgressCallback | None = None,
    ) -> PipelineResult:
        """Analyze every code file under ``directory`` without writing a report."""
        root = Path(directory).expanduser().resolve()
        code_files = list(files) if files is not None else self.collect_code_files(root)
        if not code_files:
            raise FolderSummaryError(
                f"No code files found to analyze in {root}. Check the configuration and path."
            )

        orchestrator = Orchestrator(
            self.registry,
            self.cache,
            enricher=Enricher(self.summarizer) if self.summarizer is not None else None,
            settings=OrchestratorSettings(max_workers=self.config.analysis.max_workers),
            progress=progress,
        )
        with timed(self.logger, f"Analysis of {len(code_files)} files"):
            analysis = orchestrator.analyze_files(code_files)

        return PipelineResult(
            directory=root,
            analysis=analysis,
            docs=self.scanner.collect_documentation_files(root),
            package_info=parse_package_files(root),
        )

    def run(
        self,
        directory: str | Path,
        *,
        files: Sequence[str] | None = None,
        progress: ProgressCallback | None = None,
    ) -> PipelineResult:
        """Analyze ``directory`` and write the Markdown summary."""
        result = self.analyze(directory, files=files, progress=progress)
        result.report_path = self.report.write(
            result.directory,
            docs=result.docs,
            package_info=result.package_info,
            analysis=result.analysis,
        )
        return result


__all__ = ["PipelineResult", "SummaryPipeline"]
