"""Concurrent, cache-aware analysis of many source files."""

from __future__ import annotations

import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .analyzers import AnalyzerRegistry
from .enrichment import Enricher
from .errors import FileAccessError, FileAnalysisError, SchedulingError
from .logging import get_logger
from .models import StructuralFacts
from .stores import AnalysisCache

ProgressCallback = Callable[[str], None]


def default_max_workers() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


@dataclass
class OrchestratorSettings:
    """Tunables for a run."""

    max_workers: Optional[int] = None

    def resolved_workers(self) -> int:
        if self.max_workers is None:
            return default_max_workers()
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        return self.max_workers


@dataclass
class RunStats:
    cache_hits: int = 0
    analyzed: int = 0
    failed: int = 0


class Orchestrator:
    """Analyzes files on a bounded worker pool, reusing cached results.

    The cache is the only state shared between workers. It is guarded by a
    single lock that is held for the lookup and for the write, never while a
    file is read, analyzed or enriched.
    """

    def __init__(
        self,
        registry: AnalyzerRegistry,
        cache: AnalysisCache,
        *,
        enricher: Enricher | None = None,
        settings: OrchestratorSettings | None = None,
        progress: ProgressCallback | None = None,
    ) -> None:
        self.registry = registry
        self.cache = cache
        self.enricher = enricher
        self.settings = settings or OrchestratorSettings()
        self.progress = progress
        self.logger = get_logger("orchestrator")
        self._lock = threading.Lock()
        self.stats = RunStats()

    def analyze_files(self, files: Sequence[str]) -> Dict[str, StructuralFacts]:
        """Analyze ``files`` and return their facts keyed and sorted by path.

        Every task is awaited before any failure is reported. If one or more
        files failed, the failure of the first of them in input order is
        raised as a :class:`FileAnalysisError`.
        """
        unique = list(dict.fromkeys(str(path) for path in files))
        self.stats = RunStats()
        if not unique:
            return {}

        workers = min(self.settings.resolved_workers(), len(unique))
        self.logger.info("Analyzing %d files with %d workers", len(unique), workers)

        results: Dict[str, StructuralFacts] = {}
        failures: List[FileAnalysisError] = []
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="analysis") as pool:
            futures: List[Tuple[str, Future[StructuralFacts]]] = []
            for path in unique:
                try:
                    futures.append((path, pool.submit(self._process, path)))
                except RuntimeError as exc:
                    failures.append(
                        FileAnalysisError(path, SchedulingError(f"Unable to schedule task: {exc}"))
                    )
            for path, future in futures:
                try:
                    results[path] = future.result()
                except FileAnalysisError as exc:
                    failures.append(exc)
                except Exception as exc:
                    failures.append(
                        FileAnalysisError(path, SchedulingError(f"Unable to join task: {exc}"))
                    )

        self.stats.failed = len(failures)
        if failures:
            for failure in failures:
                self.logger.error("Analysis failed for %s", failure)
            self.logger.error(
                "%d of %d files failed (%d from cache, %d analyzed)",
                self.stats.failed,
                len(unique),
                self.stats.cache_hits,
                self.stats.analyzed,
            )
            order = {path: index for index, path in enumerate(unique)}
            failures.sort(key=lambda failure: order.get(failure.path, len(order)))
            raise failures[0]

        self.logger.info(
            "Analysis complete: %d files, %d from cache, %d analyzed",
            len(results),
            self.stats.cache_hits,
            self.stats.analyzed,
        )
        return dict(sorted(results.items()))

    def _process(self, path: str) -> StructuralFacts:
        try:
            return self._analyze_one(path)
        except Exception as exc:
            raise FileAnalysisError(path, exc) from exc
        finally:
            if self.progress is not None:
                self.progress(path)

    def _analyze_one(self, path: str) -> StructuralFacts:
        with self._lock:
            cached = self.cache.get(path)
        if cached is not None:
            self.logger.debug("Cache hit for %s", path)
            with self._lock:
                self.stats.cache_hits += 1
            return cached

        self.logger.debug("Cache miss for %s", path)
        analyzer = self.registry.resolve(path)
        content = _read_source(path)
        facts = analyzer.analyze(content)
        if self.enricher is not None:
            facts = self.enricher.enrich(facts, analyzer)

        with self._lock:
            self.cache.set(path, facts)
            self.stats.analyzed += 1
        return facts


def _read_source(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FileAccessError(f"Unable to read {path}: {exc}") from exc


__all__ = [
    "Orchestrator",
    "OrchestratorSettings",
    "ProgressCallback",
    "RunStats",
    "default_max_workers",
]
