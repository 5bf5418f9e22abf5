"""Attach natural-language summaries to extracted functions."""

from __future__ import annotations

from typing import Protocol

from .analyzers.base import LanguageAnalyzer
from .errors import EnrichmentError
from .logging import get_logger
from .models import StructuralFacts

logger = get_logger("enrichment")


class Summarizer(Protocol):
    """Anything that turns a prompt into a short summary."""

    def summarize(self, prompt: str) -> str:
        ...


class Enricher:
    """Requests one summary per qualifying function.

    Which functions qualify, and the prompt used for each, is decided by the
    analyzer that produced the facts.
    """

    def __init__(self, summarizer: Summarizer) -> None:
        self._summarizer = summarizer

    def enrich(self, facts: StructuralFacts, analyzer: LanguageAnalyzer) -> StructuralFacts:
        for function in facts.functions:
            if function.summary is not None:
                continue
            prompt = analyzer.build_summary_prompt(function)
            if prompt is None:
                logger.debug("Skipping summary for short function %s", function.name)
                continue
            try:
                summary = self._summarizer.summarize(prompt)
            except EnrichmentError:
                raise
            except Exception as exc:
                raise EnrichmentError(
                    f"Failed to summarize function '{function.name}': {exc}"
                ) from exc
            function.attach_summary(summary.strip())
        return facts


__all__ = ["Enricher", "Summarizer"]
