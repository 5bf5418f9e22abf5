"""Tests for the enrichment step."""

from __future__ import annotations

import pytest

from folder_summary.analyzers import PythonAnalyzer, RustAnalyzer
from folder_summary.enrichment import Enricher
from folder_summary.errors import EnrichmentError
from tests._fixtures.summarizers import FailingSummarizer, RecordingSummarizer

_BODY = "\n".join(f"    step_{index}()" for index in range(7))
PYTHON_SOURCE = f"def short():\n    return 1\n\ndef long():\n{_BODY}\n"


def test_only_large_pattern_functions_are_summarized(summarizer: RecordingSummarizer) -> None:
    analyzer = PythonAnalyzer()
    facts = analyzer.analyze(PYTHON_SOURCE)

    enriched = Enricher(summarizer).enrich(facts, analyzer)

    short, long = enriched.functions
    assert short.summary is None
    assert long.summary == "A short summary."
    assert len(summarizer.prompts) == 1
    assert "Name: long" in summarizer.prompts[0]


def test_every_rust_function_is_summarized(summarizer: RecordingSummarizer) -> None:
    analyzer = RustAnalyzer()
    facts = analyzer.analyze("fn one() {}\nfn two() -> u8 { 2 }\n")

    Enricher(summarizer).enrich(facts, analyzer)

    assert [function.summary for function in facts.functions] == [
        "A short summary.",
        "A short summary.",
    ]
    assert len(summarizer.prompts) == 2


def test_existing_summaries_are_kept(summarizer: RecordingSummarizer) -> None:
    analyzer = RustAnalyzer()
    facts = analyzer.analyze("fn one() {}\n")
    facts.functions[0].attach_summary("Does nothing.")

    Enricher(summarizer).enrich(facts, analyzer)

    assert facts.functions[0].summary == "Does nothing."
    assert summarizer.prompts == []


def test_summarizer_failures_become_enrichment_errors() -> None:
    analyzer = RustAnalyzer()
    facts = analyzer.analyze("fn one() {}\n")

    with pytest.raises(EnrichmentError) as excinfo:
        Enricher(FailingSummarizer()).enrich(facts, analyzer)

    assert "one" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_attach_summary_only_once() -> None:
    facts = RustAnalyzer().analyze("fn one() {}\n")
    function = facts.functions[0]
    function.attach_summary("first")

    with pytest.raises(ValueError):
        function.attach_summary("second")
