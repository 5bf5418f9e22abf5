"""Tests for analyzer selection and discovery."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from folder_summary.analyzers import (
    AnalyzerRegistry,
    JavaScriptAnalyzer,
    LanguageAnalyzer,
    PythonAnalyzer,
    RustAnalyzer,
    discover_analyzers,
)
from folder_summary.errors import UnsupportedFileError
from folder_summary.models import StructuralFacts


class DummyAnalyzer(LanguageAnalyzer):
    """Test analyzer used for plugin discovery validation."""

    name = "dummy"
    language = "Dummy"
    suffixes = frozenset({".dm"})

    def analyze(self, content):  # pragma: no cover - unused
        return StructuralFacts()

    def build_summary_prompt(self, function):  # pragma: no cover - unused
        return None


def test_registry_selects_first_applicable_analyzer() -> None:
    registry = AnalyzerRegistry()

    assert isinstance(registry.select("src/main.rs"), RustAnalyzer)
    assert isinstance(registry.select("web/App.tsx"), JavaScriptAnalyzer)
    assert isinstance(registry.select("tool/cli.py"), PythonAnalyzer)
    assert isinstance(registry.select("LIB.RS"), RustAnalyzer)
    assert registry.select("notes.txt") is None


def test_registry_resolve_raises_for_unsupported_files() -> None:
    registry = AnalyzerRegistry()

    with pytest.raises(UnsupportedFileError) as excinfo:
        registry.resolve("notes.txt")

    assert str(excinfo.value) == "No suitable analyzer found for file: notes.txt"


def test_registry_order_decides_overlapping_suffixes() -> None:
    class GreedyAnalyzer(DummyAnalyzer):
        suffixes = frozenset({".py"})

    greedy = GreedyAnalyzer()
    registry = AnalyzerRegistry([greedy, PythonAnalyzer()])

    assert registry.select("module.py") is greedy


def test_supported_suffixes_lists_every_extension() -> None:
    suffixes = AnalyzerRegistry().supported_suffixes()

    assert {".rs", ".py", ".js", ".ts", ".tsx", ".jsx"} <= set(suffixes)
    assert suffixes == sorted(suffixes)


def test_discover_analyzers_returns_builtins_in_order() -> None:
    names = [analyzer.name for analyzer in discover_analyzers()]

    assert names[:3] == ["rust", "javascript", "python"]


def test_discover_analyzers_respects_enabled_filter() -> None:
    analyzers = discover_analyzers(["Python"])

    assert len(analyzers) == 1
    assert isinstance(analyzers[0], PythonAnalyzer)


def test_discover_analyzers_loads_entry_points(monkeypatch) -> None:
    dummy_entry = SimpleNamespace(name="dummy", load=lambda: DummyAnalyzer)

    class DummyEntryPoints(list):
        def select(self, **kwargs):
            if kwargs.get("group") == "folder_summary.analyzers":
                return self
            return []

    monkeypatch.setattr(
        "folder_summary.analyzers.metadata.entry_points",
        lambda: DummyEntryPoints([dummy_entry]),
    )

    analyzers = discover_analyzers(["dummy"])
    assert len(analyzers) == 1
    assert isinstance(analyzers[0], DummyAnalyzer)


def test_discover_analyzers_rejects_non_analyzer_entry_points(monkeypatch) -> None:
    bogus_entry = SimpleNamespace(name="bogus", load=lambda: object())

    class DummyEntryPoints(list):
        def select(self, **kwargs):
            return self

    monkeypatch.setattr(
        "folder_summary.analyzers.metadata.entry_points",
        lambda: DummyEntryPoints([bogus_entry]),
    )

    with pytest.raises(TypeError):
        discover_analyzers(["bogus"])


def test_discover_analyzers_raises_for_unknown_name() -> None:
    with pytest.raises(ValueError):
        discover_analyzers(["cobol"])
