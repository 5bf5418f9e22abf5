"""Language analyzers and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Iterable, List, Optional, Sequence, Set

from ..errors import UnsupportedFileError
from .base import LanguageAnalyzer, PatternAnalyzer
from .javascript import JavaScriptAnalyzer
from .python import PythonAnalyzer
from .rust import RustAnalyzer

_ENTRY_POINT_GROUP = "folder_summary.analyzers"

# Registration order is selection order: the first applicable analyzer wins.
_BUILTIN_FACTORIES: dict[str, Callable[[], LanguageAnalyzer]] = {
    "rust": RustAnalyzer,
    "javascript": JavaScriptAnalyzer,
    "python": PythonAnalyzer,
}


class AnalyzerRegistry:
    """Ordered collection of analyzers used to pick one per file."""

    def __init__(self, analyzers: Sequence[LanguageAnalyzer] | None = None) -> None:
        self._analyzers: List[LanguageAnalyzer] = (
            list(analyzers) if analyzers is not None else discover_analyzers()
        )

    @property
    def analyzers(self) -> List[LanguageAnalyzer]:
        return list(self._analyzers)

    def select(self, file_path: str) -> Optional[LanguageAnalyzer]:
        for analyzer in self._analyzers:
            if analyzer.can_analyze(file_path):
                return analyzer
        return None

    def resolve(self, file_path: str) -> LanguageAnalyzer:
        """Like :meth:`select` but raises :class:`UnsupportedFileError` on no match."""
        analyzer = self.select(file_path)
        if analyzer is None:
            raise UnsupportedFileError(file_path)
        return analyzer

    def supported_suffixes(self) -> List[str]:
        suffixes: Set[str] = set()
        for analyzer in self._analyzers:
            suffixes.update(analyzer.suffixes)
        return sorted(suffixes)


def discover_analyzers(enabled: Sequence[str] | None = None) -> List[LanguageAnalyzer]:
    """Return instantiated analyzers, honoring optional enabled names."""

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    analyzers: List[LanguageAnalyzer] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], LanguageAnalyzer]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, LanguageAnalyzer):
            raise TypeError(f"Analyzer factory for '{name}' did not return a LanguageAnalyzer")
        analyzers.append(instance)
        seen.add(key)
        if enabled_set is not None:
            enabled_set.discard(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        try:
            loaded = entry.load()
        except Exception as exc:
            raise RuntimeError(f"Failed to load analyzer entry point '{entry.name}': {exc}") from exc

        def _factory(obj: object = loaded) -> LanguageAnalyzer:
            return _coerce_analyzer(obj)

        _add(entry.name, _factory)

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ValueError(f"Unknown analyzers requested: {missing}")

    return analyzers


def _coerce_analyzer(obj: object) -> LanguageAnalyzer:
    if isinstance(obj, LanguageAnalyzer):
        return obj
    if isinstance(obj, type) and issubclass(obj, LanguageAnalyzer):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, LanguageAnalyzer):
            return instance
    raise TypeError("Analyzer entry point must be a LanguageAnalyzer subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "AnalyzerRegistry",
    "JavaScriptAnalyzer",
    "LanguageAnalyzer",
    "PatternAnalyzer",
    "PythonAnalyzer",
    "RustAnalyzer",
    "discover_analyzers",
]
