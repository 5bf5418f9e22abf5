"""Base classes for language analyzer plugins."""

from abc import ABC, abstractmethod
from pathlib import PurePath
from typing import ClassVar, FrozenSet, Optional

from ..models import FunctionFact, StructuralFacts


class LanguageAnalyzer(ABC):
    """Contract for analyzers that turn one source file into structural facts.

    Implementations are stateless and shared between worker threads.
    """

    name: ClassVar[str] = ""
    language: ClassVar[str] = ""
    suffixes: ClassVar[FrozenSet[str]] = frozenset()

    def can_analyze(self, file_path: str) -> bool:
        """Return True when the path has one of this analyzer's extensions."""
        return PurePath(file_path).suffix.lower() in self.suffixes

    @abstractmethod
    def analyze(self, content: str) -> StructuralFacts:
        """Extract imports, functions, types and exports from ``content``."""

    @abstractmethod
    def build_summary_prompt(self, function: FunctionFact) -> Optional[str]:
        """Return the enrichment prompt for ``function``, or None to skip it."""


class PatternAnalyzer(LanguageAnalyzer):
    """Shared triage for analyzers that extract facts with text patterns."""

    summary_threshold: ClassVar[int] = 6

    def build_summary_prompt(self, function: FunctionFact) -> Optional[str]:
        if function.lines_of_code <= self.summary_threshold:
            return None
        lines = [
            f"Summarize the following {self.language} function:",
            "",
            f"Name: {function.name}",
            f"Signature: {function.signature}",
        ]
        if function.types:
            lines.append(f"Types: {function.types}")
        lines.append(f"Body: {function.body or '(Function body not available)'}")
        return "\n".join(lines)
