"""Core data models shared across folder-summary components."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class FunctionFact:
    """Signature, size and complexity metrics for one extracted function."""

    name: str
    signature: str
    types: str
    body: Optional[str]
    lines_of_code: int
    cyclomatic_complexity: int
    parameters: int
    returns: bool
    summary: Optional[str] = None

    def attach_summary(self, summary: str) -> None:
        if self.summary is not None:
            raise ValueError(f"Function '{self.name}' already has a summary")
        self.summary = summary

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "FunctionFact":
        body = payload.get("body")
        summary = payload.get("summary")
        return cls(
            name=str(payload["name"]),
            signature=str(payload["signature"]),
            types=str(payload.get("types", "")),
            body=body if isinstance(body, str) else None,
            lines_of_code=int(payload["lines_of_code"]),
            cyclomatic_complexity=int(payload["cyclomatic_complexity"]),
            parameters=int(payload["parameters"]),
            returns=bool(payload["returns"]),
            summary=summary if isinstance(summary, str) else None,
        )


@dataclass
class StructuralFacts:
    """Uniform per-file record produced by every language analyzer."""

    imports: List[str] = field(default_factory=list)
    functions: List[FunctionFact] = field(default_factory=list)
    types: List[str] = field(default_factory=list)
    exports: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "imports": list(self.imports),
            "functions": [function.to_dict() for function in self.functions],
            "types": list(self.types),
            "exports": list(self.exports),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "StructuralFacts":
        """Rebuild facts from a serialized payload.

        Raises ``KeyError``, ``TypeError`` or ``ValueError`` for malformed
        payloads so callers can decide whether to discard them.
        """
        if not isinstance(payload, dict):
            raise TypeError("Structural facts payload must be a mapping")
        functions = payload.get("functions", [])
        if not isinstance(functions, list):
            raise TypeError("'functions' must be a list")
        return cls(
            imports=[str(item) for item in payload.get("imports", [])],
            functions=[FunctionFact.from_dict(item) for item in functions],
            types=[str(item) for item in payload.get("types", [])],
            exports=[str(item) for item in payload.get("exports", [])],
        )
