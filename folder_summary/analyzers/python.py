"""Pattern-based analyzer for Python sources."""

from __future__ import annotations

import re
from typing import List

from . import metrics
from .base import PatternAnalyzer
from ..models import FunctionFact, StructuralFacts

_IMPORT_RE = re.compile(
    r"^[ \t]*(?:from[ \t]+(?P<module>[\w.]+)[ \t]+)?import[ \t]+"
    r"(?:\((?P<grouped>[^)]*)\)|(?P<names>[^\n]+))",
    re.MULTILINE,
)
_FUNCTION_RE = re.compile(
    r"^(?P<indent>[ \t]*)(?:async[ \t]+)?def[ \t]+(?P<name>\w+)[ \t]*"
    r"\((?P<params>[^()]*(?:\([^()]*\)[^()]*)*)\)"
    r"(?:[ \t]*->[ \t]*(?P<returns>[^:\n]+?))?[ \t]*:",
    re.MULTILINE,
)
_CLASS_RE = re.compile(r"^[ \t]*class[ \t]+(?P<name>\w+)", re.MULTILINE)
_DECISION_POINTS = metrics.decision_point_pattern(
    ("if", "elif", "for", "while", "except", "and", "or")
)


class PythonAnalyzer(PatternAnalyzer):
    """Extracts structural facts from Python with regular expressions.

    Bodies are found by indentation: the first non-blank line after the
    header fixes the body indent and the body ends at the first blank or
    shallower line.
    """

    name = "python"
    language = "Python"
    suffixes = frozenset({".py"})

    def analyze(self, content: str) -> StructuralFacts:
        return StructuralFacts(
            imports=self.extract_imports(content),
            functions=self.extract_functions(content),
            types=[match.group("name") for match in _CLASS_RE.finditer(content)],
            # Python has no export keyword.
            exports=[],
        )

    @staticmethod
    def extract_imports(content: str) -> List[str]:
        imports: List[str] = []
        for match in _IMPORT_RE.finditer(content):
            grouped = match.group("grouped")
            if grouped is not None:
                cleaned = " ".join(line.split("#", 1)[0] for line in grouped.splitlines())
                names = ", ".join(part.strip() for part in cleaned.split(",") if part.strip())
            else:
                names = match.group("names").split("#", 1)[0].strip().rstrip(";").strip()
            if not names:
                continue
            module = match.group("module")
            imports.append(f"{names} from {module}" if module else names)
        return imports

    def extract_functions(self, content: str) -> List[FunctionFact]:
        functions: List[FunctionFact] = []
        for match in _FUNCTION_RE.finditer(content):
            name = match.group("name")
            raw_params = match.group("params")
            returns = metrics.collapse_whitespace(match.group("returns") or "")
            signature = f"def {name}({metrics.normalize_parameters(raw_params)})"
            if returns:
                signature += f" -> {returns}"
            signature += ":"

            lines = extract_indented_body(content, match.end(), match.group("indent"))
            body = "\n".join(lines)
            functions.append(
                FunctionFact(
                    name=name,
                    signature=signature,
                    types=metrics.annotation_types(raw_params),
                    body=body,
                    lines_of_code=max(1, len(lines)),
                    cyclomatic_complexity=metrics.textual_complexity(body, _DECISION_POINTS),
                    parameters=metrics.count_parameters(raw_params),
                    returns=bool(returns),
                )
            )
        return functions


def extract_indented_body(content: str, start: int, header_indent: str = "") -> List[str]:
    """Return the body lines of a block whose header ends at ``start``.

    Text after the colon on the header line is a one-line body. Otherwise
    blank lines before the body are skipped, the first body line must be
    indented deeper than the header, and collection stops at the first blank
    or less-indented line.
    """
    remainder, *following = content[start:].splitlines() or [""]
    inline = remainder.split("#", 1)[0].strip()
    if inline:
        return [inline]

    header_width = metrics.leading_width(header_indent)
    body_width: int | None = None
    body: List[str] = []
    for line in following:
        if not line.strip():
            if body_width is None:
                continue
            break
        width = metrics.leading_width(line)
        if body_width is None:
            if width <= header_width:
                break
            body_width = width
        elif width < body_width:
            break
        body.append(line)
    return body


__all__ = ["PythonAnalyzer", "extract_indented_body"]
