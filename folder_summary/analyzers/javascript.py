"""Pattern-based analyzer for JavaScript and TypeScript sources."""

from __future__ import annotations

import re
from typing import List, Tuple

from . import metrics
from .base import PatternAnalyzer
from ..models import FunctionFact, StructuralFacts

# One level of nested parentheses keeps default values like ``a = f()`` intact.
_PARAMS = r"(?P<params>[^()]*(?:\([^()]*\)[^()]*)*)"
_IMPORT_CLAUSE = r"(?:\{[^}]*\}|\*\s+as\s+[\w$]+|[\w$]+)"

_IMPORT_RE = re.compile(
    r"^[ \t]*(?:"
    r"import\s+(?:" + _IMPORT_CLAUSE + r"(?:\s*,\s*" + _IMPORT_CLAUSE + r")*\s+from\s+)?"
    r"['\"](?P<module>[^'\"\n]+)['\"]"
    r"|(?:const|let|var)\s+(?:\{[^}]*\}|[\w$]+)\s*=\s*require\s*\(\s*"
    r"['\"](?P<required>[^'\"\n]+)['\"]\s*\)"
    r")[ \t]*(?:;|$)",
    re.MULTILINE,
)
_FUNCTION_RE = re.compile(
    r"^[ \t]*(?:export\s+(?:default\s+)?)?(?:async\s+)?function\s*\*?\s*(?P<name>[\w$]+)\s*"
    r"(?:<[^>(]*>\s*)?\(" + _PARAMS + r"\)(?:\s*:\s*(?P<returns>[^{;]+?))?\s*\{",
    re.MULTILINE,
)
_ARROW_RE = re.compile(
    r"^[ \t]*(?:export\s+)?(?:const|let|var)\s+(?P<name>[\w$]+)\s*(?::[^=\n]+)?=\s*(?:async\s+)?"
    r"(?:\(" + _PARAMS + r"\)|(?P<param>[\w$]+))(?:\s*:\s*(?P<returns>[^=\n]+?))?\s*=>",
    re.MULTILINE,
)
_TYPE_RE = re.compile(
    r"^[ \t]*(?:export\s+)?(?:declare\s+)?(?:type|interface)\s+(?P<name>[\w$]+)",
    re.MULTILINE,
)
_EXPORT_RE = re.compile(
    r"^export\s+(?:default\s+)?(?:declare\s+)?(?:abstract\s+)?(?:async\s+)?"
    r"(?:const|let|var|function\*?|class|type|interface|enum)\s+(?P<name>[\w$]+)",
    re.MULTILINE,
)
_DECISION_POINTS = metrics.decision_point_pattern(
    ("if", "else", "for", "while", "do", "switch", "case", "catch"),
    operators=("&&", "||"),
)
_INLINE_SPACE_RE = re.compile(r"[ \t]*")


class JavaScriptAnalyzer(PatternAnalyzer):
    """Extracts structural facts from JavaScript/TypeScript with regular expressions.

    Nothing here validates syntax: malformed input simply produces fewer
    matches. Function bodies come from a balanced-brace scan which also counts
    braces inside strings and comments.
    """

    name = "javascript"
    language = "JavaScript/TypeScript"
    suffixes = frozenset({".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx"})

    def analyze(self, content: str) -> StructuralFacts:
        return StructuralFacts(
            imports=self.extract_imports(content),
            functions=self.extract_functions(content),
            types=[match.group("name") for match in _TYPE_RE.finditer(content)],
            exports=[match.group("name") for match in _EXPORT_RE.finditer(content)],
        )

    @staticmethod
    def extract_imports(content: str) -> List[str]:
        return [
            match.group("module") or match.group("required")
            for match in _IMPORT_RE.finditer(content)
        ]

    def extract_functions(self, content: str) -> List[FunctionFact]:
        found: List[Tuple[int, FunctionFact]] = []
        for match in _FUNCTION_RE.finditer(content):
            lines = extract_braced_body(content, match.end(), depth=1)
            found.append((match.start(), self._build_fact(match, lines, arrow=False)))
        for match in _ARROW_RE.finditer(content):
            start, depth = _arrow_body_start(content, match.end())
            lines = extract_braced_body(content, start, depth=depth)
            found.append((match.start(), self._build_fact(match, lines, arrow=True)))
        found.sort(key=lambda item: item[0])
        return [fact for _, fact in found]

    @staticmethod
    def _build_fact(match: re.Match[str], lines: List[str], *, arrow: bool) -> FunctionFact:
        name = match.group("name")
        raw_params = match.group("params")
        if raw_params is None:
            raw_params = match.groupdict().get("param") or ""
        params = metrics.normalize_parameters(raw_params)
        returns = metrics.collapse_whitespace(match.group("returns") or "")
        annotation = f": {returns}" if returns else ""
        if arrow:
            signature = f"const {name} = ({params}){annotation} =>"
        else:
            signature = f"function {name}({params}){annotation}"

        body_lines = lines[1:] if lines and not lines[0].strip() else lines
        body = "\n".join(body_lines)
        return FunctionFact(
            name=name,
            signature=signature,
            types=metrics.annotation_types(raw_params),
            body=body,
            lines_of_code=max(1, len(lines)),
            cyclomatic_complexity=metrics.textual_complexity(body, _DECISION_POINTS),
            parameters=metrics.count_parameters(raw_params),
            returns=bool(returns),
        )


def extract_braced_body(content: str, start: int, *, depth: int = 1) -> List[str]:
    """Collect lines from ``start`` until the running brace depth returns to zero.

    ``depth`` is the nesting already open at ``start`` (1 just after a
    function's opening brace). The first element is the remainder of the
    header line; the last is the line that closes the body. Unbalanced input
    runs to the end of the content.
    """
    body: List[str] = []
    for line in content[start:].splitlines():
        body.append(line)
        depth += line.count("{") - line.count("}")
        if depth <= 0:
            break
    return body


def _arrow_body_start(content: str, position: int) -> Tuple[int, int]:
    offset = _INLINE_SPACE_RE.match(content, position).end()  # type: ignore[union-attr]
    if content.startswith("{", offset):
        return offset + 1, 1
    return position, 0


__all__ = ["JavaScriptAnalyzer", "extract_braced_body"]
