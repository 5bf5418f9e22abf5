"""Function metrics shared by the language analyzers.

Two complexity strategies live here. Pattern-based analyzers count
control-flow keywords in the extracted body text, an approximation that can
overcount keywords that appear inside strings or comments. The tree-sitter
analyzer walks the syntax tree instead, so its count is exact for the node
kinds it recognises.
"""

from __future__ import annotations

import re
from typing import Iterable, List

_WHITESPACE_RE = re.compile(r"\s+")
_SIGNATURE_TYPE_RE = re.compile(r":\s*([^,\)]+)")
_OPENERS = {"(": ")", "[": "]", "{": "}", "<": ">"}
_CLOSERS = {value: key for key, value in _OPENERS.items()}
_PARAMETER_MARKERS = {"*", "/"}

# Syntax node kinds that add a single independent path.
_BRANCH_NODE_TYPES = frozenset({"if_expression", "while_expression", "loop_expression"})
_HEAP_ALLOCATION_CALLS = frozenset({"Box::new"})


def decision_point_pattern(
    keywords: Iterable[str], operators: Iterable[str] = ()
) -> re.Pattern[str]:
    """Compile a matcher for whole-word keywords and literal operators."""
    alternatives = []
    words = sorted(set(keywords), key=len, reverse=True)
    if words:
        alternatives.append(r"\b(?:" + "|".join(map(re.escape, words)) + r")\b")
    for operator in operators:
        alternatives.append(re.escape(operator))
    if not alternatives:
        raise ValueError("At least one keyword or operator is required")
    return re.compile("|".join(alternatives))


def textual_complexity(body: str, pattern: re.Pattern[str]) -> int:
    """Return 1 plus the number of decision points matched in ``body``."""
    return 1 + sum(1 for _ in pattern.finditer(body))


def count_lines(text: str) -> int:
    """Number of lines in ``text``; a matched function always spans at least one."""
    return max(1, len(text.splitlines()))


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def split_parameters(params: str) -> List[str]:
    """Split a parameter list on top-level commas.

    Commas nested in brackets, generics or default-value calls are kept with
    their parameter, so ``a: Dict[str, int], b`` yields two entries.
    """
    parts: List[str] = []
    depth = 0
    quote: str | None = None
    current: List[str] = []
    previous = ""
    for char in params:
        if quote is not None:
            current.append(char)
            if char == quote and previous != "\\":
                quote = None
            previous = char
            continue
        if char in {'"', "'", "`"}:
            quote = char
        elif char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            # Arrow types like ``=> void`` close nothing.
            if not (char == ">" and previous == "="):
                depth = max(0, depth - 1)
        elif char == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            previous = char
            continue
        current.append(char)
        previous = char
    parts.append("".join(current).strip())
    return [part for part in parts if part]


def normalize_parameters(params: str) -> str:
    """Render a parameter list on one line with single spaces after commas."""
    return ", ".join(collapse_whitespace(part) for part in split_parameters(params))


def count_parameters(params: str) -> int:
    """Count declared parameters, ignoring bare ``*`` and ``/`` separators."""
    return sum(1 for part in split_parameters(params) if part not in _PARAMETER_MARKERS)


def annotation_types(params: str) -> str:
    """Join the ``name: type`` annotations of a parameter list with ``, ``."""
    annotations: List[str] = []
    for part in split_parameters(params):
        _, separator, annotation = _split_top_level(part, ":")
        if not separator:
            continue
        annotation, _, _ = _split_top_level(annotation, "=")
        annotation = collapse_whitespace(annotation)
        if annotation:
            annotations.append(annotation)
    return ", ".join(annotations)


def signature_types(signature: str) -> str:
    """Extract every ``: <type>`` segment up to the next comma or closing parenthesis."""
    return ", ".join(match.group(1).strip() for match in _SIGNATURE_TYPE_RE.finditer(signature))


def structural_complexity(node, source: bytes) -> int:  # type: ignore[no-untyped-def]
    """Cyclomatic complexity of a tree-sitter subtree.

    Base 1, +1 per ``if``, ``while`` and ``loop`` expression, +1 per explicit
    heap allocation, and +N for a ``match`` with N arms.
    """
    complexity = 1
    stack = [node]
    while stack:
        current = stack.pop()
        kind = current.type
        if kind in _BRANCH_NODE_TYPES:
            complexity += 1
        elif kind == "match_expression":
            complexity += count_match_arms(current)
        elif kind == "call_expression" and _is_heap_allocation(current, source):
            complexity += 1
        stack.extend(current.named_children)
    return complexity


def count_match_arms(node) -> int:  # type: ignore[no-untyped-def]
    body = node.child_by_field_name("body")
    if body is None:
        return 0
    return sum(1 for child in body.named_children if child.type == "match_arm")


def _is_heap_allocation(node, source: bytes) -> bool:  # type: ignore[no-untyped-def]
    function = node.child_by_field_name("function")
    if function is None:
        return False
    name = source[function.start_byte : function.end_byte].decode("utf-8", errors="ignore")
    return collapse_whitespace(name) in _HEAP_ALLOCATION_CALLS


def _split_top_level(text: str, separator: str) -> tuple[str, str, str]:
    depth = 0
    for index, char in enumerate(text):
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth = max(0, depth - 1)
        elif char == separator and depth == 0:
            if separator == "=" and text[index + 1 : index + 2] in {">", "="}:
                continue
            return text[:index], separator, text[index + 1 :]
    return text, "", ""


def leading_width(line: str) -> int:
    """Indentation width of ``line`` with tabs expanded to eight columns."""
    expanded = line.expandtabs(8)
    return len(expanded) - len(expanded.lstrip(" "))


__all__ = [
    "annotation_types",
    "collapse_whitespace",
    "count_lines",
    "count_match_arms",
    "count_parameters",
    "decision_point_pattern",
    "leading_width",
    "normalize_parameters",
    "signature_types",
    "split_parameters",
    "structural_complexity",
    "textual_complexity",
]
