"""Tree-sitter powered analyzer for Rust sources."""

from __future__ import annotations

from typing import Iterable, List, Optional

import tree_sitter_rust
from tree_sitter import Language, Node, Parser

from . import metrics
from .base import LanguageAnalyzer
from ..errors import ParseError
from ..models import FunctionFact, StructuralFacts

RUST_LANGUAGE = Language(tree_sitter_rust.language())

# Bodies of longer functions are dropped to bound memory and cache size.
BODY_LINE_LIMIT = 20
LARGE_FUNCTION_LINES = 200
CHUNK_SIZE = 5

_TYPE_ITEMS = frozenset({"struct_item", "enum_item", "type_item", "impl_item"})
_EXPORT_KINDS = {
    "function_item": "fn",
    "struct_item": "struct",
    "enum_item": "enum",
    "type_item": "type",
}
_PARAMETER_NODES = frozenset({"parameter", "self_parameter", "variadic_parameter"})


class RustAnalyzer(LanguageAnalyzer):
    """Extracts structural facts from a full Rust syntax tree.

    Unlike the pattern analyzers this one rejects malformed files: any error
    or missing node in the tree raises :class:`ParseError`.
    """

    name = "rust"
    language = "Rust"
    suffixes = frozenset({".rs"})

    def analyze(self, content: str) -> StructuralFacts:
        source = content.encode("utf-8")
        # Parsers carry per-parse state, so each call gets its own.
        tree = Parser(RUST_LANGUAGE).parse(source)
        root = tree.root_node
        if root.has_error:
            raise _parse_error(root)

        items = root.named_children
        return StructuralFacts(
            imports=[
                metrics.collapse_whitespace(_node_text(item, source))
                for item in items
                if item.type == "use_declaration"
            ],
            functions=[
                extract_function_metrics(item, source)
                for item in items
                if item.type == "function_item"
            ],
            types=[_node_text(item, source) for item in items if item.type in _TYPE_ITEMS],
            exports=list(_public_items(items, source)),
        )

    def build_summary_prompt(self, function: FunctionFact) -> Optional[str]:
        if function.lines_of_code > LARGE_FUNCTION_LINES:
            return build_large_function_prompt(function)
        return (
            "Summarize the following Rust function:\n\n"
            f"Name: {function.name}\n"
            f"Signature: {function.signature}\n"
            f"Types: {function.types}\n"
            f"Body: {function.body or '(function body omitted)'}"
        )


def extract_function_metrics(node: Node, source: bytes) -> FunctionFact:
    """Build a :class:`FunctionFact` from a ``function_item`` node."""
    name_node = node.child_by_field_name("name")
    parameters = node.child_by_field_name("parameters")
    body = node.child_by_field_name("body")

    header_end = body.start_byte if body is not None else node.end_byte
    header_start = _signature_start(node)
    header = metrics.collapse_whitespace(
        source[header_start:header_end].decode("utf-8", errors="replace")
    )
    lines_of_code = node.end_point[0] - node.start_point[0] + 1

    return FunctionFact(
        name=_node_text(name_node, source) if name_node is not None else "",
        signature=f"{header} {{ ... }}",
        types=metrics.signature_types(_node_text(parameters, source)) if parameters else "",
        body=_node_text(body, source) if body is not None and lines_of_code <= BODY_LINE_LIMIT else None,
        lines_of_code=lines_of_code,
        cyclomatic_complexity=metrics.structural_complexity(node, source),
        parameters=sum(1 for child in parameters.named_children if child.type in _PARAMETER_NODES)
        if parameters is not None
        else 0,
        returns=node.child_by_field_name("return_type") is not None,
    )


def build_large_function_prompt(function: FunctionFact) -> str:
    """Prompt for very long functions: the body in fixed-size parts, each with type context.

    Bodies of long functions are not retained, so in practice this prompt is
    structural (name, signature and types only).
    """
    parts = [
        "Summarize this large Rust function:\n\n"
        f"Name: {function.name}\n"
        f"Signature: {function.signature}\n"
        f"Types: {function.types}\n\n"
        "Function body in parts:\n"
    ]
    lines = (function.body or "").splitlines()
    for index in range(0, len(lines), CHUNK_SIZE):
        chunk = lines[index : index + CHUNK_SIZE]
        parts.append(f"\nPart {index // CHUNK_SIZE + 1}:\n")
        parts.extend(f"{line}\n" for line in chunk)
        parts.append(f"\nTypes: {function.types}\n")
    parts.append(
        "\nPlease provide a summary of the function's purpose and behavior based on these parts."
    )
    return "".join(parts)


def _public_items(items: Iterable[Node], source: bytes) -> Iterable[str]:
    for item in items:
        kind = _EXPORT_KINDS.get(item.type)
        if kind is None:
            continue
        visibility = next(
            (child for child in item.children if child.type == "visibility_modifier"), None
        )
        # Restricted visibility such as pub(crate) is not part of the public surface.
        if visibility is None or _node_text(visibility, source).strip() != "pub":
            continue
        name_node = item.child_by_field_name("name")
        if name_node is not None:
            yield f"{kind} {_node_text(name_node, source)}"


def _signature_start(node: Node) -> int:
    for child in node.children:
        if child.type != "visibility_modifier":
            return child.start_byte
    return node.start_byte


def _parse_error(root: Node) -> ParseError:
    stack: List[Node] = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            line, column = node.start_point[0] + 1, node.start_point[1] + 1
            problem = f"missing '{node.type}'" if node.is_missing else "unexpected syntax"
            return ParseError(f"Failed to parse Rust source: {problem}", line=line, column=column)
        if node.has_error:
            stack.extend(reversed(node.children))
    return ParseError("Failed to parse Rust source")


def _node_text(node: Node, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


__all__ = [
    "RustAnalyzer",
    "build_large_function_prompt",
    "extract_function_metrics",
]
