"""Tests for the Python pattern analyzer."""

from __future__ import annotations

import textwrap

from folder_summary.analyzers.python import PythonAnalyzer, extract_indented_body


def _analyze(source: str):
    return PythonAnalyzer().analyze(textwrap.dedent(source).lstrip("\n"))


def test_body_excludes_dedented_line() -> None:
    facts = _analyze(
        """
        def outer(a, b: int = 2) -> int:
            if a:
                return b
            return a
        x = 1
        """
    )

    (function,) = facts.functions
    assert function.signature == "def outer(a, b: int = 2) -> int:"
    assert function.body == "    if a:\n        return b\n    return a"
    assert "x = 1" not in function.body
    assert function.lines_of_code == 3
    assert function.cyclomatic_complexity == 2
    assert function.types == "int"
    assert function.parameters == 2
    assert function.returns is True


def test_parameters_may_span_lines() -> None:
    facts = _analyze(
        """
        async def fetch(
            url: str,
            timeout: float = 1.0,
        ):
            return url
        """
    )

    (function,) = facts.functions
    assert function.name == "fetch"
    assert function.signature == "def fetch(url: str, timeout: float = 1.0):"
    assert function.types == "str, float"
    assert function.parameters == 2
    assert function.returns is False


def test_one_line_function_uses_header_remainder() -> None:
    facts = PythonAnalyzer().analyze("def answer(): return 42\n")

    (function,) = facts.functions
    assert function.body == "return 42"
    assert function.lines_of_code == 1


def test_blank_line_ends_the_body() -> None:
    lines = extract_indented_body("def g():\n    a = 1\n\n    b = 2\n", len("def g():"))

    assert lines == ["    a = 1"]


def test_body_must_be_deeper_than_header() -> None:
    content = "    def method(self):\n    pass\n"
    assert extract_indented_body(content, content.index(":") + 1, "    ") == []


def test_nested_definitions_are_reported_separately() -> None:
    facts = _analyze(
        """
        class Service:
            def run(self, job):
                for item in job:
                    if item and item.ready:
                        item.start()
                    elif item is None:
                        continue
        """
    )

    (method,) = facts.functions
    assert method.name == "run"
    assert method.parameters == 2
    # for, if, and, elif
    assert method.cyclomatic_complexity == 5
    assert facts.types == ["Service"]
    assert facts.exports == []


def test_imports_render_from_clauses() -> None:
    facts = _analyze(
        """
        import os
        import json, sys
        from pathlib import Path
        from typing import (
            Any,
            Dict,  # mappings
        )
        from . import sibling
        """
    )

    assert facts.imports == [
        "os",
        "json, sys",
        "Path from pathlib",
        "Any, Dict from typing",
        "sibling from .",
    ]


def test_summary_triage_skips_six_line_functions() -> None:
    analyzer = PythonAnalyzer()
    body = "\n".join(f"    step_{index}()" for index in range(6))
    short = analyzer.analyze(f"def short():\n{body}\n").functions[0]
    long = analyzer.analyze(f"def long():\n{body}\n    step_6()\n").functions[0]

    assert short.lines_of_code == 6
    assert long.lines_of_code == 7
    assert analyzer.build_summary_prompt(short) is None
    prompt = analyzer.build_summary_prompt(long)
    assert prompt is not None
    assert prompt.startswith("Summarize the following Python function:")
    assert "Signature: def long():" in prompt
    assert "step_6()" in prompt
