"""Tests for the shared function metrics helpers."""

from __future__ import annotations

import pytest

from folder_summary.analyzers import metrics


def test_textual_complexity_counts_whole_words_and_operators() -> None:
    pattern = metrics.decision_point_pattern(("if", "for"), operators=("&&", "||"))

    assert metrics.textual_complexity("", pattern) == 1
    assert metrics.textual_complexity("if (a && b || c) { for (;;) {} }", pattern) == 5
    # Identifiers that merely contain a keyword are not decision points.
    assert metrics.textual_complexity("const iffy = format(x);", pattern) == 1


def test_decision_point_pattern_prefers_longest_keyword() -> None:
    pattern = metrics.decision_point_pattern(("if", "elif"))

    assert metrics.textual_complexity("if a:\n    pass\nelif b:\n    pass", pattern) == 3


def test_decision_point_pattern_requires_alternatives() -> None:
    with pytest.raises(ValueError):
        metrics.decision_point_pattern(())


def test_split_parameters_keeps_nested_commas_together() -> None:
    parts = metrics.split_parameters("a: Dict[str, int], b=f(1, 2), c='x,y', d")

    assert parts == ["a: Dict[str, int]", "b=f(1, 2)", "c='x,y'", "d"]


def test_split_parameters_ignores_arrow_types() -> None:
    parts = metrics.split_parameters("cb: (x: number) => void, other: string")

    assert parts == ["cb: (x: number) => void", "other: string"]


def test_count_parameters_skips_bare_markers() -> None:
    assert metrics.count_parameters("a, /, b, *, c") == 3
    assert metrics.count_parameters("") == 0
    assert metrics.count_parameters("\n    url,\n    timeout,\n") == 2


def test_annotation_types_drops_defaults_and_unannotated() -> None:
    types = metrics.annotation_types("a: int = 3, b, c: List[str], cb: (x: number) => void")

    assert types == "int, List[str], (x: number) => void"


def test_signature_types_extracts_colon_segments() -> None:
    assert metrics.signature_types("(value: i32, label: &str)") == "i32, &str"
    assert metrics.signature_types("()") == ""


def test_normalize_parameters_collapses_whitespace() -> None:
    assert metrics.normalize_parameters("\n  a,\n  b:   int\n") == "a, b: int"


def test_leading_width_expands_tabs() -> None:
    assert metrics.leading_width("    x") == 4
    assert metrics.leading_width("\tx") == 8
    assert metrics.leading_width("x") == 0
